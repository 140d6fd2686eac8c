"""initial_survey_schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None

QUESTION_TYPES = ('text', 'number', 'boolean', 'date', 'single_choice', 'multi_choice')
SURVEY_STATUSES = ('draft', 'published', 'archived')
ASSIGNMENT_STATUSES = ('pending', 'completed', 'cancelled')


def upgrade() -> None:
    op.create_table(
        'caregivers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('state', sa.String(length=2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_caregivers_id', 'caregivers', ['id'])

    op.create_table(
        'patients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('medicaid_id', sa.String(), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('caregiver_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['caregiver_id'], ['caregivers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_patients_id', 'patients', ['id'])
    op.create_index('ix_patients_caregiver_id', 'patients', ['caregiver_id'])

    op.create_table(
        'surveys',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum(*SURVEY_STATUSES, name='surveystatus'), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_surveys_id', 'surveys', ['id'])
    op.create_index('ix_surveys_title', 'surveys', ['title'])

    op.create_table(
        'survey_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('survey_id', sa.Integer(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('help_text', sa.Text(), nullable=True),
        sa.Column('type', sa.Enum(*QUESTION_TYPES, name='questiontype'), nullable=False),
        sa.Column('required', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('validation', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['survey_id'], ['surveys.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_survey_questions_id', 'survey_questions', ['id'])
    op.create_index('ix_survey_questions_survey_id', 'survey_questions', ['survey_id'])

    op.create_table(
        'survey_options',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('value', sa.String(), nullable=False),
        sa.Column('label', sa.String(), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['question_id'], ['survey_questions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_survey_options_id', 'survey_options', ['id'])
    op.create_index('ix_survey_options_question_id', 'survey_options', ['question_id'])

    op.create_table(
        'weekly_check_ins',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('caregiver_id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('survey_id', sa.Integer(), nullable=True),
        sa.Column('week_start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('week_end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reminders_sent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['caregiver_id'], ['caregivers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['survey_id'], ['surveys.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_weekly_check_ins_id', 'weekly_check_ins', ['id'])
    op.create_index('ix_weekly_check_ins_caregiver_id', 'weekly_check_ins', ['caregiver_id'])
    op.create_index('ix_weekly_check_ins_patient_id', 'weekly_check_ins', ['patient_id'])

    op.create_table(
        'survey_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('survey_id', sa.Integer(), nullable=False),
        sa.Column('caregiver_id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('check_in_id', sa.Integer(), nullable=True),
        sa.Column('due_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.Enum(*ASSIGNMENT_STATUSES, name='assignmentstatus'), nullable=False),
        sa.Column('assigned_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['survey_id'], ['surveys.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['caregiver_id'], ['caregivers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['check_in_id'], ['weekly_check_ins.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_survey_assignments_id', 'survey_assignments', ['id'])
    op.create_index('ix_survey_assignments_survey_id', 'survey_assignments', ['survey_id'])
    op.create_index('ix_survey_assignments_caregiver_id', 'survey_assignments', ['caregiver_id'])
    op.create_index('ix_survey_assignments_patient_id', 'survey_assignments', ['patient_id'])
    op.create_index('ix_survey_assignments_check_in_id', 'survey_assignments', ['check_in_id'])
    op.create_index('ix_survey_assignments_status', 'survey_assignments', ['status'])

    op.create_table(
        'survey_responses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('survey_id', sa.Integer(), nullable=False),
        sa.Column('assignment_id', sa.Integer(), nullable=True),
        sa.Column('check_in_id', sa.Integer(), nullable=True),
        sa.Column('caregiver_id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['survey_id'], ['surveys.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['assignment_id'], ['survey_assignments.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['check_in_id'], ['weekly_check_ins.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['caregiver_id'], ['caregivers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('assignment_id'),
    )
    op.create_index('ix_survey_responses_id', 'survey_responses', ['id'])
    op.create_index('ix_survey_responses_survey_id', 'survey_responses', ['survey_id'])
    op.create_index('ix_survey_responses_check_in_id', 'survey_responses', ['check_in_id'], unique=True)
    op.create_index('ix_survey_responses_caregiver_id', 'survey_responses', ['caregiver_id'])
    op.create_index('ix_survey_responses_patient_id', 'survey_responses', ['patient_id'])

    op.create_table(
        'survey_response_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('response_id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('answer', sa.JSON(), nullable=False),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('answer_number', sa.Float(), nullable=True),
        sa.Column('answer_boolean', sa.Boolean(), nullable=True),
        sa.Column('answer_date', sa.Date(), nullable=True),
        sa.Column('answer_kind', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['response_id'], ['survey_responses.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['survey_questions.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('response_id', 'question_id', name='uq_response_items_question'),
    )
    op.create_index('ix_survey_response_items_id', 'survey_response_items', ['id'])
    op.create_index('ix_survey_response_items_response_id', 'survey_response_items', ['response_id'])
    op.create_index('ix_survey_response_items_question_id', 'survey_response_items', ['question_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('caregiver_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('action_url', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['caregiver_id'], ['caregivers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_caregiver_id', 'notifications', ['caregiver_id'])
    op.create_index('idx_notifications_read_created', 'notifications', ['read', 'created_at'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('survey_response_items')
    op.drop_table('survey_responses')
    op.drop_table('survey_assignments')
    op.drop_table('weekly_check_ins')
    op.drop_table('survey_options')
    op.drop_table('survey_questions')
    op.drop_table('surveys')
    op.drop_table('patients')
    op.drop_table('caregivers')
    sa.Enum(name='assignmentstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='questiontype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='surveystatus').drop(op.get_bind(), checkfirst=True)
