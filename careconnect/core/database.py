"""Database configuration and session management."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator

from careconnect.core.config import settings


def _connect_args(url: str) -> dict:
    if url.startswith("postgresql"):
        return {"connect_timeout": 20}   # TCP connection timeout (cold start)
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# Create engine
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Verify connections before use
    connect_args=_connect_args(settings.DATABASE_URL),
    echo=settings.ENVIRONMENT == "development"
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Usage:
        @app.get("/items/")
        def read_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
