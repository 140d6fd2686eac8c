"""In-memory cache for caregiver task lists."""
import threading
from typing import Any, Dict, Optional

# Every view that changes when a survey or check-in is submitted
TASK_LIST_PREFIXES = (
    "/caregiver/assignments",
    "/caregiver/surveys/pending",
    "/caregiver/checkins",
    "/caregiver/patients",
)


class TaskListCache:
    """Responses keyed by request path (with query string)."""

    def __init__(self):
        self._entries: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def invalidate(self, *prefixes: str) -> int:
        """Drop every entry whose key starts with one of ``prefixes``; returns count dropped."""
        with self._lock:
            stale = [key for key in self._entries if key.startswith(prefixes)]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def invalidate_task_lists(self) -> int:
        return self.invalidate(*TASK_LIST_PREFIXES)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
