"""
Meeting store interface and the in-memory implementation used offline
"""
import copy
import itertools
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from src.meetings.models import Meeting
from utils.errors import NotFoundError

logger = logging.getLogger(__name__)


def meeting_from_record(meeting_id: str, record: Dict[str, Any]) -> Meeting:
    """Build a Meeting from a stored document"""
    data = dict(record)
    data["id"] = meeting_id
    return Meeting.from_dict(data)


class MeetingStore(ABC):
    """Persistence for meeting records

    Records use the document field names (``title``, ``dateTime``,
    ``calendarEventId`` ...). The store assigns ``id``, ``createdAt`` and
    ``updatedAt``.
    """

    @abstractmethod
    def create(self, record: Dict[str, Any]) -> Meeting:
        """Persist a new meeting and return it as stored"""

    @abstractmethod
    def get(self, meeting_id: str) -> Optional[Meeting]:
        """Return the meeting or None when it does not exist"""

    @abstractmethod
    def update(self, meeting_id: str, changes: Dict[str, Any]) -> Meeting:
        """Overwrite the given fields and bump ``updatedAt``"""

    @abstractmethod
    def delete(self, meeting_id: str) -> None:
        """Remove the meeting record"""

    @abstractmethod
    def list(self, user_id: Optional[str] = None) -> List[Meeting]:
        """All meetings (optionally for one owner), newest first"""


class InMemoryMeetingStore(MeetingStore):
    """Process-local store for tests and offline runs"""

    def __init__(self):
        self._records: Dict[str, Dict[str, Any]] = {}
        self._sequence: Dict[str, int] = {}
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def create(self, record: Dict[str, Any]) -> Meeting:
        meeting_id = uuid.uuid4().hex[:20]
        now = self._now()
        stored = copy.deepcopy(record)
        stored.update({"id": meeting_id, "createdAt": now, "updatedAt": now})

        with self._lock:
            self._records[meeting_id] = stored
            self._sequence[meeting_id] = next(self._counter)

        logger.debug(f"Stored meeting {meeting_id} in memory")
        return meeting_from_record(meeting_id, stored)

    def get(self, meeting_id: str) -> Optional[Meeting]:
        with self._lock:
            record = self._records.get(meeting_id)
            if record is None:
                return None
            record = copy.deepcopy(record)
        return meeting_from_record(meeting_id, record)

    def update(self, meeting_id: str, changes: Dict[str, Any]) -> Meeting:
        with self._lock:
            record = self._records.get(meeting_id)
            if record is None:
                raise NotFoundError(f"Meeting {meeting_id} not found")
            record.update(copy.deepcopy(changes))
            record["updatedAt"] = self._now()
            record = copy.deepcopy(record)
        return meeting_from_record(meeting_id, record)

    def delete(self, meeting_id: str) -> None:
        with self._lock:
            self._records.pop(meeting_id, None)
            self._sequence.pop(meeting_id, None)

    def list(self, user_id: Optional[str] = None) -> List[Meeting]:
        with self._lock:
            records = [
                (meeting_id, copy.deepcopy(record))
                for meeting_id, record in self._records.items()
                if user_id is None or record.get("userId") == user_id
            ]
            order = dict(self._sequence)

        # Ties on createdAt fall back to insertion order
        records.sort(key=lambda item: (item[1]["createdAt"], order[item[0]]), reverse=True)
        return [meeting_from_record(meeting_id, record) for meeting_id, record in records]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
