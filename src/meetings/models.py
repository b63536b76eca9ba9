"""
Meeting data structures shared by the backend and the client service
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from utils.datetime_utils import DateInput, parse_date, to_iso


class MeetingStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class MeetingRequest:
    """Meeting fields as submitted by a caller"""

    title: str
    date_time: DateInput
    description: str = ""
    participants: List[str] = field(default_factory=list)
    user_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeetingRequest":
        return cls(
            title=data.get("title") or "",
            date_time=data.get("dateTime"),
            description=data.get("description") or "",
            participants=list(data.get("participants") or []),
            user_id=data.get("userId"),
        )

    def to_dict(self) -> Dict[str, Any]:
        date_time = self.date_time
        if isinstance(date_time, datetime):
            date_time = to_iso(date_time)
        payload = {
            "title": self.title,
            "description": self.description,
            "dateTime": date_time,
            "participants": list(self.participants),
        }
        if self.user_id:
            payload["userId"] = self.user_id
        return payload


@dataclass
class CalendarEventResult:
    event_id: str
    meet_link: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"eventId": self.event_id, "meetLink": self.meet_link}


@dataclass
class Meeting:
    id: str
    title: str
    date_time: datetime
    description: str = ""
    participants: List[str] = field(default_factory=list)
    status: MeetingStatus = MeetingStatus.SCHEDULED
    calendar_event_id: Optional[str] = None
    meet_link: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        """Meetings without a Meet link are still waiting to be scheduled"""
        return not self.meet_link

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Meeting":
        created_at = data.get("createdAt")
        updated_at = data.get("updatedAt")
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            date_time=parse_date(data.get("dateTime")),
            description=data.get("description") or "",
            participants=list(data.get("participants") or []),
            status=MeetingStatus(data.get("status") or MeetingStatus.SCHEDULED.value),
            calendar_event_id=data.get("calendarEventId") or None,
            meet_link=data.get("meetLink") or None,
            user_id=data.get("userId"),
            created_at=parse_date(created_at) if created_at else None,
            updated_at=parse_date(updated_at) if updated_at else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (camelCase keys, ISO timestamps)"""
        payload = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dateTime": to_iso(self.date_time),
            "participants": list(self.participants),
            "status": self.status.value,
            "calendarEventId": self.calendar_event_id,
            "createdAt": to_iso(self.created_at) if self.created_at else None,
            "updatedAt": to_iso(self.updated_at) if self.updated_at else None,
        }
        if self.meet_link:
            payload["meetLink"] = self.meet_link
        if self.user_id:
            payload["userId"] = self.user_id
        return payload
