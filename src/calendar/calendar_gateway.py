"""
Calendar gateway interface and the event body shared by all implementations
"""
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict

from config.settings import Config
from src.meetings.models import CalendarEventResult, MeetingRequest
from utils.datetime_utils import format_date_range


def build_event_body(meeting: MeetingRequest) -> Dict[str, Any]:
    """Summary, description, one-hour UTC window and attendees"""
    date_range = format_date_range(meeting)
    return {
        "summary": meeting.title,
        "description": meeting.description,
        "start": date_range["start"],
        "end": date_range["end"],
        "attendees": [{"email": email} for email in meeting.participants],
    }


def build_new_event_body(meeting: MeetingRequest) -> Dict[str, Any]:
    """Event body for insertion: adds the Meet request and fixed reminders"""
    event = build_event_body(meeting)
    event["conferenceData"] = {
        "createRequest": {
            "requestId": f"meeting-{uuid.uuid4().hex}",
            "conferenceSolutionKey": {"type": "hangoutsMeet"},
        }
    }
    event["reminders"] = {
        "useDefault": False,
        "overrides": [
            {"method": "email", "minutes": Config.EMAIL_REMINDER_MINUTES},
            {"method": "popup", "minutes": Config.POPUP_REMINDER_MINUTES},
        ],
    }
    return event


class CalendarGateway(ABC):
    """Create, patch and delete one calendar event per meeting

    Every operation requires ``authorize()``; implementations call it
    themselves so callers never deal with credentials.
    """

    @abstractmethod
    def authorize(self) -> None:
        """Establish credentials; safe to call repeatedly"""

    @abstractmethod
    def create(self, meeting: MeetingRequest) -> CalendarEventResult:
        """Insert an event with a generated Meet link"""

    @abstractmethod
    def update(self, event_id: str, meeting: MeetingRequest) -> CalendarEventResult:
        """Patch title, description, time window and attendees"""

    @abstractmethod
    def delete(self, event_id: str) -> None:
        """Remove the event"""
