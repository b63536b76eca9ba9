"""
Mock calendar gateway for running without Google Calendar credentials
"""
import itertools
import logging
import threading
from typing import Any, Dict

from config.settings import Config
from src.calendar.calendar_gateway import CalendarGateway, build_event_body, build_new_event_body
from src.meetings.models import CalendarEventResult, MeetingRequest

logger = logging.getLogger(__name__)

MOCK_EVENT_PREFIX = "mock-"


def mock_meet_link(event_id: str) -> str:
    return f"{Config.MEET_LINK_BASE}/mock-link-{event_id[-5:]}"


class MockCalendarGateway(CalendarGateway):
    """Deterministic offline calendar

    Event ids come from a counter, so the same sequence of calls always
    produces the same ids and Meet links.
    """

    def __init__(self):
        self.events: Dict[str, Dict[str, Any]] = {}
        self.authorized = False
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def authorize(self) -> None:
        if not self.authorized:
            logger.info("🔧 Using mock calendar - no authentication needed")
            self.authorized = True

    def _next_event_id(self) -> str:
        return f"{MOCK_EVENT_PREFIX}{next(self._counter):06d}"

    def create(self, meeting: MeetingRequest) -> CalendarEventResult:
        self.authorize()
        event = build_new_event_body(meeting)

        with self._lock:
            event_id = self._next_event_id()
            event.update({
                "id": event_id,
                "status": "confirmed",
                "hangoutLink": mock_meet_link(event_id),
            })
            self.events[event_id] = event

        logger.info(f"📋 MOCK: Created event {event_id}: {meeting.title}")
        return CalendarEventResult(event_id=event_id, meet_link=event["hangoutLink"])

    def update(self, event_id: str, meeting: MeetingRequest) -> CalendarEventResult:
        self.authorize()
        changes = build_event_body(meeting)

        # Placeholder ids from the scheduling fallback were never created here
        with self._lock:
            event = self.events.setdefault(event_id, {"id": event_id, "status": "confirmed"})
            event.update(changes)

        logger.info(f"📋 MOCK: Updated event {event_id}")
        return CalendarEventResult(event_id=event_id, meet_link=event.get("hangoutLink"))

    def delete(self, event_id: str) -> None:
        self.authorize()

        with self._lock:
            self.events.pop(event_id, None)

        logger.info(f"🔧 MOCK: Simulated delete of event {event_id}")
