"""
Meeting Orchestrator - keeps meeting records and calendar events in step
"""
import logging
import time
from typing import Any, Dict, List, Optional, Union

from config.settings import Config
from src.calendar.calendar_gateway import CalendarGateway
from src.meetings.meeting_store import InMemoryMeetingStore, MeetingStore
from src.meetings.models import CalendarEventResult, Meeting, MeetingRequest, MeetingStatus
from utils.datetime_utils import parse_date
from utils.errors import (
    InvalidDateError,
    MissingCalendarReferenceError,
    NotFoundError,
    ScheduleError,
)
from utils.meeting_logger import MeetingLogger

logger = logging.getLogger(__name__)

PLACEHOLDER_EVENT_PREFIX = "mock-event-"

MeetingInput = Union[MeetingRequest, Dict[str, Any]]


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    encoded = ""
    while number:
        number, remainder = divmod(number, 36)
        encoded = digits[remainder] + encoded
    return encoded or "0"


def placeholder_calendar_event() -> CalendarEventResult:
    """Synthetic event reference used when the calendar is unavailable offline"""
    millis = int(time.time() * 1000)
    return CalendarEventResult(
        event_id=f"{PLACEHOLDER_EVENT_PREFIX}{millis}",
        meet_link=f"{Config.MEET_LINK_BASE}/mock-link-{_base36(millis)[2:7]}",
    )


class MeetingOrchestrator:
    """
    Sequences calendar writes and meeting store writes for one operation.

    The two writes are not atomic: a failure between them is logged and
    reported to the caller, never repaired automatically.
    """

    def __init__(self, calendar_gateway: CalendarGateway, meeting_store: MeetingStore,
                 allow_calendar_fallback: bool = False):
        self.calendar_gateway = calendar_gateway
        self.meeting_store = meeting_store
        self.allow_calendar_fallback = allow_calendar_fallback

    @staticmethod
    def _as_request(meeting_data: MeetingInput) -> MeetingRequest:
        if isinstance(meeting_data, MeetingRequest):
            return meeting_data
        return MeetingRequest.from_dict(meeting_data or {})

    def _load(self, meeting_id: str) -> Meeting:
        meeting = self.meeting_store.get(meeting_id)
        if meeting is None:
            raise NotFoundError(f"Meeting {meeting_id} not found")
        return meeting

    def _create_event_or_placeholder(self, request: MeetingRequest) -> CalendarEventResult:
        try:
            return self.calendar_gateway.create(request)
        except InvalidDateError:
            raise
        except Exception as e:
            if not self.allow_calendar_fallback:
                raise
            placeholder = placeholder_calendar_event()
            MeetingLogger.log_calendar_fallback(e, placeholder.event_id, placeholder.meet_link)
            return placeholder

    def schedule_meeting(self, meeting_data: MeetingInput) -> Meeting:
        """Create the calendar event, then persist the meeting record"""
        started = time.time()
        request = self._as_request(meeting_data)
        MeetingLogger.log_schedule_request(request.to_dict())

        try:
            event = self._create_event_or_placeholder(request)
            start_time = parse_date(request.date_time)

            record = {
                "title": request.title,
                "description": request.description or "",
                "dateTime": start_time,
                "participants": list(request.participants),
                "status": MeetingStatus.SCHEDULED.value,
                "calendarEventId": event.event_id,
            }
            if event.meet_link:
                record["meetLink"] = event.meet_link
            if request.user_id:
                record["userId"] = request.user_id

            try:
                meeting = self.meeting_store.create(record)
            except Exception as e:
                MeetingLogger.log_orphaned_event(event.event_id, e)
                raise
        except Exception as e:
            MeetingLogger.log_operation_summary("SCHEDULE", None, False, time.time() - started)
            raise ScheduleError("Failed to schedule meeting", cause=e) from e

        MeetingLogger.log_meeting_saved(meeting.id, meeting.calendar_event_id, meeting.meet_link)
        MeetingLogger.log_operation_summary("SCHEDULE", meeting.id, True, time.time() - started)
        return meeting

    def update_meeting(self, meeting_id: str, meeting_data: MeetingInput) -> Meeting:
        """Patch the calendar event, then overwrite the editable fields"""
        started = time.time()
        request = self._as_request(meeting_data)
        existing = self._load(meeting_id)

        if not existing.calendar_event_id:
            raise MissingCalendarReferenceError(
                f"Calendar event ID not found for meeting {meeting_id}")

        start_time = parse_date(request.date_time)
        self.calendar_gateway.update(existing.calendar_event_id, request)

        # status, meetLink and calendarEventId are left as they are
        changes = {
            "title": request.title,
            "description": request.description or "",
            "dateTime": start_time,
            "participants": list(request.participants),
        }
        try:
            meeting = self.meeting_store.update(meeting_id, changes)
        except Exception as e:
            MeetingLogger.log_stale_record(meeting_id, existing.calendar_event_id, e)
            raise

        MeetingLogger.log_operation_summary("UPDATE", meeting_id, True, time.time() - started)
        return meeting

    def delete_meeting(self, meeting_id: str) -> None:
        """Delete the calendar event first; the record goes only if that worked"""
        started = time.time()
        existing = self._load(meeting_id)

        if existing.calendar_event_id:
            self.calendar_gateway.delete(existing.calendar_event_id)
            logger.info(f"Deleted calendar event with ID: {existing.calendar_event_id}")

        self.meeting_store.delete(meeting_id)
        MeetingLogger.log_operation_summary("DELETE", meeting_id, True, time.time() - started)

    def get_meetings(self, user_id: Optional[str] = None) -> List[Meeting]:
        meetings = self.meeting_store.list(user_id=user_id)
        logger.info(f"Retrieved {len(meetings)} meetings"
                    + (f" for user {user_id}" if user_id else ""))
        return meetings

    def create_calendar_event(self, meeting_data: MeetingInput) -> CalendarEventResult:
        return self.calendar_gateway.create(self._as_request(meeting_data))

    def delete_calendar_event(self, event_id: str) -> None:
        self.calendar_gateway.delete(event_id)


def build_calendar_gateway(config: Config) -> CalendarGateway:
    """Pick the calendar implementation once, at process start"""
    if config.USE_MOCK_CALENDAR:
        from src.calendar.mock_calendar_gateway import MockCalendarGateway
        logger.info("📂 Calendar Mode: Mock")
        return MockCalendarGateway()

    from src.calendar.google_calendar_gateway import GoogleCalendarGateway
    logger.info(f"📂 Calendar Mode: Real (calendar {config.CALENDAR_ID})")
    return GoogleCalendarGateway(config)


def build_meeting_store(config: Config) -> MeetingStore:
    if config.USE_MEMORY_STORE:
        logger.info("🗄️  Store: in-memory")
        return InMemoryMeetingStore()

    from src.meetings.firestore_store import FirestoreMeetingStore
    return FirestoreMeetingStore.from_config(config)


def build_orchestrator(config: Config) -> MeetingOrchestrator:
    return MeetingOrchestrator(
        calendar_gateway=build_calendar_gateway(config),
        meeting_store=build_meeting_store(config),
        allow_calendar_fallback=config.USE_MOCK_CALENDAR,
    )
