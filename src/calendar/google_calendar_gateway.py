"""
Google Calendar integration for the Meeting Scheduler
"""
import logging
import threading
from typing import Any, Dict, Optional

import google.auth.transport.requests
import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from config.settings import Config
from src.calendar.calendar_gateway import CalendarGateway, build_event_body, build_new_event_body
from src.meetings.models import CalendarEventResult, MeetingRequest
from utils.errors import CalendarOperationError

logger = logging.getLogger(__name__)

# Provider rejections and transport failures
CALENDAR_API_ERRORS = (HttpError, OSError, httplib2.HttpLib2Error)


class GoogleCalendarGateway(CalendarGateway):
    """Calendar gateway backed by the Google Calendar API v3

    Authenticates with a service account key, impersonating the configured
    user through domain-wide delegation.
    """

    def __init__(self, config: Config, service=None):
        self.config = config
        self.calendar_id = config.CALENDAR_ID
        self._service = service
        self._lock = threading.Lock()

    def _get_credentials(self) -> service_account.Credentials:
        """Load and refresh the service account credentials"""
        try:
            credentials_path = self.config.get_credentials_path()
            credentials = service_account.Credentials.from_service_account_file(
                credentials_path,
                scopes=self.config.CALENDAR_SCOPES,
                subject=self.config.IMPERSONATION_EMAIL,
            )
            credentials.refresh(google.auth.transport.requests.Request())
        except (ValueError, FileNotFoundError) as e:
            logger.error(f"❌ Calendar credentials not available: {e}")
            raise CalendarOperationError(f"Calendar credentials not available: {e}") from e
        except GoogleAuthError as e:
            logger.error(f"❌ Failed to authenticate with Google Calendar API: {e}")
            raise CalendarOperationError(f"Failed to authenticate with Google Calendar API: {e}") from e

        logger.info("✅ Successfully authenticated with Google Calendar API")
        return credentials

    def authorize(self) -> None:
        if self._service is not None:
            return
        with self._lock:
            if self._service is None:
                credentials = self._get_credentials()
                self._service = build("calendar", "v3", credentials=credentials,
                                      cache_discovery=False)

    def _events(self):
        self.authorize()
        return self._service.events()

    @staticmethod
    def _to_result(response: Optional[Dict[str, Any]]) -> CalendarEventResult:
        if not response or not response.get("id"):
            raise CalendarOperationError("Failed to get event ID from calendar response")
        return CalendarEventResult(event_id=response["id"],
                                   meet_link=response.get("hangoutLink") or None)

    def create(self, meeting: MeetingRequest) -> CalendarEventResult:
        event = build_new_event_body(meeting)
        events = self._events()

        try:
            response = events.insert(
                calendarId=self.calendar_id,
                body=event,
                conferenceDataVersion=1,
                sendUpdates="all",
            ).execute()
        except CALENDAR_API_ERRORS as e:
            logger.error(f"Calendar event creation failed: {e}")
            raise CalendarOperationError(f"Calendar event creation failed: {e}") from e

        result = self._to_result(response)
        logger.info(f"📅 Created calendar event {result.event_id} "
                    f"(Meet link: {result.meet_link or 'none'})")
        return result

    def update(self, event_id: str, meeting: MeetingRequest) -> CalendarEventResult:
        event = build_event_body(meeting)
        events = self._events()

        try:
            response = events.patch(
                calendarId=self.calendar_id,
                eventId=event_id,
                body=event,
                sendUpdates="all",
            ).execute()
        except CALENDAR_API_ERRORS as e:
            logger.error(f"Calendar event update failed for {event_id}: {e}")
            raise CalendarOperationError(f"Calendar event update failed: {e}") from e

        result = self._to_result(response)
        logger.info(f"📅 Updated calendar event {result.event_id}")
        return result

    def delete(self, event_id: str) -> None:
        events = self._events()

        try:
            events.delete(
                calendarId=self.calendar_id,
                eventId=event_id,
                sendUpdates="all",
            ).execute()
        except CALENDAR_API_ERRORS as e:
            logger.error(f"Calendar event deletion failed for {event_id}: {e}")
            raise CalendarOperationError(f"Calendar event deletion failed: {e}") from e

        logger.info(f"🗑️  Deleted calendar event with ID: {event_id}")
