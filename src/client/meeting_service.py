"""
Client-side meeting service

Callers get the same four operations whether meetings live behind the
callable endpoints (remote mode) or in a local JSON store (local mode).
"""
import json
import logging
import time
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

import requests

from config.settings import Config
from src.client.local_storage import LocalStorage
from src.meetings.models import Meeting, MeetingRequest, MeetingStatus
from utils.datetime_utils import parse_date, to_iso
from utils.errors import InvalidDateError

logger = logging.getLogger(__name__)

MeetingInput = Union[MeetingRequest, Dict[str, Any]]


class MeetingServiceError(Exception):
    """A meeting operation failed on the client side or was rejected remotely"""


def _as_request(meeting_data: MeetingInput) -> MeetingRequest:
    if isinstance(meeting_data, MeetingRequest):
        return meeting_data
    return MeetingRequest.from_dict(meeting_data or {})


class MeetingService(ABC):
    @abstractmethod
    def schedule_meeting(self, meeting_data: MeetingInput) -> str:
        """Create a meeting and return its id"""

    @abstractmethod
    def get_meetings(self) -> List[Meeting]:
        """All meetings, newest first"""

    @abstractmethod
    def delete_meeting(self, meeting_id: str) -> None:
        pass

    @abstractmethod
    def update_meeting(self, meeting_id: str, meeting_data: MeetingInput) -> None:
        pass


class CallableClient:
    """Calls a named endpoint with the ``{"data": ...}`` envelope"""

    def __init__(self, base_url: str, session=None, timeout: float = Config.API_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def call(self, name: str, data: Any = None) -> Dict[str, Any]:
        url = f"{self.base_url}/{name}"
        try:
            response = self.session.post(url, json={"data": data}, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise MeetingServiceError(f"{name} timed out") from e
        except requests.exceptions.RequestException as e:
            raise MeetingServiceError(f"{name} request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise MeetingServiceError(
                f"{name} returned an invalid response (HTTP {response.status_code})") from e

        if not isinstance(body, dict):
            raise MeetingServiceError(
                f"{name} returned an invalid response (HTTP {response.status_code})")

        if "error" in body:
            error = body["error"]
            if not isinstance(error, dict):
                raise MeetingServiceError(str(error or f"HTTP {response.status_code}"))
            message = error.get("message", "Unknown error")
            if error.get("details"):
                message = f"{message}: {error['details']}"
            raise MeetingServiceError(message)

        result = body.get("result")
        if result is None:
            return {}
        if not isinstance(result, dict):
            raise MeetingServiceError(
                f"{name} returned an invalid result (HTTP {response.status_code})")
        return result


class RemoteMeetingService(MeetingService):
    """Meetings handled by the backend callable endpoints"""

    def __init__(self, client: CallableClient):
        self.client = client

    def schedule_meeting(self, meeting_data: MeetingInput) -> str:
        result = self.client.call("scheduleMeeting", _as_request(meeting_data).to_dict())
        if not result.get("success"):
            raise MeetingServiceError(result.get("error") or "Failed to schedule meeting")
        return result["id"]

    def get_meetings(self) -> List[Meeting]:
        result = self.client.call("getMeetings", {})
        if not result.get("success"):
            raise MeetingServiceError(result.get("error") or "Failed to get meetings")
        return [Meeting.from_dict(item) for item in result.get("meetings", [])]

    def delete_meeting(self, meeting_id: str) -> None:
        result = self.client.call("deleteMeeting", {"meetingId": meeting_id})
        if not result.get("success"):
            raise MeetingServiceError(result.get("error") or "Failed to delete meeting")

    def update_meeting(self, meeting_id: str, meeting_data: MeetingInput) -> None:
        result = self.client.call("updateMeeting", {
            "meetingId": meeting_id,
            "meetingData": _as_request(meeting_data).to_dict(),
        })
        if not result.get("success"):
            raise MeetingServiceError(result.get("error") or "Failed to update meeting")


class LocalMeetingService(MeetingService):
    """Meetings kept in local storage with a mock Meet link

    Each call sleeps for a moment to behave like a network round trip.
    """

    STORAGE_KEY = "meetings"
    LATENCY = {"schedule": 1.0, "list": 0.5, "delete": 0.3, "update": 1.0}

    def __init__(self, storage: LocalStorage, mock_meet_link: str = Config.MOCK_MEET_LINK,
                 latency_scale: float = 1.0, sleep: Callable[[float], None] = time.sleep):
        self.storage = storage
        self.mock_meet_link = mock_meet_link
        self.latency_scale = latency_scale
        self._sleep = sleep

    def _simulate_latency(self, operation: str):
        delay = self.LATENCY[operation] * self.latency_scale
        if delay > 0:
            self._sleep(delay)

    def _decode(self, stored: Optional[str]) -> List[Dict[str, Any]]:
        if not stored:
            return []
        try:
            meetings = json.loads(stored)
        except ValueError as e:
            raise MeetingServiceError(f"Stored meetings are unreadable: {e}") from e
        if not isinstance(meetings, list):
            raise MeetingServiceError("Stored meetings are unreadable: expected a list")
        return meetings

    def _load(self) -> List[Dict[str, Any]]:
        return self._decode(self.storage.get_item(self.STORAGE_KEY))

    def _modify(self, change: Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]) -> None:
        """Apply ``change`` to the stored list under the storage lock"""
        self.storage.update_item(
            self.STORAGE_KEY, lambda stored: json.dumps(change(self._decode(stored))))

    @staticmethod
    def _parse_start(request: MeetingRequest) -> datetime:
        try:
            return parse_date(request.date_time)
        except InvalidDateError as e:
            raise MeetingServiceError(str(e)) from e

    def schedule_meeting(self, meeting_data: MeetingInput) -> str:
        request = _as_request(meeting_data)
        start_time = self._parse_start(request)
        now = datetime.now(timezone.utc)

        meeting = Meeting(
            id=f"meeting_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:6]}",
            title=request.title,
            date_time=start_time,
            description=request.description or "",
            participants=list(request.participants),
            status=MeetingStatus.SCHEDULED,
            meet_link=self.mock_meet_link,
            user_id=request.user_id,
            created_at=now,
            updated_at=now,
        )

        self._simulate_latency("schedule")
        self._modify(lambda meetings: meetings + [meeting.to_dict()])
        logger.info(f"💾 LOCAL: Scheduled meeting {meeting.id}")
        return meeting.id

    def get_meetings(self) -> List[Meeting]:
        self._simulate_latency("list")
        meetings = [Meeting.from_dict(item) for item in self._load()]
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        # Later entries win ties on createdAt
        ordered = sorted(enumerate(meetings),
                         key=lambda item: (item[1].created_at or oldest, item[0]),
                         reverse=True)
        return [meeting for _, meeting in ordered]

    def delete_meeting(self, meeting_id: str) -> None:
        self._simulate_latency("delete")

        def remove(meetings):
            remaining = [item for item in meetings if item.get("id") != meeting_id]
            if len(remaining) == len(meetings):
                raise MeetingServiceError("Meeting not found")
            return remaining

        self._modify(remove)
        logger.info(f"💾 LOCAL: Deleted meeting {meeting_id}")

    def update_meeting(self, meeting_id: str, meeting_data: MeetingInput) -> None:
        request = _as_request(meeting_data)
        start_time = self._parse_start(request)

        self._simulate_latency("update")

        def apply(meetings):
            for item in meetings:
                if item.get("id") == meeting_id:
                    item.update({
                        "title": request.title,
                        "description": request.description or "",
                        "dateTime": to_iso(start_time),
                        "participants": list(request.participants),
                        "updatedAt": to_iso(datetime.now(timezone.utc)),
                    })
                    return meetings
            raise MeetingServiceError(f"Meeting {meeting_id} not found")

        self._modify(apply)
        logger.info(f"💾 LOCAL: Updated meeting {meeting_id}")


def create_meeting_service(config: Config, session=None) -> MeetingService:
    """Pick remote or local mode once, from the feature flag"""
    if config.USE_REMOTE_BACKEND:
        logger.info(f"🚩 Meeting service: remote ({config.FUNCTIONS_URL})")
        client = CallableClient(config.FUNCTIONS_URL, session=session, timeout=config.API_TIMEOUT)
        return RemoteMeetingService(client)

    logger.info(f"🚩 Meeting service: local ({config.LOCAL_STORAGE_PATH})")
    return LocalMeetingService(
        LocalStorage(config.LOCAL_STORAGE_PATH),
        mock_meet_link=config.MOCK_MEET_LINK,
        latency_scale=config.LOCAL_LATENCY_SCALE,
    )
