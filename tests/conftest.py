import sys
from pathlib import Path
from urllib.parse import urlparse

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import Config
from src.api.flask_server import MeetingSchedulerAPI
from src.calendar.mock_calendar_gateway import MockCalendarGateway
from src.client.meeting_service import CallableClient, RemoteMeetingService
from src.meetings.meeting_store import InMemoryMeetingStore
from src.scheduler.meeting_orchestrator import MeetingOrchestrator
from utils.errors import CalendarOperationError, PersistenceError


class FlakyCalendarGateway(MockCalendarGateway):
    """Mock calendar whose operations can be switched to fail"""

    def __init__(self):
        super().__init__()
        self.fail_create = False
        self.fail_update = False
        self.fail_delete = False
        self.calls = []

    def create(self, meeting):
        self.calls.append(("create", None))
        if self.fail_create:
            raise CalendarOperationError("Calendar event creation failed: backend unavailable")
        return super().create(meeting)

    def update(self, event_id, meeting):
        self.calls.append(("update", event_id))
        if self.fail_update:
            raise CalendarOperationError(f"Calendar event update failed: {event_id} not found")
        return super().update(event_id, meeting)

    def delete(self, event_id):
        self.calls.append(("delete", event_id))
        if self.fail_delete:
            raise CalendarOperationError(f"Calendar event deletion failed: {event_id}")
        return super().delete(event_id)


class FlakyMeetingStore(InMemoryMeetingStore):
    def __init__(self):
        super().__init__()
        self.fail_create = False
        self.fail_update = False

    def create(self, record):
        if self.fail_create:
            raise PersistenceError("Failed to create meeting document: deadline exceeded")
        return super().create(record)

    def update(self, meeting_id, changes):
        if self.fail_update:
            raise PersistenceError(f"Failed to update meeting {meeting_id}: deadline exceeded")
        return super().update(meeting_id, changes)


class FlaskTestResponse:
    def __init__(self, response):
        self.status_code = response.status_code
        self._response = response

    def json(self):
        payload = self._response.get_json(silent=True)
        if payload is None:
            raise ValueError("response is not JSON")
        return payload


class FlaskTestSession:
    """Routes CallableClient requests into a Flask test client"""

    def __init__(self, test_client):
        self.test_client = test_client
        self.requests = []

    def post(self, url, json=None, timeout=None):
        path = urlparse(url).path
        self.requests.append((path, json))
        return FlaskTestResponse(self.test_client.post(path, json=json))


@pytest.fixture
def config(tmp_path):
    return Config(
        ENV="test",
        USE_MOCK_CALENDAR=True,
        USE_MEMORY_STORE=True,
        USE_REMOTE_BACKEND=False,
        LOCAL_STORAGE_PATH=str(tmp_path / "local_storage.json"),
        LOCAL_LATENCY_SCALE=0,
        FUNCTIONS_URL="http://testserver",
    )


@pytest.fixture
def gateway():
    return FlakyCalendarGateway()


@pytest.fixture
def store():
    return FlakyMeetingStore()


@pytest.fixture
def orchestrator(gateway, store):
    return MeetingOrchestrator(gateway, store, allow_calendar_fallback=False)


@pytest.fixture
def offline_orchestrator(gateway, store):
    return MeetingOrchestrator(gateway, store, allow_calendar_fallback=True)


@pytest.fixture
def api(config, orchestrator):
    return MeetingSchedulerAPI(config, orchestrator)


@pytest.fixture
def client(api):
    api.app.config["TESTING"] = True
    return api.app.test_client()


@pytest.fixture
def remote_service(client):
    return RemoteMeetingService(CallableClient("http://testserver", session=FlaskTestSession(client)))


@pytest.fixture
def meeting_data():
    return {
        "title": "Quarterly Planning",
        "description": "Roadmap review",
        "dateTime": "2025-01-01T10:00:00Z",
        "participants": ["alice@example.com", "bob@example.com"],
    }
