import pytest

from src.api.flask_server import HttpsError, create_app


def call(client, name, data):
    return client.post(f"/{name}", json={"data": data})


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "healthy"
    assert body["calendar_mode"] == "mock"
    assert body["store_backend"] == "memory"
    assert body["requests_processed"] == 0


def test_schedule_meeting(client, store, meeting_data):
    response = call(client, "scheduleMeeting", meeting_data)

    assert response.status_code == 200
    result = response.get_json()["result"]
    assert result["success"] is True
    assert result["title"] == "Quarterly Planning"
    assert result["dateTime"] == "2025-01-01T10:00:00Z"
    assert result["status"] == "scheduled"
    assert result["calendarEventId"] == "mock-000001"
    assert result["meetLink"] == "https://meet.google.com/mock-link-00001"
    assert store.get(result["id"]) is not None


def test_schedule_meeting_sanitizes_input(client, meeting_data):
    meeting_data["title"] = "  Quarterly   Planning  "
    meeting_data["participants"] = [" alice@example.com "]

    result = call(client, "scheduleMeeting", meeting_data).get_json()["result"]

    assert result["title"] == "Quarterly Planning"
    assert result["participants"] == ["alice@example.com"]


@pytest.mark.parametrize("data", [
    None,
    {"dateTime": "2025-01-01T10:00:00Z"},
    {"title": "No time"},
    {"title": "Bad participants", "dateTime": "2025-01-01T10:00:00Z", "participants": [42]},
])
def test_schedule_meeting_invalid_argument(client, store, data):
    response = call(client, "scheduleMeeting", data)

    assert response.status_code == 400
    error = response.get_json()["error"]
    assert error["status"] == "INVALID_ARGUMENT"
    assert error["message"] == "Failed to schedule meeting"
    assert error["details"]
    assert len(store) == 0


def test_schedule_meeting_internal_error(client, gateway, meeting_data):
    gateway.fail_create = True

    response = call(client, "scheduleMeeting", meeting_data)

    assert response.status_code == 500
    error = response.get_json()["error"]
    assert error["status"] == "INTERNAL"
    assert error["message"] == "Failed to schedule meeting"
    assert "backend unavailable" in error["details"]


def test_schedule_meeting_unparseable_date(client, meeting_data):
    meeting_data["dateTime"] = "tomorrow-ish"

    response = call(client, "scheduleMeeting", meeting_data)

    assert response.status_code == 500
    assert "Invalid date" in response.get_json()["error"]["details"]


def test_get_meetings_newest_first(client, meeting_data):
    first = call(client, "scheduleMeeting", dict(meeting_data, title="First")).get_json()["result"]
    second = call(client, "scheduleMeeting", dict(meeting_data, title="Second")).get_json()["result"]

    result = call(client, "getMeetings", {}).get_json()["result"]

    assert result["success"] is True
    assert [m["id"] for m in result["meetings"]] == [second["id"], first["id"]]


def test_get_meetings_filtered_by_user(client, meeting_data):
    mine = call(client, "scheduleMeeting", dict(meeting_data, userId="u-1")).get_json()["result"]
    call(client, "scheduleMeeting", dict(meeting_data, userId="u-2"))

    result = call(client, "getMeetings", {"userId": "u-1"}).get_json()["result"]

    assert [m["id"] for m in result["meetings"]] == [mine["id"]]
    assert result["meetings"][0]["userId"] == "u-1"


def test_get_meetings_store_failure(client, store, monkeypatch):
    def broken_list(user_id=None):
        raise RuntimeError("store offline")

    monkeypatch.setattr(store, "list", broken_list)

    response = call(client, "getMeetings", None)

    assert response.status_code == 200
    assert response.get_json()["result"] == {"success": False, "meetings": [], "error": "store offline"}


def test_update_meeting(client, meeting_data):
    scheduled = call(client, "scheduleMeeting", meeting_data).get_json()["result"]

    result = call(client, "updateMeeting", {
        "meetingId": scheduled["id"],
        "meetingData": dict(meeting_data, title="Renamed", dateTime="2025-01-03T08:00:00Z"),
    }).get_json()["result"]

    assert result["success"] is True
    assert result["meetingId"] == scheduled["id"]
    assert result["meeting"]["title"] == "Renamed"
    assert result["meeting"]["dateTime"] == "2025-01-03T08:00:00Z"
    assert result["meeting"]["meetLink"] == scheduled["meetLink"]


@pytest.mark.parametrize("data", [None, {"meetingId": "abc"}, {"meetingData": {"title": "x"}}])
def test_update_meeting_missing_fields(client, data):
    result = call(client, "updateMeeting", data).get_json()["result"]

    assert result["success"] is False
    assert result["error"] == "Missing required fields: meetingId or meetingData"


def test_update_unknown_meeting(client, meeting_data):
    result = call(client, "updateMeeting", {"meetingId": "nope", "meetingData": meeting_data}).get_json()["result"]

    assert result == {"success": False, "meetingId": "nope", "error": "Meeting nope not found"}


def test_delete_meeting(client, gateway, store, meeting_data):
    scheduled = call(client, "scheduleMeeting", meeting_data).get_json()["result"]

    result = call(client, "deleteMeeting", {"meetingId": scheduled["id"]}).get_json()["result"]

    assert result == {"success": True}
    assert store.get(scheduled["id"]) is None
    assert scheduled["calendarEventId"] not in gateway.events


def test_delete_meeting_errors(client):
    assert call(client, "deleteMeeting", {}).get_json()["result"] == {
        "success": False, "error": "Missing required field: meetingId"}
    assert call(client, "deleteMeeting", {"meetingId": "nope"}).get_json()["result"] == {
        "success": False, "error": "Meeting not found"}


def test_delete_meeting_keeps_record_when_calendar_fails(client, gateway, store, meeting_data):
    scheduled = call(client, "scheduleMeeting", meeting_data).get_json()["result"]
    gateway.fail_delete = True

    result = call(client, "deleteMeeting", {"meetingId": scheduled["id"]}).get_json()["result"]

    assert result["success"] is False
    assert "Calendar event deletion failed" in result["error"]
    assert store.get(scheduled["id"]) is not None


def test_create_and_delete_calendar_event(client, gateway, store, meeting_data):
    created = call(client, "createCalendarEvent", meeting_data).get_json()["result"]

    assert created["success"] is True
    assert created["eventId"] in gateway.events
    assert created["meetLink"].startswith("https://meet.google.com/")
    assert len(store) == 0

    deleted = call(client, "deleteCalendarEvent", {"eventId": created["eventId"]}).get_json()["result"]
    assert deleted == {"success": True}
    assert created["eventId"] not in gateway.events


def test_calendar_event_errors(client, gateway, meeting_data):
    gateway.fail_create = True
    created = call(client, "createCalendarEvent", meeting_data).get_json()["result"]
    assert created["success"] is False
    assert created["eventId"] == ""

    assert call(client, "deleteCalendarEvent", {}).get_json()["result"] == {
        "success": False, "error": "Missing required field: eventId"}


def test_requests_are_counted(client, meeting_data):
    call(client, "scheduleMeeting", meeting_data)
    call(client, "getMeetings", {})

    assert client.get("/health").get_json()["requests_processed"] == 2


def test_non_object_body_is_rejected(client):
    response = client.post("/getMeetings", json=["not", "an", "object"])

    assert response.status_code == 400
    assert response.get_json()["error"]["status"] == "INVALID_ARGUMENT"


def test_unknown_route_and_wrong_method(client):
    missing = client.post("/doesNotExist", json={"data": {}})
    assert missing.status_code == 404
    assert missing.get_json()["error"]["status"] == "NOT_FOUND"

    wrong_method = client.get("/scheduleMeeting")
    assert wrong_method.status_code == 405


def test_https_error_serialization():
    error = HttpsError("invalid-argument", "Bad input", "title missing")

    assert error.http_status == 400
    assert error.to_dict() == {
        "error": {"status": "INVALID_ARGUMENT", "message": "Bad input", "details": "title missing"}}
    assert HttpsError("unknown-code", "x").http_status == 500


def test_create_app_factory(config, orchestrator):
    app = create_app(config, orchestrator)

    assert app.test_client().get("/health").status_code == 200


def test_schedule_meeting_accepts_free_form_participants(client, meeting_data):
    meeting_data["participants"] = ["Alice (design team)"]

    response = call(client, "scheduleMeeting", meeting_data)

    assert response.status_code == 200
    assert response.get_json()["result"]["participants"] == ["Alice (design team)"]
