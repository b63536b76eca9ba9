#!/usr/bin/env python3
"""
Simple test to verify the Meeting Scheduler works end to end offline
(mock calendar, in-memory store, Flask test client)
"""

import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

SAMPLE_MEETING = {
    "title": "Project Kickoff",
    "description": "Introductions and scope",
    "dateTime": "2030-07-24T10:00:00Z",
    "participants": ["alice@example.com", "bob@example.com"],
}


def test_backend():
    """Drive the callable endpoints through the Flask test client"""
    print("🧪 Testing callable endpoints...")

    try:
        from config.settings import Config
        from src.api.flask_server import create_app

        config = Config(ENV="test", USE_MOCK_CALENDAR=True, USE_MEMORY_STORE=True)
        client = create_app(config).test_client()

        def call(name, data):
            response = client.post(f"/{name}", json={"data": data})
            body = response.get_json()
            if "error" in body:
                raise RuntimeError(f"{name}: {body['error']}")
            return body["result"]

        scheduled = call("scheduleMeeting", SAMPLE_MEETING)
        print(f"✅ Scheduled: {scheduled['id']}")
        print(f"   Calendar event: {scheduled['calendarEventId']}")
        print(f"   Meet link: {scheduled.get('meetLink', 'N/A')}")

        listed = call("getMeetings", {})
        print(f"✅ Listed {len(listed['meetings'])} meeting(s)")

        updated = call("updateMeeting", {
            "meetingId": scheduled["id"],
            "meetingData": dict(SAMPLE_MEETING, title="Project Kickoff (moved)"),
        })
        print(f"✅ Updated: {updated['meeting']['title']}")

        deleted = call("deleteMeeting", {"meetingId": scheduled["id"]})
        print(f"✅ Deleted: {deleted['success']}")

        return bool(updated["success"] and deleted["success"])

    except Exception as e:
        print(f"❌ Backend test failed: {e}")
        return False


def test_local_service():
    """Run the client service in local mode against a temporary storage file"""
    print("\n🎯 Testing local meeting service...")

    try:
        from config.settings import Config
        from src.client.meeting_service import create_meeting_service

        with tempfile.TemporaryDirectory() as tmp_dir:
            config = Config(LOCAL_STORAGE_PATH=str(Path(tmp_dir) / "storage.json"),
                            LOCAL_LATENCY_SCALE=0)
            service = create_meeting_service(config)

            meeting_id = service.schedule_meeting(SAMPLE_MEETING)
            print(f"✅ Scheduled locally: {meeting_id}")

            service.update_meeting(meeting_id, dict(SAMPLE_MEETING, title="Renamed"))
            meetings = service.get_meetings()
            print(f"✅ Listed: {[meeting.title for meeting in meetings]}")

            service.delete_meeting(meeting_id)
            print(f"✅ Deleted, {len(service.get_meetings())} left")

        return True

    except Exception as e:
        print(f"❌ Local service test failed: {e}")
        import traceback
        traceback.print_exc()
        return False


def main():
    """Main test execution"""
    print("📅 Meeting Scheduler Smoke Test")
    print("=" * 40)

    backend_success = test_backend()
    local_success = test_local_service()

    print("\n📊 Test Summary:")
    print(f"   Backend: {'✅ PASS' if backend_success else '❌ FAIL'}")
    print(f"   Local service: {'✅ PASS' if local_success else '❌ FAIL'}")

    if backend_success and local_success:
        print("\n🎉 All checks passed!")
        return True
    else:
        print("\n❌ Some checks failed. Check the logs above.")
        return False


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
