#!/usr/bin/env python3
"""
Quick script to check that the service account can reach Google Calendar
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import Config
from src.calendar.google_calendar_gateway import GoogleCalendarGateway
from utils.errors import CalendarOperationError


def check_calendar_access(config):
    """Authorize, then list a few upcoming events from the configured calendar"""

    print("🔍 Checking Google Calendar access...")

    credentials_path = config.CREDENTIALS_PATH
    print(f"Looking for service account key at: {credentials_path or '(APP_CREDENTIALS_PATH not set)'}")

    if not credentials_path or not os.path.exists(os.path.expanduser(credentials_path)):
        print("❌ Service account key not found!")
        print("\n📥 To create one:")
        print("  1. Create a service account in the Google Cloud console")
        print("  2. Enable domain-wide delegation for the Calendar scope")
        print("  3. Download the JSON key and set APP_CREDENTIALS_PATH")
        return False

    print("✅ Service account key found!")
    print(f"  📧 Impersonating: {config.IMPERSONATION_EMAIL or '(none)'}")
    print(f"  📅 Calendar: {config.CALENDAR_ID}")

    gateway = GoogleCalendarGateway(config)
    try:
        gateway.authorize()
    except CalendarOperationError as e:
        print(f"  ❌ Authorization failed: {e}")
        return False

    print("  ✅ Authorized")

    now = datetime.now(timezone.utc)
    try:
        response = gateway._events().list(
            calendarId=config.CALENDAR_ID,
            timeMin=now.isoformat(),
            timeMax=(now + timedelta(days=7)).isoformat(),
            maxResults=5,
            singleEvents=True,
            orderBy="startTime",
        ).execute()
    except Exception as e:
        print(f"  ❌ Could not read events: {e}")
        return False

    events = response.get("items", [])
    print(f"  ✅ Found {len(events)} event(s) in the next 7 days")
    for event in events:
        start = event.get("start", {}).get("dateTime") or event.get("start", {}).get("date")
        print(f"    - {start}: {event.get('summary', '(no title)')}")

    return True


def main():
    print("Google Calendar Access Checker")
    print("=" * 30)

    config = Config.from_env(USE_MOCK_CALENDAR=False)
    success = check_calendar_access(config)

    if success:
        print("\n✅ Ready to run the Meeting Scheduler against Google Calendar!")
    else:
        print("\n❌ Fix calendar access before running with APP_ENV=production")
        sys.exit(1)


if __name__ == "__main__":
    main()
