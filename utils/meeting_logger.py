"""
Specialized logging for meeting/calendar synchronization outcomes
"""
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class MeetingLogger:
    """Logs what happened on each side of the meeting ↔ calendar boundary"""

    @staticmethod
    def log_schedule_request(meeting_data: Dict[str, Any]):
        logger.info(f"🚀 SCHEDULING MEETING: {meeting_data.get('title', 'Untitled')}")
        logger.info(f"   ⏰ Start: {meeting_data.get('dateTime', 'N/A')}")
        logger.info(f"   👥 Participants: {len(meeting_data.get('participants') or [])} people")

    @staticmethod
    def log_calendar_fallback(error: Exception, event_id: str, meet_link: str):
        logger.warning(f"⚠️  Calendar event creation failed: {error}")
        logger.info(f"   🔧 Using mock calendar data instead (event {event_id}, link {meet_link})")

    @staticmethod
    def log_meeting_saved(meeting_id: str, event_id: Optional[str], meet_link: Optional[str]):
        logger.info(f"✅ Meeting {meeting_id} saved")
        logger.info(f"   📅 Calendar event: {event_id or 'none'}")
        logger.info(f"   🔗 Meet link: {meet_link or 'none (pending)'}")

    @staticmethod
    def log_orphaned_event(event_id: str, error: Exception):
        """Calendar event exists but the meeting record could not be written"""
        logger.error(f"❌ INCONSISTENCY: calendar event {event_id} has no meeting record: {error}")

    @staticmethod
    def log_stale_record(meeting_id: str, event_id: str, error: Exception):
        """Calendar event was patched but the meeting record was not"""
        logger.error(f"❌ INCONSISTENCY: calendar event {event_id} updated but meeting "
                     f"{meeting_id} was not: {error}")

    @staticmethod
    def log_operation_summary(operation: str, meeting_id: Optional[str],
                              success: bool, processing_time: float):
        status = "✅ OK" if success else "❌ FAILED"
        logger.info(f"📋 {operation} {meeting_id or ''} {status} "
                    f"({processing_time:.2f}s)")
