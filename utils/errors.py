"""
Error types shared by the Meeting Scheduler components
"""
from typing import Optional


class MeetingSchedulerError(Exception):
    """Base class for all meeting scheduler errors"""


class InvalidDateError(MeetingSchedulerError, ValueError):
    """Missing or unparseable meeting time"""


class CalendarOperationError(MeetingSchedulerError):
    """Calendar provider rejected a create/update/delete (or authorization)"""


class NotFoundError(MeetingSchedulerError):
    """Referenced meeting does not exist"""


class MissingCalendarReferenceError(MeetingSchedulerError):
    """Meeting was never linked to a calendar event"""


class PersistenceError(MeetingSchedulerError):
    """Meeting store read or write failed"""


class ScheduleError(MeetingSchedulerError):
    """Scheduling failed; the underlying error is kept in ``cause``"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.args[0]}: {self.cause}"
        return self.args[0]
