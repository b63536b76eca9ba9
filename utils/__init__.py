"""
Utility modules for the Meeting Scheduler
"""

from .logger import MeetingSchedulerLogger
from .validators import RequestValidator, DataSanitizer
from .meeting_logger import MeetingLogger

__all__ = ['MeetingSchedulerLogger', 'RequestValidator', 'DataSanitizer', 'MeetingLogger']
