"""
Logging utilities for the Meeting Scheduler
"""
import logging
import sys
from datetime import datetime
import json


class MeetingSchedulerLogger:
    """Custom logger for the Meeting Scheduler"""

    @staticmethod
    def setup_logging(log_level: str = "INFO", log_file: str = None):
        """Setup logging configuration"""

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Clear existing handlers
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        # Suppress some noisy loggers
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('googleapiclient').setLevel(logging.WARNING)
        logging.getLogger('google.auth').setLevel(logging.WARNING)

        return root_logger

    @staticmethod
    def log_request_response(endpoint: str, request_data: dict,
                             response_data: dict, processing_time: float):
        """Log a callable request and its response for debugging"""
        logger = logging.getLogger(__name__)

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "endpoint": endpoint,
            "processing_time_seconds": round(processing_time, 4),
            "request_summary": {
                "keys": sorted(request_data.keys()) if isinstance(request_data, dict) else [],
                "meeting_id": request_data.get("meetingId") if isinstance(request_data, dict) else None,
            },
            "response_summary": {
                "success": response_data.get("success"),
                "error": response_data.get("error"),
            },
        }

        logger.debug(f"Request processed: {json.dumps(log_entry, indent=2, default=str)}")
