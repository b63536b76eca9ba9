"""
Validation utilities for the Meeting Scheduler callable endpoints
"""
import re
from typing import Dict, Any, List

from utils.datetime_utils import parse_date
from utils.errors import InvalidDateError


class RequestValidator:
    """Validator for incoming callable payloads"""

    @staticmethod
    def validate_datetime(value: Any) -> bool:
        try:
            parse_date(value)
            return True
        except InvalidDateError:
            return False

    @staticmethod
    def validate_meeting_data(meeting_data: Any) -> List[str]:
        """Validate meeting fields and return list of errors

        Participants are optional here and are not checked as email addresses.
        """
        errors = []

        if not isinstance(meeting_data, dict):
            return ["Meeting data must be an object"]

        title = meeting_data.get("title")
        if not isinstance(title, str) or not title.strip():
            errors.append("Missing required field: title")

        if "dateTime" not in meeting_data or meeting_data.get("dateTime") in (None, ""):
            errors.append("Missing required field: dateTime")

        description = meeting_data.get("description")
        if description is not None and not isinstance(description, str):
            errors.append("'description' must be a string")

        participants = meeting_data.get("participants")
        if participants is not None:
            if not isinstance(participants, list):
                errors.append("'participants' must be a list")
            else:
                for i, participant in enumerate(participants):
                    if not isinstance(participant, str):
                        errors.append(f"Participant {i} must be a string")

        return errors

    @staticmethod
    def validate_update_request(request_data: Any) -> List[str]:
        """Validate an updateMeeting payload"""
        if not isinstance(request_data, dict):
            return ["Missing required fields: meetingId or meetingData"]

        if not request_data.get("meetingId") or not request_data.get("meetingData"):
            return ["Missing required fields: meetingId or meetingData"]

        return RequestValidator.validate_meeting_data(request_data["meetingData"])


class DataSanitizer:
    """Sanitize and clean input data"""

    @staticmethod
    def sanitize_email(email: str) -> str:
        """Sanitize email address (case is kept as entered)"""
        return email.strip()

    @staticmethod
    def sanitize_text(text: str) -> str:
        """Trim and collapse whitespace"""
        return re.sub(r'[ \t]+', ' ', text.strip())

    @staticmethod
    def sanitize_meeting_data(meeting_data: Dict[str, Any]) -> Dict[str, Any]:
        """Sanitize meeting fields before they reach the orchestrator"""
        sanitized = dict(meeting_data)

        if isinstance(sanitized.get("title"), str):
            sanitized["title"] = DataSanitizer.sanitize_text(sanitized["title"])

        if isinstance(sanitized.get("description"), str):
            sanitized["description"] = sanitized["description"].strip()

        if isinstance(sanitized.get("participants"), list):
            sanitized["participants"] = [
                DataSanitizer.sanitize_email(p) for p in sanitized["participants"]
                if isinstance(p, str) and p.strip()
            ]

        return sanitized
