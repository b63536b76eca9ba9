"""
Flask API server exposing the meeting callable endpoints

Each endpoint follows the callable convention: the request body is
``{"data": ...}`` and the reply is ``{"result": ...}``. Typed failures are
returned as ``{"error": {"status", "message", "details"}}`` with a matching
HTTP status code.
"""
import logging
import signal
import sys
import time
from datetime import datetime
from threading import Thread
from typing import Any, Callable, Dict, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS

from config.settings import Config
from src.scheduler.meeting_orchestrator import MeetingOrchestrator, build_orchestrator
from utils.datetime_utils import format_error
from utils.errors import NotFoundError, ScheduleError
from utils.logger import MeetingSchedulerLogger
from utils.validators import RequestValidator, DataSanitizer

logger = logging.getLogger(__name__)


class HttpsError(Exception):
    """Typed callable failure"""

    HTTP_STATUS = {
        "invalid-argument": 400,
        "unauthenticated": 401,
        "permission-denied": 403,
        "not-found": 404,
        "internal": 500,
        "unavailable": 503,
    }

    def __init__(self, code: str, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    @property
    def http_status(self) -> int:
        return self.HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> Dict[str, Any]:
        error = {"status": self.code.upper().replace("-", "_"), "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}


class MeetingSchedulerAPI:
    """
    Flask API server for the meeting callable endpoints
    """

    def __init__(self, config: Config = None, orchestrator: MeetingOrchestrator = None):
        self.config = config or Config.from_env()
        self.app = Flask(__name__)
        CORS(self.app)

        self.orchestrator = orchestrator or build_orchestrator(self.config)
        logger.info(f"Meeting scheduler configuration: {self.config.summary()}")

        self.requests_processed = 0
        self.start_time = time.time()

        self._setup_routes()

    def _setup_routes(self):
        """Setup Flask routes"""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            summary = self.config.summary()
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "calendar_mode": summary["calendar_mode"],
                "store_backend": summary["store_backend"],
                "max_instances": summary["max_instances"],
                "requests_processed": self.requests_processed,
                "uptime": time.time() - self.start_time,
            })

        @self.app.route('/scheduleMeeting', methods=['POST'])
        def schedule_meeting():
            return self._handle_callable('scheduleMeeting', self._schedule_meeting)

        @self.app.route('/getMeetings', methods=['POST'])
        def get_meetings():
            return self._handle_callable('getMeetings', self._get_meetings)

        @self.app.route('/deleteMeeting', methods=['POST'])
        def delete_meeting():
            return self._handle_callable('deleteMeeting', self._delete_meeting)

        @self.app.route('/updateMeeting', methods=['POST'])
        def update_meeting():
            return self._handle_callable('updateMeeting', self._update_meeting)

        @self.app.route('/createCalendarEvent', methods=['POST'])
        def create_calendar_event():
            return self._handle_callable('createCalendarEvent', self._create_calendar_event)

        @self.app.route('/deleteCalendarEvent', methods=['POST'])
        def delete_calendar_event():
            return self._handle_callable('deleteCalendarEvent', self._delete_calendar_event)

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify(HttpsError("not-found", "Endpoint not found").to_dict()), 404

        @self.app.errorhandler(405)
        def method_not_allowed(error):
            return jsonify(HttpsError("invalid-argument", "Callable endpoints only accept POST").to_dict()), 405

        @self.app.errorhandler(500)
        def internal_error(error):
            return jsonify(HttpsError("internal", "Internal server error").to_dict()), 500

    def _handle_callable(self, name: str, handler: Callable[[Any], Dict[str, Any]]):
        started = time.time()
        body = request.get_json(silent=True)

        if body is not None and not isinstance(body, dict):
            error = HttpsError("invalid-argument", "Request body must be a JSON object")
            return jsonify(error.to_dict()), error.http_status

        data = (body or {}).get("data")
        logger.info(f"📨 {name} called")

        try:
            result = handler(data)
        except HttpsError as e:
            logger.error(f"{name} failed: {e.message} ({e.details})")
            return jsonify(e.to_dict()), e.http_status
        finally:
            self.requests_processed += 1

        MeetingSchedulerLogger.log_request_response(
            name, data if isinstance(data, dict) else {}, result, time.time() - started)
        return jsonify({"result": result})

    def _schedule_meeting(self, data: Any) -> Dict[str, Any]:
        errors = RequestValidator.validate_meeting_data(data)
        if errors:
            raise HttpsError("invalid-argument", "Failed to schedule meeting", "; ".join(errors))

        try:
            meeting = self.orchestrator.schedule_meeting(DataSanitizer.sanitize_meeting_data(data))
        except ScheduleError as e:
            logger.error(f"Error in scheduleMeeting: {e}")
            raise HttpsError("internal", "Failed to schedule meeting", format_error(e.cause or e))

        result = meeting.to_dict()
        result["success"] = True
        return result

    def _get_meetings(self, data: Any) -> Dict[str, Any]:
        user_id = data.get("userId") if isinstance(data, dict) else None
        try:
            meetings = self.orchestrator.get_meetings(user_id=user_id)
        except Exception as e:
            logger.error(f"Error getting meetings: {e}")
            return {"success": False, "meetings": [], "error": format_error(e)}

        return {"success": True, "meetings": [meeting.to_dict() for meeting in meetings]}

    def _delete_meeting(self, data: Any) -> Dict[str, Any]:
        meeting_id = data.get("meetingId") if isinstance(data, dict) else None
        if not meeting_id:
            return {"success": False, "error": "Missing required field: meetingId"}

        try:
            self.orchestrator.delete_meeting(meeting_id)
        except NotFoundError:
            return {"success": False, "error": "Meeting not found"}
        except Exception as e:
            logger.error(f"Error deleting meeting {meeting_id}: {e}")
            return {"success": False, "error": format_error(e)}

        return {"success": True}

    def _update_meeting(self, data: Any) -> Dict[str, Any]:
        meeting_id = data.get("meetingId") if isinstance(data, dict) else None
        errors = RequestValidator.validate_update_request(data)
        if errors:
            return {"success": False, "meetingId": meeting_id, "error": "; ".join(errors)}

        try:
            meeting = self.orchestrator.update_meeting(
                meeting_id, DataSanitizer.sanitize_meeting_data(data["meetingData"]))
        except Exception as e:
            logger.error(f"Error updating meeting {meeting_id}: {e}")
            return {"success": False, "meetingId": meeting_id, "error": format_error(e)}

        return {"success": True, "meetingId": meeting_id, "meeting": meeting.to_dict()}

    def _create_calendar_event(self, data: Any) -> Dict[str, Any]:
        errors = RequestValidator.validate_meeting_data(data)
        if errors:
            return {"eventId": "", "meetLink": "", "success": False, "error": "; ".join(errors)}

        try:
            event = self.orchestrator.create_calendar_event(DataSanitizer.sanitize_meeting_data(data))
        except Exception as e:
            logger.error(f"Error creating calendar event: {e}")
            return {"eventId": "", "meetLink": "", "success": False, "error": format_error(e)}

        logger.info(f"Created calendar event with ID: {event.event_id} and Meet link: {event.meet_link}")
        return {"eventId": event.event_id, "meetLink": event.meet_link or "", "success": True}

    def _delete_calendar_event(self, data: Any) -> Dict[str, Any]:
        event_id = data.get("eventId") if isinstance(data, dict) else None
        if not event_id:
            return {"success": False, "error": "Missing required field: eventId"}

        try:
            self.orchestrator.delete_calendar_event(event_id)
        except Exception as e:
            logger.error(f"Error deleting calendar event {event_id}: {e}")
            return {"success": False, "error": format_error(e)}

        return {"success": True}

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers"""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, shutting down gracefully...")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self, host=None, port=None, debug=False):
        """Run the Flask server"""
        host = host or self.config.API_HOST
        port = port or self.config.API_PORT

        self._setup_signal_handlers()
        self.start_time = time.time()

        logger.info(f"Starting Meeting Scheduler API server on {host}:{port}")
        logger.info(f"Max instances (operational limit): {self.config.MAX_INSTANCES}")

        try:
            self.app.run(
                host=host,
                port=port,
                debug=debug,
                threaded=True,
                use_reloader=False
            )
        except Exception as e:
            logger.error(f"Failed to start server: {e}")
            raise

    def run_background(self, host=None, port=None):
        """Run the Flask server in background thread"""
        def run_server():
            self.app.run(host=host or self.config.API_HOST, port=port or self.config.API_PORT,
                         threaded=True, use_reloader=False)

        server_thread = Thread(target=run_server, daemon=True)
        server_thread.start()
        logger.info("Flask server started in background")
        return server_thread

    def shutdown(self):
        logger.info("Shutting down Meeting Scheduler API server...")


def create_app(config: Config = None, orchestrator: MeetingOrchestrator = None) -> Flask:
    """Factory function to create Flask app"""
    api = MeetingSchedulerAPI(config, orchestrator)
    return api.app


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Meeting Scheduler API Server')
    parser.add_argument('--host', default=None, help='Host to bind to')
    parser.add_argument('--port', type=int, default=None, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    config = Config.from_env()
    MeetingSchedulerLogger.setup_logging(log_level=config.LOG_LEVEL, log_file=config.LOG_FILE)

    api = MeetingSchedulerAPI(config)
    api.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    main()
