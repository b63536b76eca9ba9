#!/usr/bin/env python3
"""
Main entry point for the Meeting Scheduler

Runs the callable API server, or drives the client meeting service
(local or remote mode, depending on configuration) from the command line.
"""

import sys
import json
import logging
from pathlib import Path

# Add the project directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import Config
from src.api.flask_server import MeetingSchedulerAPI
from src.client.meeting_service import MeetingServiceError, create_meeting_service
from utils.logger import MeetingSchedulerLogger

logger = logging.getLogger(__name__)


def run_server(config, host=None, port=None):
    """Run the Flask API server"""
    logger.info("Starting Meeting Scheduler API server...")

    try:
        api = MeetingSchedulerAPI(config)
        api.run(host=host, port=port)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise


def run_smoke_test(api_url):
    """Run the HTTP smoke client against a running server"""
    from tests.test_client import MeetingSchedulerTestClient

    logger.info(f"Running smoke test against {api_url}")

    client = MeetingSchedulerTestClient(api_url)
    results = client.run_test_suite()

    summary = results["summary"]
    print(f"\nSmoke Test Results:")
    print(f"  Total: {summary['total']}")
    print(f"  Passed: {summary['passed']}")
    print(f"  Failed: {summary['failed']}")
    print(f"  Avg response time: {summary['avg_response_time']:.2f}s")

    return results


def _meeting_data_from_args(args):
    meeting_data = {
        "title": args.title,
        "description": args.description or "",
        "dateTime": args.date_time,
        "participants": args.participants or [],
    }
    if getattr(args, "user_id", None):
        meeting_data["userId"] = args.user_id
    return meeting_data


def _add_meeting_arguments(parser):
    parser.add_argument('--title', required=True, help='Meeting title')
    parser.add_argument('--description', default='', help='Meeting description')
    parser.add_argument('--date-time', required=True, dest='date_time',
                        help='Start time, ISO 8601 (e.g. 2025-01-01T10:00:00Z)')
    parser.add_argument('--participant', action='append', dest='participants',
                        help='Participant email (repeatable)')


def main():
    """Main CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Meeting Scheduler')
    parser.add_argument('--env-file', default=None, help='Path to a .env file')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    server_parser = subparsers.add_parser('server', help='Run the callable API server')
    server_parser.add_argument('--host', default=None, help='Host to bind to')
    server_parser.add_argument('--port', type=int, default=None, help='Port to bind to')

    schedule_parser = subparsers.add_parser('schedule', help='Schedule a meeting')
    _add_meeting_arguments(schedule_parser)
    schedule_parser.add_argument('--user-id', default=None, dest='user_id', help='Owner identifier')

    subparsers.add_parser('list', help='List meetings, newest first')

    update_parser = subparsers.add_parser('update', help='Update a meeting')
    update_parser.add_argument('meeting_id', help='Meeting ID')
    _add_meeting_arguments(update_parser)

    delete_parser = subparsers.add_parser('delete', help='Delete a meeting')
    delete_parser.add_argument('meeting_id', help='Meeting ID')

    smoke_parser = subparsers.add_parser('smoke', help='Run the HTTP smoke test')
    smoke_parser.add_argument('--url', default=None, help='API URL to test')

    args = parser.parse_args()

    config = Config.from_env(args.env_file)
    MeetingSchedulerLogger.setup_logging(log_level=config.LOG_LEVEL, log_file=config.LOG_FILE)

    if args.command == 'server':
        run_server(config, host=args.host, port=args.port)
        return

    if args.command == 'smoke':
        results = run_smoke_test(args.url or config.FUNCTIONS_URL)
        sys.exit(0 if results["summary"]["failed"] == 0 else 1)

    if args.command not in ('schedule', 'list', 'update', 'delete'):
        parser.print_help()
        return

    service = create_meeting_service(config)

    try:
        if args.command == 'schedule':
            meeting_id = service.schedule_meeting(_meeting_data_from_args(args))
            print(json.dumps({"id": meeting_id}, indent=2))

        elif args.command == 'list':
            meetings = service.get_meetings()
            print(json.dumps([meeting.to_dict() for meeting in meetings], indent=2))

        elif args.command == 'update':
            service.update_meeting(args.meeting_id, _meeting_data_from_args(args))
            print(json.dumps({"id": args.meeting_id, "updated": True}, indent=2))

        elif args.command == 'delete':
            service.delete_meeting(args.meeting_id)
            print(json.dumps({"id": args.meeting_id, "deleted": True}, indent=2))

    except MeetingServiceError as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
