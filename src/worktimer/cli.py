"""
Command-line client for the WorkTimer HTTP API.

Usage:
    worktimer-cli start --id EMPLOYEE_ID
    worktimer-cli stop --id EMPLOYEE_ID
    worktimer-cli info --id EMPLOYEE_ID
    worktimer-cli status --id EMPLOYEE_ID [--server http://host:8080]
"""
import argparse
import logging
import sys

import requests

from .config import get_settings
from .utils.formatting import format_entry_list
from .utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10


class ClientError(Exception):
    """Raised when the server rejects a request or cannot be reached"""
    pass


class TimerClient:
    """Thin wrapper around the HTTP endpoints"""

    def __init__(self, server_url, session=None, timeout=REQUEST_TIMEOUT):
        self.server_url = server_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, endpoint, employee_id):
        url = f"{self.server_url}/{endpoint}"
        try:
            response = self.session.get(url, params={'employee_id': employee_id},
                                        timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug(f"Request to {url} failed: {e}")
            raise ClientError(f"could not reach server at {self.server_url}: {e}") from e

        if not response.ok:
            raise ClientError(_error_detail(response))
        return response.json()

    def start(self, employee_id):
        return self._get('start', employee_id)['status']

    def stop(self, employee_id):
        return self._get('stop', employee_id)['status']

    def info(self, employee_id):
        return self._get('info', employee_id).get('entries', [])

    def status(self, employee_id):
        return self._get('status', employee_id)


def _error_detail(response) -> str:
    try:
        detail = response.json().get('detail')
    except ValueError:
        detail = None
    return detail or response.text or f"HTTP {response.status_code}"


def build_parser():
    parser = argparse.ArgumentParser(
        prog='worktimer-cli',
        description="Start, stop and inspect employee work timers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s start --id E1
  %(prog)s stop --id E1
  %(prog)s info --id E1
        """
    )
    parser.add_argument(
        '--server', '-s',
        help='Server base URL (default: WORKTIMER_SERVER_URL or http://localhost:8080)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log requests'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)
    for name, help_text in (
        ('start', 'Start a timer'),
        ('stop', 'Stop the running timer'),
        ('info', 'Show timer history'),
        ('status', 'Show whether a timer is running'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('--id', '-i', dest='employee_id', required=True,
                         help='Employee ID')
    return parser


def run(args, client, out=None) -> int:
    """Execute one parsed command; returns the process exit code"""
    out = out or sys.stdout
    employee_id = args.employee_id
    if not employee_id.strip():
        print("error: employee ID is required", file=out)
        return 1

    try:
        if args.command == 'start':
            print(client.start(employee_id), file=out)
        elif args.command == 'stop':
            print(client.stop(employee_id), file=out)
        elif args.command == 'info':
            entries = client.info(employee_id)
            if not entries:
                print(f"No timer entries for {employee_id}", file=out)
            else:
                print(format_entry_list(entries), file=out)
        elif args.command == 'status':
            status = client.status(employee_id)
            if status.get('running'):
                entry = status.get('entry') or {}
                print(f"Timer running since {entry.get('start_time')}", file=out)
            else:
                print("No active timer", file=out)
    except ClientError as e:
        print(f"error: {e}", file=out)
        return 1
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging("DEBUG" if args.verbose else "WARNING")
    client = TimerClient(args.server or settings.server_url)
    sys.exit(run(args, client))


if __name__ == '__main__':
    main()
