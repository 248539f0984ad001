"""Command line interface for crumbler.

    crumbler [-b BROWSER] [-r ROOT] [--bypass-lock] output [--format F] [HOSTS...]
    crumbler [-b BROWSER] [--session] wrap curl -s https://example.com
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Sequence

from crumbler.cli.output import FORMATTERS
from crumbler.core.constants import (
    APP_NAME,
    APP_VERSION,
    OUTPUT_FORMATS,
    SUPPORTED_BROWSERS,
    WRAPPABLE_COMMANDS,
)
from crumbler.core.errors import CrumblerError, DatabaseOpenError
from crumbler.core.host_filter import HostFilter
from crumbler.core.logging_config import log_extraction
from crumbler.core.models import Browser, Cookie
from crumbler.execution.lock_resolver import LockResolver
from crumbler.execution.session import Session
from crumbler.execution.wrapper import wrap_command
from crumbler.scanner.cookie_reader import create_reader

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Extract cookies from Firefox and Chromium-based browsers "
        "for curl, wget and HTTPie.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument(
        "-b",
        "--browser",
        choices=SUPPORTED_BROWSERS,
        help="browser to import cookies from (default: from config, else firefox)",
    )
    parser.add_argument(
        "-r",
        "--root-path",
        type=Path,
        help="browser profile directory to read instead of the default profile",
    )
    parser.add_argument(
        "--session",
        action="store_true",
        help="open the browser on a temporary profile and use its cookies once it exits",
    )
    parser.add_argument(
        "--session-urls",
        action="append",
        default=[],
        metavar="URL",
        help="URL to open in the session browser (repeatable)",
    )
    parser.add_argument(
        "--bypass-lock",
        action="store_true",
        default=None,
        help="read the cookie database even if the browser holds a lock on it",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="log debug output to stderr",
    )

    subparsers = parser.add_subparsers(dest="mode", required=True)

    output_parser = subparsers.add_parser("output", help="print cookies")
    output_parser.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        help="output format (default: from config, else netscape)",
    )
    output_parser.add_argument(
        "hosts",
        nargs="*",
        metavar="HOST",
        help="only output cookies relevant to these hosts or URLs",
    )

    wrap_parser = subparsers.add_parser("wrap", help="run a command with the cookies loaded")
    wrap_parser.add_argument("command", choices=WRAPPABLE_COMMANDS)
    wrap_parser.add_argument(
        "forwarded_args",
        nargs=argparse.REMAINDER,
        metavar="ARGS",
        help="arguments passed to the command",
    )

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


class App:
    """Runs one CLI invocation with command line options merged over settings."""

    def __init__(self, args: argparse.Namespace, settings: dict[str, Any]) -> None:
        self.args = args
        self.browser = Browser.from_name(args.browser or settings["browser"])
        self.bypass_lock = bool(
            settings["bypass_lock"] if args.bypass_lock is None else args.bypass_lock
        )
        self.output_format = getattr(args, "format", None) or settings["output_format"]

    def get_cookies(self, hosts: Sequence[str]) -> list[Cookie]:
        """
        Read the cookies relevant to hosts (all cookies if empty).

        Raises:
            CrumblerError: If the profile cannot be found or read.
        """
        if self.args.session:
            cookies = Session.open(self.browser, self.args.session_urls, hosts)
        else:
            cookies = self._read_profile(hosts)

        log_extraction(self.browser.value, len(cookies), hosts, session=self.args.session)
        return cookies

    def _read_profile(self, hosts: Sequence[str]) -> list[Cookie]:
        resolver = LockResolver()
        if not self.bypass_lock and resolver.is_browser_running(self.browser):
            logger.warning(
                "%s is running and may hold a lock on its cookie database; "
                "use --bypass-lock if reading fails",
                self.browser,
            )

        try:
            with create_reader(
                self.browser,
                self.args.root_path,
                HostFilter.for_hosts(hosts),
                self.bypass_lock,
            ) as reader:
                return reader.get_cookies()
        except DatabaseOpenError as e:
            report = resolver.check_lock(e.path, self.browser)
            if report.is_locked:
                logger.warning(
                    "%s is locked (held by: %s); retry with --bypass-lock",
                    e.path,
                    ", ".join(report.blocking_processes) or "unknown process",
                )
            raise

    def output(self) -> int:
        """Print cookies for the requested hosts."""
        cookies = self.get_cookies(self.args.hosts)
        formatter = FORMATTERS[self.output_format]

        try:
            formatter(cookies, sys.stdout)
            sys.stdout.flush()
        except BrokenPipeError:
            # Reader went away (e.g. `| head`); silence the flush at exit
            devnull = os.open(os.devnull, os.O_WRONLY)
            os.dup2(devnull, sys.stdout.fileno())
        return 0

    def wrap(self) -> int:
        """Run the wrapped command with all cookies and return its exit code."""
        cookies = self.get_cookies(())
        return wrap_command(self.args.command, self.args.forwarded_args, cookies)

    def run(self) -> int:
        """
        Run the selected mode.

        Returns:
            Exit code: the wrapped command's, 0 on success, 1 on error
        """
        try:
            if self.args.mode == "wrap":
                return self.wrap()
            return self.output()
        except CrumblerError as e:
            logger.error("%s", e)
            print(f"{APP_NAME}: error: {e}", file=sys.stderr)
            return 1
