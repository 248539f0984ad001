"""Run HTTP clients with browser cookies.

The cookies are written to a temporary file in the format the client
understands, and the file is passed with the client's cookie option
ahead of the forwarded arguments.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Sequence

from crumbler.cli.output import Formatter, httpie_session, netscape
from crumbler.core.errors import WrapError
from crumbler.core.models import Cookie

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WrappedCommand:
    """How to hand a cookie file to a client."""

    executable: str
    cookie_option: str
    formatter: Formatter
    suffix: str


WRAPPED_COMMANDS = {
    "curl": WrappedCommand("curl", "-b", netscape, ".txt"),
    "wget": WrappedCommand("wget", "--load-cookies", netscape, ".txt"),
    "http": WrappedCommand("http", "--session", httpie_session, ".json"),
    "https": WrappedCommand("https", "--session", httpie_session, ".json"),
}


def get_wrapped_command(command: str) -> WrappedCommand:
    """
    Look up a supported client by name.

    Raises:
        WrapError: If the command is not supported.
    """
    try:
        return WRAPPED_COMMANDS[command]
    except KeyError:
        raise WrapError(
            f"'{command}' is not one of the supported commands "
            f"({', '.join(WRAPPED_COMMANDS)})"
        ) from None


def wrap_command(
    command: str,
    forwarded_args: Sequence[str],
    cookies: Sequence[Cookie],
) -> int:
    """
    Run a client with the cookies loaded.

    Args:
        command: Client name (curl, wget, http or https)
        forwarded_args: Arguments passed through to the client
        cookies: Cookies to expose to the client

    Returns:
        The client's exit code

    Raises:
        WrapError: If the client is unsupported, cannot be started,
                   or is killed by a signal.
    """
    wrapped = get_wrapped_command(command)

    fd, cookie_file = tempfile.mkstemp(prefix="crumbler-", suffix=wrapped.suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            wrapped.formatter(cookies, f)

        cmd = [wrapped.executable, wrapped.cookie_option, cookie_file, *forwarded_args]
        logger.debug("Running %s with %d cookie(s)", wrapped.executable, len(cookies))

        try:
            completed = subprocess.run(cmd, check=False)
        except OSError as e:
            raise WrapError(f"Failed to run {wrapped.executable}: {e}") from e
    finally:
        try:
            os.unlink(cookie_file)
        except OSError as e:
            logger.warning("Failed to remove cookie file %s: %s", cookie_file, e)

    if completed.returncode < 0:
        raise WrapError(f"{wrapped.executable} has been killed by a signal")

    return completed.returncode
