"""Browser sessions, command wrapping and lock detection."""

from crumbler.execution.lock_resolver import LockReport, LockResolver
from crumbler.execution.session import Session
from crumbler.execution.wrapper import WRAPPED_COMMANDS, wrap_command

__all__ = [
    "LockResolver",
    "LockReport",
    "Session",
    "WRAPPED_COMMANDS",
    "wrap_command",
]
