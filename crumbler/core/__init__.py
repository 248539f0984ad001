"""Core module for crumbler."""

from .config import ConfigManager
from .errors import (
    CipherError,
    ConfigError,
    CookieStoreError,
    CookieValueDecryptError,
    CrumblerError,
    DatabaseOpenError,
    DecryptionError,
    FilterRegistrationError,
    InvalidHostError,
    KeyAcquisitionError,
    KeyNotFoundError,
    MissingColumnError,
    ProfileNotFoundError,
    QueryExecutionError,
    SessionError,
    ValueDecodeError,
    WrapError,
)
from .host_filter import HostFilter, HostPattern, filter_hosts, parse_host
from .logging_config import get_audit_logger, log_extraction, setup_logging
from .models import Browser, Cookie, SameSite

__all__ = [
    # Config
    "ConfigManager",
    # Logging
    "setup_logging",
    "get_audit_logger",
    "log_extraction",
    # Models
    "Browser",
    "Cookie",
    "SameSite",
    # Host filtering
    "HostFilter",
    "HostPattern",
    "filter_hosts",
    "parse_host",
    # Errors
    "CrumblerError",
    "ConfigError",
    "ProfileNotFoundError",
    "InvalidHostError",
    "CookieStoreError",
    "DatabaseOpenError",
    "QueryExecutionError",
    "FilterRegistrationError",
    "MissingColumnError",
    "CookieValueDecryptError",
    "DecryptionError",
    "KeyAcquisitionError",
    "KeyNotFoundError",
    "CipherError",
    "ValueDecodeError",
    "SessionError",
    "WrapError",
]
