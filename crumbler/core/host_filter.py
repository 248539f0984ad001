"""Host filtering for cookie queries.

The filter is registered with SQLite as a scalar function and evaluated
once per row, so non-matching cookies never leave the storage engine.
"""

from __future__ import annotations

import ipaddress
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence
from urllib.parse import urlsplit

from crumbler.core.errors import InvalidHostError

logger = logging.getLogger(__name__)

HostPredicate = Callable[[str], bool]


@dataclass(frozen=True)
class HostPattern:
    """A host the user asked cookies for, e.g. parsed from a URL."""

    hostname: str
    base_domain: str | None  # "example.com" for "www.example.com", None for IPs


def _is_ip_address(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


def base_domain(hostname: str) -> str | None:
    """
    Return the last two labels of a hostname.

    Args:
        hostname: Lowercase hostname without port.

    Returns:
        The base domain, or None for IP addresses and single-label hosts.
    """
    if not hostname or _is_ip_address(hostname):
        return None

    labels = hostname.rsplit(".", 2)
    if len(labels) < 2 or not all(labels[-2:]):
        return None
    return ".".join(labels[-2:])


def parse_host(text: str) -> HostPattern:
    """
    Parse a bare hostname or a URL into a HostPattern.

    Args:
        text: "www.example.com", "https://www.example.com:8080/path", ...

    Raises:
        InvalidHostError: If no hostname can be extracted.
    """
    candidate = text.strip()
    if "://" not in candidate:
        candidate = "//" + candidate

    try:
        hostname = urlsplit(candidate).hostname
    except ValueError as e:
        raise InvalidHostError(f"'{text}' is not a valid host or URL: {e}") from e

    if not hostname:
        raise InvalidHostError(f"'{text}' is not a valid host or URL")

    return HostPattern(hostname=hostname, base_domain=base_domain(hostname))


def filter_hosts(domain: str, hosts: Sequence[HostPattern]) -> bool:
    """
    Check whether a cookie domain is relevant for any of the given hosts.

    A leading dot (domain-wide cookie) is ignored. An empty host list
    matches every cookie, while an empty domain never matches.

    Args:
        domain: host_key / host column value of the candidate row.
        hosts: Hosts requested by the caller.

    Returns:
        True if the row should be returned.
    """
    cookie_domain = domain[1:] if domain.startswith(".") else domain
    cookie_domain = cookie_domain.lower()

    if not cookie_domain:
        return False

    if not hosts:
        return True

    for host in hosts:
        if cookie_domain == host.hostname:
            return True

        # IP addresses and single-label hosts only match exactly
        scope = host.base_domain
        if scope and (scope == cookie_domain or scope.endswith("." + cookie_domain)):
            return True

    return False


def _match_all(_host: str) -> bool:
    return True


class HostFilter:
    """
    Lock-guarded, swappable host predicate.

    Instances are callable and are registered directly with SQLite. The
    predicate can be replaced at any time with set_predicate(); a query
    already running sees whichever predicate is current for each row.
    """

    def __init__(self, predicate: HostPredicate | None = None) -> None:
        self._lock = threading.Lock()
        self._predicate: HostPredicate = predicate or _match_all

    @classmethod
    def for_hosts(cls, hosts: Iterable[str | HostPattern]) -> HostFilter:
        """Build a filter matching cookies relevant to the given hosts."""
        patterns = tuple(
            h if isinstance(h, HostPattern) else parse_host(h) for h in hosts
        )
        logger.debug("Host filter built for %d host(s)", len(patterns))
        return cls(lambda domain: filter_hosts(domain, patterns))

    def set_predicate(self, predicate: HostPredicate) -> None:
        """Atomically replace the predicate."""
        with self._lock:
            self._predicate = predicate

    def __call__(self, host: str | None) -> bool:
        if host is None:
            return False
        with self._lock:
            return bool(self._predicate(host))
