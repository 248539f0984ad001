"""Cookie output formats.

- netscape: the cookies.txt format read by curl (-b) and wget (--load-cookies)
- httpie: an HTTPie session file (httpie 3.x layout, undocumented upstream)
- human: a readable listing grouped by domain
"""

from __future__ import annotations

import json
from email.utils import format_datetime
from itertools import groupby
from typing import Any, Callable, Sequence, TextIO

from crumbler.core.models import Cookie

NETSCAPE_HEADER = "# Netscape HTTP Cookie File\n"

HUMAN_SEPARATOR = "-" * 20

Formatter = Callable[[Sequence[Cookie], TextIO], None]


def _flag(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def _netscape_expiry(cookie: Cookie) -> int:
    # 0 marks a session cookie; dates before 1970 cannot be expressed
    return max(cookie.expires_timestamp, 0)


def netscape(cookies: Sequence[Cookie], stream: TextIO) -> None:
    """Write cookies in Netscape cookies.txt format."""
    stream.write(NETSCAPE_HEADER)
    for cookie in cookies:
        stream.write(
            "\t".join(
                (
                    cookie.domain,
                    _flag(cookie.is_domain_wide),
                    cookie.path,
                    _flag(cookie.secure),
                    str(_netscape_expiry(cookie)),
                    cookie.name,
                    cookie.value,
                )
            )
            + "\n"
        )


def _port_from_domain(domain: str) -> int | None:
    _, sep, port = domain.rpartition(":")
    if sep and port.isdigit():
        return int(port)
    return None


def _httpie_cookie(cookie: Cookie) -> dict[str, Any]:
    # Keyword arguments of requests.cookies.create_cookie
    return {
        "name": cookie.name,
        "value": cookie.value,
        "port": _port_from_domain(cookie.domain),
        "domain": cookie.domain,
        "path": cookie.path,
        "secure": cookie.secure,
        "expires": cookie.expires_timestamp,
        "discard": False,
        "comment": None,
        "comment_url": None,
        "rest": {},
        "rfc2109": False,
    }


def httpie_session(cookies: Sequence[Cookie], stream: TextIO) -> None:
    """Write cookies as an HTTPie session file."""
    session = {
        "headers": [],
        "cookies": [_httpie_cookie(cookie) for cookie in cookies],
        "auth": {"type": None, "username": None, "password": None},
    }
    json.dump(session, stream)


def _domain_sort_key(domain: str) -> str:
    return domain[1:] if domain.startswith(".") else domain


def format_expiry(cookie: Cookie) -> str:
    """Format an expiry date as an RFC 1123 date, e.g. "Mon, 01 Jan 2024 00:00:00 GMT"."""
    return format_datetime(cookie.expires, usegmt=True)


def human(cookies: Sequence[Cookie], stream: TextIO) -> None:
    """Write cookies grouped by domain, one block per cookie."""
    ordered = sorted(cookies, key=lambda c: (_domain_sort_key(c.domain), c.domain))

    for domain, group in groupby(ordered, key=lambda c: c.domain):
        stream.write(f"{domain}\n\n")

        for cookie in group:
            stream.write(f"{HUMAN_SEPARATOR}\n\n")
            stream.write(f"Name: {cookie.name}\n")
            stream.write(f"Value: {cookie.value}\n")
            stream.write(f"Path: {cookie.path}\n")
            stream.write(f"Secure: {str(cookie.secure).lower()}\n")
            stream.write(f"HttpOnly: {str(cookie.http_only).lower()}\n")
            stream.write(f"SameSite: {cookie.same_site}\n")
            stream.write(f"Expires: {format_expiry(cookie)}\n\n")

        stream.write("\n")


FORMATTERS: dict[str, Formatter] = {
    "netscape": netscape,
    "httpie": httpie_session,
    "human": human,
}
