"""Shared pytest fixtures for crumbler tests."""

import json
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from crumbler.core.models import Cookie, SameSite


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def temp_config_file(temp_dir):
    """Create a temporary config file path."""
    return temp_dir / "config.json"


@pytest.fixture
def valid_config_data():
    """Return valid configuration data."""
    return {
        "version": 1,
        "settings": {
            "browser": "chrome",
            "output_format": "httpie",
            "bypass_lock": True,
            "debug": False,
        },
    }


@pytest.fixture
def temp_config_with_data(temp_config_file, valid_config_data):
    """Create a temporary config file with valid data."""
    temp_config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(temp_config_file, "w", encoding="utf-8") as f:
        json.dump(valid_config_data, f)
    return temp_config_file


@pytest.fixture
def sample_cookies():
    """Return a few cookies across two domains."""
    expires = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return [
        Cookie(
            name="SID",
            value="abc123",
            domain=".example.com",
            path="/",
            expires=expires,
            secure=True,
            http_only=True,
            same_site=SameSite.LAX,
        ),
        Cookie(
            name="pref",
            value="dark",
            domain="www.example.com",
            path="/settings",
            expires=expires,
            secure=False,
            http_only=False,
            same_site=SameSite.NONE,
        ),
        Cookie(
            name="token",
            value="xyz",
            domain="api.example.org",
            path="/",
            expires=datetime(1601, 1, 1, tzinfo=timezone.utc),
            secure=True,
            http_only=False,
            same_site=SameSite.STRICT,
        ),
    ]
