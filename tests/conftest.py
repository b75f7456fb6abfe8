"""Pytest configuration shared by every test module."""

from __future__ import annotations

import os

import pytest

from tests import _ensure_repo_on_path

# Keep a developer's .env from leaking Redis or SendGrid credentials into tests.
os.environ.setdefault("USE_SQLITE", "true")


def pytest_configure(config: pytest.Config) -> None:
    """Hook executed by pytest prior to running any tests."""

    _ensure_repo_on_path()
