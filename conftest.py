"""
Repository-level pytest configuration (showcase-safe).

Why this exists:
  - Load the steadyui plugin (session fixtures, whole-test retry)
  - Provide safe defaults for demo environments (no secrets embedded)
  - Keep behavior explicit and discoverable

Important:
  Values below are placeholders. Real projects should point `UI_BASE_URL`
  at their application from CI/CD.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

pytest_plugins = ["pytester", "steadyui.pytest_plugin"]


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """
    Set demo-safe environment defaults if not already provided by the user/CI.

    This keeps local runs predictable.
    """
    defaults = {
        "UI_BASE_URL": "http://localhost:3000",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
