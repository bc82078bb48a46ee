"""
================================================================================
Test Suite Pytest Configuration
================================================================================

Registers the project-wide markers and tags tests by directory.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "unit: Browser-free tests of the synchronization core"
    )
    config.addinivalue_line(
        "markers", "ui: Tests driving a real browser session"
    )


def pytest_collection_modifyitems(config, items):
    """Auto-add the `unit` marker to tests in the unit directory."""
    for item in items:
        if "unit" in item.path.parts:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "steadyui - UI Synchronization Core",
        "=" * 60,
        "",
    ]
