"""
Pytest configuration and shared fixtures.

This module provides central pytest configuration, custom markers,
and shared fixtures for the bridge test suite.
"""

import pytest

# =============================================================================
# Plugin Registration
# =============================================================================

pytest_plugins = [
    "tests.fixtures.logging",
    "tests.fixtures.fakes",
]


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated, no external dependencies)"
    )
    config.addinivalue_line(
        "markers",
        "integration: Integration tests (real sockets and child processes)",
    )
    config.addinivalue_line("markers", "property: Hypothesis property-based tests")
    config.addinivalue_line("markers", "slow: Tests that take >1 second to run")


# =============================================================================
# Test Collection Hooks
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """
    Add the 'unit' marker to tests without another category marker.

    Args:
        config: Pytest config object
        items: List of collected test items
    """
    for item in items:
        if not any(
            mark.name in ["integration", "property"] for mark in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)
