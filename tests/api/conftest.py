"""API test configuration - applies api marker to every router test."""

import pytest


def pytest_collection_modifyitems(items):
    """Apply api marker to all tests under tests/api."""
    for item in items:
        if "/api/" in str(item.fspath):
            item.add_marker(pytest.mark.api)
