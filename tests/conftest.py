"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration.
Shared database helpers live in tests/fixtures/reminder_fixtures.py.
"""

import logging


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )
    # Keep scheduler chatter out of captured logs
    logging.getLogger('apscheduler').setLevel(logging.WARNING)
