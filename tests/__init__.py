#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Run only tests that need no database
    python -m pytest tests/ -v -m "not db"

Database tests use in-memory SQLite (see tests/fixtures/reminder_fixtures.py),
so no external database is needed.
"""
