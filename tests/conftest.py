"""
Shared pytest fixtures and configuration for Fanout tests.
"""

import pytest

from fanout import Subject


@pytest.fixture
def subject():
    """Provide a fresh untagged-by-default Subject for tests that need it."""
    return Subject()


@pytest.fixture
def calls():
    """List that test callbacks append to, in invocation order."""
    return []
