"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from datetime import date

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture
def start_date():
    """First payment date used throughout the examples."""
    return date(2026, 2, 1)
