"""
Test Data Factories

This module provides factory functions for creating test data.
All test data should be created through these factories to ensure consistency.

Usage:
    from tests.factories import create_mock_match, create_viewer_context

    match = create_mock_match(match_id="1", capacity=10, joined=3)
    ctx = create_viewer_context(search_text="parc")
"""

from .context import NOW, VIEWER_LOCATION, create_viewer_context
from .matches import create_mock_match, create_mock_match_list, offset_north

__all__ = [
    'NOW',
    'VIEWER_LOCATION',
    'create_viewer_context',
    'create_mock_match',
    'create_mock_match_list',
    'offset_north',
]
