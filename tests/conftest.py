# tests/conftest.py
"""Shared fixtures and sample data."""

import tempfile
from pathlib import Path

import pytest

NAME = "Sales report"
SIGNATURE = "19ca4f27c55c6912f88cf47d1ef1e0c2f097456a50cb882b9b49e8a244dadb58"
NAME2 = "Marketing report"
SIGNATURE2 = "cd03d7b1d7f7ca51873b0078d52f0bba08896375078e74b3d3b98814460d7eca"
NAME3 = "IT report"
SIGNATURE3 = "3d7d563d3f83b1745d5c2cec3ee8e7d5aea141f0013a9c66551b6d8a95f211d7"

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
