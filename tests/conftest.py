"""
Pytest configuration and fixtures for raidguard tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to path so imports work without an editable install
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from raidguard.datatypes.command_datatypes import CommandLogEntry  # noqa: E402

NOW = 1_700_000_000


@pytest.fixture()
def now() -> int:
    return NOW


@pytest.fixture()
def make_entry():
    """Factory for CommandLogEntry with sensible defaults."""

    def _make(command: str, player_id: str = "12345", ts: int | None = NOW, **kwargs) -> CommandLogEntry:
        return CommandLogEntry(player_id=player_id, command=command, prc_timestamp=ts, **kwargs)

    return _make
