"""
Shared pytest fixtures for the scrollterm test suite.

This file contains fixtures that are available to all test files.
"""
import io
import json
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from scrollterm import CommandAliasTable, KeyEvent, MotionRecorder, ScrollbackBuffer
from scrollterm.keys import KEY_BACKSPACE, KEY_ENTER, KEY_ESCAPE


@pytest.fixture
def timestamp():
    """
    Fixed timestamp for deterministic rendering.

    Returns:
        datetime: 2024-11-12 01:20:00 UTC
    """
    return datetime(2024, 11, 12, 1, 20, 0, tzinfo=timezone.utc)


@pytest.fixture
def buffer():
    """
    Scrollback buffer with room for 100 lines.

    Returns:
        ScrollbackBuffer: Empty buffer, UTC timestamps, 12 column tags
    """
    return ScrollbackBuffer(capacity=100, tag_width=12)


@pytest.fixture
def filled_buffer(buffer, timestamp):
    """
    Scrollback buffer holding 20 one-word lines, 'line 0' to 'line 19'.
    """
    for i in range(20):
        buffer.push_line(timestamp, 'tag', f'line {i}')
    return buffer


@pytest.fixture
def aliases():
    """
    Alias table with only the built-in defaults.

    Returns:
        CommandAliasTable: leader ',' and commander '/'
    """
    return CommandAliasTable()


@pytest.fixture
def recorder():
    """Empty motion recorder."""
    return MotionRecorder()


@pytest.fixture
def enter():
    return KeyEvent(KEY_ENTER)


@pytest.fixture
def escape():
    return KeyEvent(KEY_ESCAPE)


@pytest.fixture
def backspace():
    return KeyEvent(KEY_BACKSPACE)


@pytest.fixture
def mock_term():
    """
    Mock blessed Terminal.

    Formatting attributes are absent, so widgets draw plain text, and
    output is collected in an in-memory stream.

    Returns:
        Mock: Terminal with width, height, move_xy, inkey and stream
    """
    term = Mock(spec=['width', 'height', 'move_xy', 'inkey', 'stream'])
    term.width = 80
    term.height = 24
    term.move_xy = Mock(side_effect=lambda x, y: f'<{x},{y}>')
    term.inkey = Mock(return_value='')
    term.stream = io.StringIO()
    return term


@pytest.fixture
def sample_config():
    """
    Sample configuration file contents.

    Returns:
        dict: Config with tui settings and alias overrides
    """
    return {
        'log_level': 'debug',
        'tui': {
            'scrollbuffer': 256,
            'lcol_width': 10,
            'tz': 'Europe/Berlin',
            'sample_feed': False,
        },
        'aliases': {
            'Leader': ';',
            'quit': 'q',
        }
    }


@pytest.fixture
def temp_config_file(tmp_path, sample_config):
    """
    Create temporary config file for testing.

    Returns:
        Path: Path to temporary config.json file
    """
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(sample_config, indent=2))
    return config_file


def pytest_configure(config):
    """
    Pytest configuration hook.

    Registers custom markers.
    """
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests (>1s)")
