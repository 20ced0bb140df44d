"""
Shared fixtures for integration tests.

Integration tests drive a real TUIApp, with real buffers and tokenizer,
against the mock terminal from the top-level conftest.
"""
from contextlib import nullcontext
from unittest.mock import Mock

import pytest

from blessed.keyboard import Keystroke

from client.app import TUIApp
from common import Config
from scrollterm.keys import keys_from_text


@pytest.fixture
def app_config():
    """Configuration without the sample feed."""
    return Config({
        'tui': {'scrollbuffer': 100, 'lcol_width': 12, 'sample_feed': False}
    })


@pytest.fixture
def app(app_config, mock_term):
    """TUIApp drawing onto the mock terminal."""
    return TUIApp(app_config, term=mock_term)


@pytest.fixture
def chat_app(app, timestamp):
    """TUIApp with 20 lines in the chat buffer."""
    for i in range(20):
        app.push_chat_line(timestamp, '<nick>', f'message {i}')
    return app


@pytest.fixture
def type_keys():
    """
    Feed text to an app one key at a time.

    Newlines are sent as Enter.
    """
    def _type(app, text):
        for event in keys_from_text(text):
            app.handle_key_event(event)
    return _type


@pytest.fixture
def scripted_term(mock_term):
    """
    Mock terminal whose inkey replays a script of keystrokes.

    Returns:
        callable: Takes the text to type and returns the terminal
    """
    def _script(text):
        keys = iter([Keystroke(char) for char in text])
        mock_term.inkey = Mock(side_effect=lambda timeout=None: next(keys, Keystroke('')))
        mock_term.fullscreen = Mock(return_value=nullcontext())
        mock_term.cbreak = Mock(return_value=nullcontext())
        mock_term.hidden_cursor = Mock(return_value=nullcontext())
        mock_term.clear = ''
        return mock_term
    return _script
