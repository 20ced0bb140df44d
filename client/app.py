#!/usr/bin/env python3
"""Terminal client built on the scrollback buffer and motion tokenizer.

Usage:
    scrollterm [config.json]
    python -m client.app [config.json]

Keybindings:
    - Typing: Record a motion in the input line
    - Enter: Submit the motion
    - Escape: Abort the motion
    - Backspace: Drop the last key of the motion
    - Page Up/Down: Scroll the focused buffer
    - Tab: Switch between the chat and debug buffers
    - Ctrl+C: Quit

Motions:
    - ,q or ,quit: Exit
    - ,clear: Clear the input line
    - ,bottom: Scroll back to the newest line
"""
import sys
import logging

from blessed import Terminal

from scrollterm import (
    Api, ClientCommandMarker, ConfigError, Identifier, KeyEvent,
    LockPoisonedError, MotionRecorder, NotConnectedError, ScrollDirection,
    ScrollbackBuffer, ServerCommandMarker, Submit, tokenize
)
from scrollterm.keys import KEY_ENTER, KEY_PGDOWN, KEY_PGUP, KEY_TAB

from common import Config, ScrollbackHandler, configure_logger, get_config
from common.config import LOG_FORMAT

from .sample import SampleFeed
from .widgets import Rect, RenderContext, StatelessView, Surface


class TUIApp(Api):
    """Terminal client state and main loop.

    Holds two scrollback buffers, the chat and the debug log, of which one
    is focused and drawn. Key presses are recorded into a motion; on Enter
    the motion is tokenized and evaluated.

    Attributes:
        term (Terminal): Blessed terminal used for drawing and input
        config (Config): Loaded configuration
        aliases (CommandAliasTable): Trigger strings for the tokenizer
        recorder (MotionRecorder): The motion being typed
        buffers (list): ``(name, ScrollbackBuffer)`` pairs
        buffer_cursor (int): Index of the focused buffer
        tick (int): Frames drawn so far
    """
    logger = logging.getLogger(__name__)

    # Seconds to wait for the first key of each tick
    FRAME_TIMEOUT = 0.05

    def __init__(self, config=None, term=None):
        self.config = config or Config()
        self.term = term if term is not None else Terminal()
        self.aliases = self.config.aliases
        self.recorder = MotionRecorder()

        self.buffers = [
            ('chat', self._new_buffer('chat')),
            ('debug', self._new_buffer('debug')),
        ]
        self.buffer_cursor = 0

        self.log_handler = ScrollbackHandler(self.debug_buffer)
        self.view = StatelessView()
        self.tick = 0
        self.running = False
        self._exit = False

    def _new_buffer(self, name):
        ui = self.config.ui
        return ScrollbackBuffer(ui.scrollbuffer, ui.tz, ui.lcol_width, name=name)

    @property
    def chat_buffer(self):
        return self.buffers[0][1]

    @property
    def debug_buffer(self):
        return self.buffers[1][1]

    @property
    def focused_buffer(self):
        return self.buffers[self.buffer_cursor][1]

    def rebuild_buffer(self, index):
        """Replace a buffer whose lock was poisoned with an empty one."""
        name, _ = self.buffers[index]
        self.buffers[index] = (name, self._new_buffer(name))
        self.log_handler.buffer = self.debug_buffer
        self.logger.warning('%s buffer was poisoned and has been rebuilt', name)

    def push_chat_line(self, timestamp, tag, body):
        """Line sink for producers feeding the chat buffer."""
        try:
            self.chat_buffer.push_line(timestamp, tag, body)
        except LockPoisonedError:
            self.rebuild_buffer(0)
            self.chat_buffer.push_line(timestamp, tag, body)

    def _scroll_focused(self, method, *args):
        """Call a scroll method on the focused buffer, rebuilding it if poisoned.

        A rebuilt buffer starts at the bottom, so the scroll is not retried.
        """
        try:
            getattr(self.focused_buffer, method)(*args)
        except LockPoisonedError:
            self.rebuild_buffer(self.buffer_cursor)

    # Api

    def exit(self):
        self._exit = True

    @property
    def exiting(self):
        return self._exit

    def scroll(self, direction):
        if direction == ScrollDirection.BACKWARD:
            self._scroll_focused('inc_scroll')
        else:
            self._scroll_focused('dec_scroll')

    def clear_input_buffer(self):
        self.recorder.clear()

    def send_message(self, server, channel, message):
        raise NotConnectedError('not connected to %s' % (server or 'any server'))

    # Input

    def handle_key_event(self, event):
        """Apply one key press to the application state.

        Args:
            event (KeyEvent): The key pressed
        """
        if event.code == KEY_PGUP:
            self.scroll(ScrollDirection.BACKWARD)
        elif event.code == KEY_PGDOWN:
            self.scroll(ScrollDirection.FORWARD)
        elif event.code == KEY_TAB:
            self.buffer_cursor = (self.buffer_cursor + 1) % len(self.buffers)
        elif event.ctrl and event.code == 'c':
            self.exit()
        elif event.code == KEY_ENTER:
            self.recorder.append(event)
            self.submit()
        else:
            self.recorder.append(event)

    def handle_events(self):
        """Drain every pending key press without blocking past the frame."""
        keystroke = self.term.inkey(timeout=self.FRAME_TIMEOUT)
        while keystroke:
            event = KeyEvent.from_keystroke(keystroke)
            if event is not None:
                self.handle_key_event(event)
            keystroke = self.term.inkey(timeout=0)

    def submit(self):
        """Tokenize and evaluate the recorded motion, then clear it."""
        tokens = tokenize(self.recorder.events, self.aliases)
        self.logger.debug('motion %r -> %r', str(self.recorder), tokens)
        try:
            self.evaluate(tokens)
        finally:
            self.recorder.clear()

    def evaluate(self, tokens):
        """Run the handful of motions the client understands.

        Args:
            tokens (list of MotionToken): A tokenized motion
        """
        # Drop the trailing Submit
        if tokens and tokens[-1] == Submit():
            tokens = tokens[:-1]
        if not tokens:
            return

        head = tokens[0]
        if head == ClientCommandMarker():
            if len(tokens) < 2 or not isinstance(tokens[1], Identifier):
                self.logger.warning('client command needs a name')
                return
            command = tokens[1].text.lower()
            if command in ('q', 'quit'):
                self.exit()
            elif command == 'clear':
                self.clear_input_buffer()
            elif command == 'bottom':
                self._scroll_focused('set_scroll', 0)
            else:
                self.logger.warning('unknown client command: %s', command)
        elif head == ServerCommandMarker():
            self.logger.warning('server commands need a connection: %r', tokens[1:])
        else:
            text = str(self.recorder).rstrip()
            try:
                self.send_message(None, None, text)
            except NotConnectedError as e:
                self.logger.warning('message not sent: %s', e)

    # Rendering

    def context(self):
        name, buffer = self.buffers[self.buffer_cursor]
        return RenderContext(
            tick=self.tick,
            user_line=self.recorder.to_display_string(),
            lcol_width=self.config.ui.lcol_width,
            text_buffer=buffer,
            title=name
        )

    def render_frame(self):
        """Draw the focused buffer and the input line."""
        surface = Surface(self.term)
        area = Rect(0, 0, self.term.width, self.term.height)
        try:
            self.view.render(self.context(), area, surface)
        except LockPoisonedError:
            self.rebuild_buffer(self.buffer_cursor)
            return
        surface.flush()

    def run(self):
        """Run the main loop until an exit is requested."""
        self.running = True
        feed = None
        if self.config.ui.sample_feed:
            feed = SampleFeed(self.push_chat_line, self.config.ui.sample_delay)
            feed.start()

        try:
            with self.term.fullscreen(), self.term.cbreak(), self.term.hidden_cursor():
                print(self.term.clear, end='', flush=True)
                while not self._exit:
                    self.tick += 1
                    self.render_frame()
                    self.handle_events()
        finally:
            self.running = False
            if feed is not None:
                feed.stop()


def main(argv=None):
    """Main entry point for the terminal client.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    try:
        config = get_config(argv)
    except (ConfigError, OSError) as e:
        print(f'Configuration error: {e}', file=sys.stderr)
        return 1
    app = TUIApp(config)

    # Log into the debug buffer while the screen is taken over
    root = logging.getLogger()
    root.setLevel(config.log_level)
    handler = app.log_handler
    root.addHandler(handler)
    if config.log_file:
        configure_logger(root, config.log_file, LOG_FORMAT, config.log_level)

    try:
        app.run()
        return 0
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logging.getLogger(__name__).exception('Fatal error in TUI')
        print(f'\nFatal error: {e}', file=sys.stderr)
        return 1
    finally:
        root.removeHandler(handler)


if __name__ == '__main__':
    sys.exit(main())
