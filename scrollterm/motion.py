#!/usr/bin/env python3
"""Recording of the in-progress command line."""
from .keys import KEY_BACKSPACE, KEY_ESCAPE


class MotionRecorder:
    """Accumulates key presses into an editable motion.

    Escape aborts the motion, Backspace drops the last key, and every other
    key, chords included, is recorded as-is. The recorded keys are later
    handed to `MotionTokenizer`.
    """

    def __init__(self):
        self._motion = []

    def append(self, event):
        """Record a key press.

        Args:
            event (KeyEvent): The key pressed
        """
        if event.code == KEY_ESCAPE:
            self._motion.clear()
        elif event.code == KEY_BACKSPACE:
            if self._motion:
                self._motion.pop()
        else:
            self._motion.append(event)

    def clear(self):
        """Reset the motion to empty."""
        self._motion.clear()

    @property
    def events(self):
        """The recorded keys, oldest first."""
        return tuple(self._motion)

    def to_display_string(self):
        """The motion as the user would recognize it.

        Character keys show their glyph, with a ``^`` prefix when Control
        was held. Other keys are not shown.
        """
        parts = []
        for event in self._motion:
            if event.is_char:
                if event.ctrl:
                    parts.append('^')
                parts.append(event.code)
        return ''.join(parts)

    def __str__(self):
        return self.to_display_string()

    def __len__(self):
        return len(self._motion)

    def __iter__(self):
        return iter(self.events)
