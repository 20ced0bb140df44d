#!/usr/bin/env python3
"""Key press events.

Special keys use blessed's key names (``KEY_ENTER``, ``KEY_PGUP``, ...) as
their code; character keys use the character itself.
"""
import enum
from dataclasses import dataclass

KEY_ENTER = 'KEY_ENTER'
KEY_ESCAPE = 'KEY_ESCAPE'
KEY_BACKSPACE = 'KEY_BACKSPACE'
KEY_TAB = 'KEY_TAB'
KEY_PGUP = 'KEY_PGUP'
KEY_PGDOWN = 'KEY_PGDOWN'

# Raw control bytes that stand for a named key rather than a ^ chord
_CONTROL_KEYS = {
    '\r': KEY_ENTER,
    '\n': KEY_ENTER,
    '\t': KEY_TAB,
    '\x1b': KEY_ESCAPE,
    '\x08': KEY_BACKSPACE,
    '\x7f': KEY_BACKSPACE,
}


class KeyModifiers(enum.IntFlag):
    NONE = 0
    SHIFT = 1
    CONTROL = 2
    ALT = 4


@dataclass(frozen=True)
class KeyEvent:
    """A single key press.

    Attributes:
        code (str): The character typed, or a ``KEY_*`` name
        modifiers (KeyModifiers): Modifier keys held
    """
    code: str
    modifiers: KeyModifiers = KeyModifiers.NONE

    @property
    def is_char(self):
        """True for character keys, whatever the modifiers."""
        return bool(self.code) and not self.code.startswith('KEY_')

    @property
    def is_printable(self):
        """True for plain character keys that produce a visible glyph.

        Spaces count as printable; control and alt chords do not.
        """
        if not self.is_char:
            return False
        if self.modifiers & (KeyModifiers.CONTROL | KeyModifiers.ALT):
            return False
        return self.code.isprintable()

    @property
    def ctrl(self):
        return bool(self.modifiers & KeyModifiers.CONTROL)

    def __str__(self):
        if self.is_char:
            return '^%s' % self.code if self.ctrl else self.code
        return self.code

    @classmethod
    def from_keystroke(cls, keystroke):
        """Convert a blessed `Keystroke` into a `KeyEvent`.

        Control characters become ``^x`` chords on the lowercase letter,
        except the ones terminals send for Enter, Tab, Escape and Backspace.

        Args:
            keystroke (blessed.keyboard.Keystroke): Key read from `inkey`

        Returns:
            KeyEvent or None: `None` for an empty (timed out) keystroke
        """
        text = str(keystroke)
        name = getattr(keystroke, 'name', None)

        if getattr(keystroke, 'is_sequence', False) and name:
            # Newer blessed releases name control and alt combinations
            if name.startswith('KEY_CTRL_') and len(name) == len('KEY_CTRL_') + 1:
                return cls(name[-1].lower(), KeyModifiers.CONTROL)
            if name.startswith('KEY_ALT_') and len(name) == len('KEY_ALT_') + 1:
                return cls(name[-1].lower(), KeyModifiers.ALT)
            return cls(name)

        if not text:
            return None

        if text in _CONTROL_KEYS:
            return cls(_CONTROL_KEYS[text])

        if len(text) == 1 and ord(text) < 0x20:
            return cls(chr(ord(text) + 0x40).lower(), KeyModifiers.CONTROL)

        return cls(text)


def keys_from_text(text):
    """Key events that would type `text`; newlines become Enter."""
    return [KeyEvent(KEY_ENTER) if char == '\n' else KeyEvent(char) for char in text]
