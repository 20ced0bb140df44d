#!/usr/bin/env python3
"""Lexing of recorded motions into command tokens.

The tokenizer only classifies input; it performs no validation. Whatever
evaluates the tokens decides what a sequence such as
``[ClientCommandMarker(), Identifier('q'), Submit()]`` means.
"""
from collections import deque
from dataclasses import dataclass

from .aliases import CommandAliasTable
from .keys import KEY_ENTER, KeyEvent

DIGITS = '0123456789'


class MotionToken:
    """Base class of every token kind."""
    __slots__ = ()


@dataclass(frozen=True)
class ClientCommandMarker(MotionToken):
    """The leader trigger, ``,`` by default."""


@dataclass(frozen=True)
class ServerCommandMarker(MotionToken):
    """The commander trigger, ``/`` by default."""


@dataclass(frozen=True)
class Submit(MotionToken):
    """The Enter key."""


@dataclass(frozen=True)
class StringLiteral(MotionToken):
    """Text between double quotes, escapes resolved."""
    text: str


@dataclass(frozen=True)
class NumberLiteral(MotionToken):
    """Signed base-10 integer."""
    value: int


@dataclass(frozen=True)
class Identifier(MotionToken):
    """A run of non-whitespace characters not starting a literal."""
    text: str


@dataclass(frozen=True)
class Chord(MotionToken):
    """A key press with no glyph, such as an arrow key or ``^A``."""
    event: KeyEvent


def _is_digit(event):
    return (event is not None and event.is_printable
            and len(event.code) == 1 and event.code in DIGITS)


class MotionTokenizer:
    """Lazy, single-pass iterator of tokens over a sequence of key events.

    At each position the first matching rule wins:

    1. Enter gives `Submit`.
    2. The leader trigger gives `ClientCommandMarker`.
    3. The commander trigger gives `ServerCommandMarker`.
    4. ``"`` starts a `StringLiteral` running to the next unescaped ``"``.
       A backslash escapes the following character.
    5. ``-`` followed by a digit, or a digit, starts a `NumberLiteral`.
    6. Whitespace is skipped.
    7. Any other printable character starts an `Identifier` running to the
       next whitespace.
    8. Keys without a glyph give a `Chord`.

    Malformed input never raises. A string literal that is never closed
    yields the text collected so far; it also ends, without consuming it,
    at the first key without a glyph, so a trailing Enter still gives
    `Submit`. A ``-`` not followed by a digit is read as an identifier.

    Triggers may be longer than one character; lookahead grows to the
    longest trigger.

    Parameters
    ----------
    events : iterable of `KeyEvent`
    aliases : `CommandAliasTable`, optional
    """

    def __init__(self, events, aliases=None):
        self._input = iter(events)
        self._lookahead = deque()
        self.aliases = aliases if aliases is not None else CommandAliasTable()

        triggers = [
            (ClientCommandMarker, self.aliases.leader),
            (ServerCommandMarker, self.aliases.commander),
        ]
        # Longest trigger first; ties keep the leader ahead
        self._triggers = sorted(
            ((token, trigger) for token, trigger in triggers if trigger),
            key=lambda item: len(item[1]),
            reverse=True
        )

    def __iter__(self):
        return self

    def _peek(self, distance=0):
        """Look ahead without consuming; `None` past the end."""
        while len(self._lookahead) <= distance:
            event = next(self._input, None)
            if event is None:
                return None
            self._lookahead.append(event)
        return self._lookahead[distance]

    def _advance(self, count=1):
        for _ in range(count):
            if self._peek() is None:
                return
            self._lookahead.popleft()

    def _matches(self, trigger):
        for i, char in enumerate(trigger):
            event = self._peek(i)
            if event is None or not event.is_printable or event.code != char:
                return False
        return True

    def __next__(self):
        while True:
            event = self._peek()
            if event is None:
                raise StopIteration

            if event.code == KEY_ENTER:
                self._advance()
                return Submit()

            if not event.is_printable:
                self._advance()
                return Chord(event)

            for token, trigger in self._triggers:
                if self._matches(trigger):
                    self._advance(len(trigger))
                    return token()

            char = event.code
            if char == '"':
                self._advance()
                return self._string_literal()
            if _is_digit(event) or (char == '-' and _is_digit(self._peek(1))):
                return self._number_literal()
            if char.isspace():
                # Whitespace only separates tokens at this level
                self._advance()
                continue
            return self._identifier()

    def _string_literal(self):
        chars = []
        while True:
            event = self._peek()
            if event is None or not event.is_printable:
                break
            self._advance()

            if event.code == '"':
                break
            if event.code == '\\':
                escaped = self._peek()
                if escaped is not None and escaped.is_printable:
                    self._advance()
                    chars.append(escaped.code)
                    continue
            chars.append(event.code)
        return StringLiteral(''.join(chars))

    def _number_literal(self):
        digits = []
        if self._peek().code == '-':
            digits.append('-')
            self._advance()
        while _is_digit(self._peek()):
            digits.append(self._peek().code)
            self._advance()
        return NumberLiteral(int(''.join(digits)))

    def _identifier(self):
        chars = []
        while True:
            event = self._peek()
            if event is None or not event.is_printable or event.code.isspace():
                break
            chars.append(event.code)
            self._advance()
        return Identifier(''.join(chars))


def tokenize(events, aliases=None):
    """Tokenize a whole motion at once.

    Returns:
        list of MotionToken
    """
    return list(MotionTokenizer(events, aliases))
