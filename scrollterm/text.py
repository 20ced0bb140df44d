#!/usr/bin/env python3
"""Styled text for the scrollback.

A `Line` is a run of `Span` fragments, each carrying an optional blessed
formatting attribute name such as ``'bright_green'`` or ``'bold_red'``.
Widths are terminal columns, not code points.
"""
from dataclasses import dataclass, field

import grapheme
import wcwidth


def display_width(text):
    """Terminal column width of a string.

    Each grapheme cluster is measured as a whole, so emoji ZWJ and
    variation-selector sequences take the width of the glyph drawn rather
    than the sum of their code points. Zero-width and non-printable code
    points count as 0 columns.

    Args:
        text (str): Text to measure

    Returns:
        int: Width in columns
    """
    width = 0
    for cluster in grapheme.graphemes(text):
        wc = wcwidth.wcswidth(cluster)
        if wc < 0:
            # Cluster holds a control character; count what is printable
            wc = sum(max(0, wcwidth.wcwidth(char)) for char in cluster)
        width += wc
    return width


def graphemes(text):
    """Iterate over the grapheme clusters of a string."""
    return grapheme.graphemes(text)


@dataclass(frozen=True)
class Span:
    """A fragment of text with a single style."""
    content: str = ''
    style: str = None

    @property
    def width(self):
        return display_width(self.content)


@dataclass(frozen=True)
class Line:
    """An immutable sequence of styled spans."""
    spans: tuple = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any iterable of spans but always store a tuple
        object.__setattr__(self, 'spans', tuple(self.spans))

    @classmethod
    def from_str(cls, text, style=None):
        """Build a single-span line.

        Args:
            text (str): Line content
            style (str, optional): Blessed formatting attribute name

        Returns:
            Line: The line, with no spans if `text` is empty
        """
        if not text:
            return cls()
        return cls((Span(text, style),))

    @classmethod
    def coerce(cls, value):
        """Return `value` as a `Line`, converting plain strings."""
        if isinstance(value, Line):
            return value
        if isinstance(value, Span):
            return cls((value,))
        if value is None:
            return cls()
        return cls.from_str(str(value))

    @property
    def text(self):
        return ''.join(span.content for span in self.spans)

    @property
    def width(self):
        return sum(span.width for span in self.spans)

    def __str__(self):
        return self.text

    def __bool__(self):
        return any(span.content for span in self.spans)
