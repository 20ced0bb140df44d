#!/usr/bin/env python3
"""Grapheme-safe line wrapping for fixed-width columns."""
from .text import Line, Span, display_width, graphemes


def wrap(line, max_width):
    """Wrap a styled line to a column width.

    Breaks fall between grapheme clusters, so combining marks, emoji
    sequences and wide characters are never split. Span styles are kept on
    every fragment. A grapheme wider than `max_width` is placed alone on its
    own line rather than dropped.

    Args:
        line (Line or str): Line to wrap
        max_width (int): Available columns

    Returns:
        list of Line: At least one line; an empty input yields one empty line
    """
    line = Line.coerce(line)

    output = []
    current = []
    current_width = 0

    for span in line.spans:
        pending = ''
        pending_width = 0

        for cluster in graphemes(span.content):
            cluster_width = display_width(cluster)

            # If adding the grapheme would overflow the current line...
            if (current_width + pending_width + cluster_width > max_width
                    and (current or pending)):
                # ...close it off and start a new one
                if pending:
                    current.append(Span(pending, span.style))
                output.append(Line(current))
                current = []
                current_width = 0
                pending = ''
                pending_width = 0

            pending += cluster
            pending_width += cluster_width

        if pending:
            current.append(Span(pending, span.style))
            current_width += pending_width

    output.append(Line(current))
    return output


def line_height(line, max_width):
    """Number of rows a line needs at `max_width` columns.

    This is ``width // max_width + 1``, so the caller can size a row
    without wrapping. A zero width yields 1.
    """
    if max_width <= 0:
        return 1
    return Line.coerce(line).width // max_width + 1
