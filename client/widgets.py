#!/usr/bin/env python3
"""Widgets drawing application state onto a blessed terminal.

Every widget has the same shape, ``render(ctx, area, surface)``: it reads
what it needs from the `RenderContext`, and queues text for the cells in
`area` on the `Surface`. Nothing is written to the terminal until the
surface is flushed, once per frame.
"""
from collections import namedtuple
from dataclasses import dataclass

from scrollterm import Span, display_width
from scrollterm.scrollback import TIMESTAMP_WIDTH
from scrollterm.text import graphemes

Rect = namedtuple('Rect', 'x y width height')

# Rows taken by the input box under the log view
INPUT_HEIGHT = 2


@dataclass
class RenderContext:
    """Application state imparted into a single frame.

    Attributes:
        tick (int): Frame counter
        user_line (str): The motion being typed
        lcol_width (int): Width of the tag column
        text_buffer (ScrollbackBuffer): The focused buffer
        title (str): Name of the focused buffer
    """
    tick: int
    user_line: str
    lcol_width: int
    text_buffer: object
    title: str = ''


def split_columns(area, percent=75):
    """Split an area into left gutter, center and right gutter.

    The center takes `percent` of the width; the gutters share the rest.
    """
    center = area.width * percent // 100
    left = (area.width - center) // 2
    right = area.width - center - left
    return [
        Rect(area.x, area.y, left, area.height),
        Rect(area.x + left, area.y, center, area.height),
        Rect(area.x + left + center, area.y, right, area.height),
    ]


def split_rows(area, bottom_height):
    """Split an area into a filling top part and a fixed-height bottom."""
    bottom_height = min(bottom_height, area.height)
    top_height = area.height - bottom_height
    return [
        Rect(area.x, area.y, area.width, top_height),
        Rect(area.x, area.y + top_height, area.width, bottom_height),
    ]


def fit(spans, width, align='left'):
    """Clip styled spans to `width` columns and pad them out to it.

    Clipping happens between grapheme clusters, so the result may fall a
    column short before padding when a wide character does not fit.

    Args:
        spans (iterable of Span): Text to fit
        width (int): Target width in columns
        align (str): 'left' pads on the right, 'right' pads on the left

    Returns:
        list of Span: Spans exactly `width` columns wide
    """
    width = max(0, width)
    out = []
    used = 0
    full = False

    for span in spans:
        text = ''
        for cluster in graphemes(span.content):
            cluster_width = display_width(cluster)
            if used + cluster_width > width:
                full = True
                break
            text += cluster
            used += cluster_width
        if text:
            out.append(Span(text, span.style))
        if full:
            break

    fill = width - used
    if fill > 0:
        if align == 'right':
            out.insert(0, Span(' ' * fill))
        else:
            out.append(Span(' ' * fill))
    return out


def tail(text, width):
    """The longest end of `text` that fits in `width` columns."""
    kept = []
    used = 0
    for cluster in reversed(list(graphemes(text))):
        cluster_width = display_width(cluster)
        if used + cluster_width > width:
            break
        kept.append(cluster)
        used += cluster_width
    return ''.join(reversed(kept))


def paint(term, spans):
    """Apply each span's blessed formatting and join the result."""
    parts = []
    for span in spans:
        formatter = getattr(term, span.style, None) if span.style else None
        if callable(formatter):
            parts.append(formatter(span.content))
        else:
            parts.append(span.content)
    return ''.join(parts)


class Surface:
    """Collects positioned text for one frame, then writes it at once."""

    def __init__(self, term):
        self.term = term
        self.ops = []

    def put(self, x, y, text):
        self.ops.append((x, y, text))

    def put_spans(self, x, y, spans):
        self.put(x, y, paint(self.term, spans))

    def flush(self):
        out = ''.join(self.term.move_xy(x, y) + text for x, y, text in self.ops)
        self.ops = []
        self.term.stream.write(out)
        self.term.stream.flush()


class LogView:
    """Scrollback buffer drawn as a table inside a frame.

    Columns are the timestamp, the right-aligned tag and the wrapped body.
    The top border carries a status title and the bottom row is a
    separator shared with the input box.
    """

    def render(self, ctx, area, surface):
        if area.width < 2 or area.height < 1:
            return

        buffer = ctx.text_buffer
        rows = buffer.render(area.width, area.height)

        inner = area.width - 2
        title = ' %s| Rect: (%d, %d) | Scroll: %d | LC: %d ' % (
            '%s ' % ctx.title if ctx.title else '',
            area.width, area.height, buffer.scroll(), buffer.count()
        )
        title = ''.join(span.content for span in fit([Span(title)], inner))
        surface.put(area.x, area.y, '┌' + title.strip().center(inner, '─') + '┐')

        content_width = buffer.content_width(area.width)
        bottom = area.y + area.height - 1
        y = area.y + 1

        for row in rows:
            for i, body in enumerate(row.body):
                if y >= bottom:
                    break
                if i == 0:
                    spans = [Span(row.timestamp.ljust(TIMESTAMP_WIDTH), 'bright_black'), Span(' ')]
                    spans += fit(row.tag.spans, ctx.lcol_width, align='right')
                    spans.append(Span(' '))
                else:
                    spans = [Span(' ' * (TIMESTAMP_WIDTH + ctx.lcol_width + 2))]
                spans += fit(body.spans, content_width)
                surface.put_spans(area.x, y, [Span('│')] + fit(spans, inner) + [Span('│')])
                y += 1

        while y < bottom:
            surface.put(area.x, y, '│' + ' ' * inner + '│')
            y += 1

        if area.height >= 2:
            surface.put(area.x, bottom, '├' + '─' * inner + '┤')


class InputLine:
    """The user line: the motion being typed, above the bottom border."""

    PROMPT = '> '

    def render(self, ctx, area, surface):
        if area.width < 2 or area.height < 1:
            return
        inner = area.width - 2
        room = max(0, inner - len(self.PROMPT))
        spans = [Span(self.PROMPT, 'bright_white'), Span(tail(ctx.user_line, room))]
        surface.put_spans(area.x, area.y, [Span('│')] + fit(spans, inner) + [Span('│')])
        if area.height >= 2:
            surface.put(area.x, area.y + 1, '└' + '─' * inner + '┘')


class TerminalWidget:
    """Log view stacked over the input line."""

    def __init__(self):
        self.log_view = LogView()
        self.input_line = InputLine()

    def render(self, ctx, area, surface):
        log_area, input_area = split_rows(area, INPUT_HEIGHT)
        self.log_view.render(ctx, log_area, surface)
        self.input_line.render(ctx, input_area, surface)


class StatelessView:
    """Whole-screen layout: blank gutters around the terminal widget."""

    def __init__(self):
        self.terminal = TerminalWidget()

    def render(self, ctx, area, surface):
        left, center, right = split_columns(area)
        for gutter in (left, right):
            if gutter.width > 0:
                for y in range(gutter.y, gutter.y + gutter.height):
                    surface.put(gutter.x, y, ' ' * gutter.width)
        self.terminal.render(ctx, center, surface)
