#!/usr/bin/env python3
"""Bounded scrollback buffer with auto-follow scrolling."""
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from itertools import islice

from .sync import PoisonLock
from .text import Line
from .wrap import line_height, wrap

# Width of the "[HH:MM:SS]" column
TIMESTAMP_WIDTH = 10
# Timestamp column plus the side borders and column gaps
CHROME_WIDTH = 14
# Rows taken by the frame above and below the content area
FRAME_HEIGHT = 2

TIMESTAMP_FORMAT = '[%H:%M:%S]'


@dataclass(frozen=True)
class LogLine:
    """A timestamped line as stored in the buffer."""
    timestamp: datetime
    tag: Line
    body: Line


@dataclass(frozen=True)
class Row:
    """One rendered scrollback row.

    Attributes:
        timestamp (str): Formatted timestamp column
        tag (Line): Tag column, drawn right-aligned
        body (tuple of Line): Body wrapped to the content width
        height (int): Screen rows the row occupies
    """
    timestamp: str
    tag: Line
    body: tuple
    height: int


class ScrollbackBuffer:
    """Insertion-ordered store of log lines with a scroll offset.

    The scroll offset counts lines back from the newest one. At offset 0 the
    view follows new lines as they arrive; once the user pans away, new
    lines bump the offset so the visible window stays put.

    The true viewport height is only known while rendering, so scroll
    clamping uses the height seen by the most recent `render` call.

    Every public method runs under the buffer's lock. If an operation fails
    while holding it, later calls raise `LockPoisonedError` until `recover`
    is called or the buffer is replaced.

    Attributes:
        capacity (int): Lines are evicted once the count reaches this
        tz (tzinfo): Time zone timestamps are displayed in
        tag_width (int): Width of the tag column
    """

    def __init__(self, capacity=1024, tz=None, tag_width=12, name='scrollback'):
        self.capacity = max(0, int(capacity))
        self.tz = tz or timezone.utc
        self.tag_width = max(0, int(tag_width))
        self.name = name
        self._lines = deque()
        self._scroll = 0
        self._last_viewport_height = 0
        self._lock = PoisonLock(name)

    def __repr__(self):
        return '<ScrollbackBuffer %s capacity=%d>' % (self.name, self.capacity)

    # Helpers below expect the lock to be held

    def _max_scroll(self):
        return max(0, len(self._lines) + FRAME_HEIGHT - self._last_viewport_height)

    def _clamp_scroll(self, value):
        return min(max(0, value), self._max_scroll())

    def _make_row(self, line, content_width):
        body = tuple(wrap(line.body, content_width))
        height = max(line_height(line.body, content_width), len(body))
        return Row(
            timestamp=line.timestamp.astimezone(self.tz).strftime(TIMESTAMP_FORMAT),
            tag=line.tag,
            body=body,
            height=height
        )

    # Public API

    def push_line(self, timestamp, tag, body):
        """Append a line, evicting the oldest ones past capacity.

        Args:
            timestamp (datetime or None): When the line was produced; naive
                values are taken as UTC, `None` means now
            tag (Line or str): Short label shown in the tag column
            body (Line or str): Line content
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc)
        elif timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        line = LogLine(timestamp, Line.coerce(tag), Line.coerce(body))

        with self._lock:
            self._lines.append(line)

            # A nonzero offset means the user panned away: keep the
            # camera on the same content instead of following.
            if self._scroll != 0:
                self._scroll = self._clamp_scroll(self._scroll + 1)

            while self._lines and len(self._lines) >= self.capacity:
                self._lines.popleft()
            self._scroll = self._clamp_scroll(self._scroll)

    def scroll(self):
        """Current scroll offset, in lines back from the newest."""
        with self._lock:
            return self._scroll

    def set_scroll(self, value):
        with self._lock:
            self._scroll = self._clamp_scroll(value)

    def inc_scroll(self, amount=1):
        """Pan back through history."""
        with self._lock:
            self._scroll = self._clamp_scroll(self._scroll + amount)

    def dec_scroll(self, amount=1):
        """Pan forward, towards the newest line."""
        with self._lock:
            self._scroll = self._clamp_scroll(self._scroll - amount)

    def count(self):
        with self._lock:
            return len(self._lines)

    @property
    def last_viewport_height(self):
        with self._lock:
            return self._last_viewport_height

    def lines(self):
        """Snapshot of the stored lines, oldest first."""
        with self._lock:
            return list(self._lines)

    def clear(self):
        """Drop every line and return to the bottom."""
        with self._lock:
            self._lines.clear()
            self._scroll = 0

    @staticmethod
    def line_height(line, max_width):
        return line_height(line, max_width)

    def content_width(self, width):
        """Columns left for line bodies in a frame `width` columns wide."""
        return max(0, width - CHROME_WIDTH - self.tag_width)

    def render(self, width, height):
        """Lay out the visible rows for a frame of the given size.

        Records `height` as the viewport height used for scroll clamping,
        then selects rows starting ``count - (height - 2) - scroll`` lines
        from the top.

        Args:
            width (int): Frame width in columns, borders included
            height (int): Frame height in rows, borders included

        Returns:
            list of Row: Rows starting inside the content area
        """
        width = max(0, width)
        height = max(0, height)

        with self._lock:
            self._last_viewport_height = height
            self._scroll = self._clamp_scroll(self._scroll)

            content_width = self.content_width(width)
            view_height = max(0, height - FRAME_HEIGHT)
            offset = max(0, len(self._lines) - view_height - self._scroll)

            rows = []
            used = 0
            for line in islice(self._lines, offset, None):
                if used >= view_height:
                    break
                row = self._make_row(line, content_width)
                rows.append(row)
                used += row.height
            return rows

    def recover(self):
        """Clear a poisoned lock and keep using the stored lines."""
        self._lock.clear_poison()

    @property
    def poisoned(self):
        return self._lock.poisoned
