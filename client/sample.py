#!/usr/bin/env python3
"""Synthetic chat feed for trying out the scrollback without a server."""
import logging
import threading
from datetime import datetime, timezone

from scrollterm import Line, Span

logger = logging.getLogger(__name__)

SAMPLE_LOG = r"""
<marla> morning all
<ozzie> morning! did the new build land?
<marla> it did, scrollback finally keeps up with the firehose
* ozzie throws confetti
<ozzie> how long is the buffer now?
<marla> 1024 lines per channel, oldest ones fall off the top
<quill> what happens if I scroll up while people keep talking?
<marla> the view stays put, new lines pile up below until you page back down
<quill> nice, the old client used to yank me back to the bottom every message
<ozzie> try pasting something wide: 日本語のテキストも折り返されるはず
<quill> emoji too? 👩‍👩‍👧 should never get cut in half
<marla> grapheme clusters stay whole, wide ones included
* quill pages up and down a few times
<quill> ok I'm convinced
<ozzie> ,q quits by the way
<marla> and escape throws away whatever you were typing
Server notice: maintenance window tonight at 23:00 UTC
<quill> see you on the other side
"""


class NickPalette:
    """Consistent color per nickname, cycling through a fixed palette."""

    COLORS = [
        'cyan', 'green', 'yellow', 'blue', 'magenta',
        'bright_cyan', 'bright_green', 'bright_yellow',
        'bright_blue', 'bright_magenta'
    ]

    def __init__(self):
        self._colors = {}

    def color(self, nick):
        if nick not in self._colors:
            self._colors[nick] = self.COLORS[len(self._colors) % len(self.COLORS)]
        return self._colors[nick]


def parse_sample_line(line, palette=None):
    """Split an IRC-log style line into tag and body.

    ``<nick> text`` is tagged ``<nick>``, ``* nick does`` is tagged ``*``
    and anything else gets an empty tag.

    Args:
        line (str): One line of log text
        palette (NickPalette, optional): Colors for nicknames

    Returns:
        tuple of (Line, Line) or None: `None` for blank lines
    """
    if not line.strip():
        return None

    if line.startswith('<') and '>' in line:
        nick, _, text = line.partition('>')
        nick = nick[1:]
        style = palette.color(nick) if palette is not None else None
        if text.startswith(' '):
            text = text[1:]
        return Line((Span('<%s>' % nick, style),)), Line.from_str(text)

    if line.startswith('* '):
        return Line((Span('*', 'bright_black'),)), Line.from_str(line[2:])

    return Line(), Line.from_str(line)


class SampleFeed(threading.Thread):
    """Background thread pushing the sample log into a line sink.

    Args:
        sink: Callable taking ``(timestamp, tag, body)``, usually
            `ScrollbackBuffer.push_line`
        delay (float): Seconds to wait between lines
        text (str): Log text to replay
    """

    def __init__(self, sink, delay=0.0, text=SAMPLE_LOG):
        super().__init__(name='sample-feed', daemon=True)
        self.sink = sink
        self.delay = delay
        self.text = text
        self.palette = NickPalette()
        self._halt = threading.Event()

    def stop(self):
        self._halt.set()

    def run(self):
        count = 0
        for raw in self.text.splitlines():
            if self._halt.is_set():
                break
            parsed = parse_sample_line(raw, self.palette)
            if parsed is None:
                continue
            tag, body = parsed
            self.sink(datetime.now(timezone.utc), tag, body)
            count += 1
            if self.delay and self._halt.wait(self.delay):
                break
        logger.info('sample feed finished after %d lines', count)
