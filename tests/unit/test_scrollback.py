#!/usr/bin/env python3

import threading
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

import scrollterm.scrollback as scrollback_module
from scrollterm import Line, LockPoisonedError, ScrollbackBuffer, Span
from scrollterm.scrollback import CHROME_WIDTH
from scrollterm.sync import PoisonLock


def bodies(rows):
    return [row.body[0].text for row in rows]


class TestCapacity:
    """Test bounded eviction."""

    def test_count_never_exceeds_capacity(self, timestamp):
        buffer = ScrollbackBuffer(capacity=10)
        for i in range(50):
            buffer.push_line(timestamp, 'tag', f'line {i}')
            assert buffer.count() <= 10

    def test_evicts_once_count_reaches_capacity(self, timestamp):
        buffer = ScrollbackBuffer(capacity=5)
        for i in range(8):
            buffer.push_line(timestamp, 'tag', f'line {i}')
        # The count is brought back below capacity after each push
        assert buffer.count() == 4
        assert [line.body.text for line in buffer.lines()] == [
            'line 4', 'line 5', 'line 6', 'line 7'
        ]

    def test_oldest_lines_go_first(self, filled_buffer):
        assert filled_buffer.lines()[0].body.text == 'line 0'
        assert filled_buffer.lines()[-1].body.text == 'line 19'

    def test_zero_capacity_keeps_nothing(self, timestamp):
        buffer = ScrollbackBuffer(capacity=0)
        buffer.push_line(timestamp, 'tag', 'gone')
        assert buffer.count() == 0


class TestPushLine:
    """Test line ingestion."""

    def test_strings_become_lines(self, buffer, timestamp):
        buffer.push_line(timestamp, 'nick', 'hello')
        line = buffer.lines()[0]
        assert line.tag == Line.from_str('nick')
        assert line.body == Line.from_str('hello')
        assert line.timestamp == timestamp

    def test_styled_lines_kept(self, buffer, timestamp):
        tag = Line([Span('INFO', 'bright_green')])
        buffer.push_line(timestamp, tag, 'started')
        assert buffer.lines()[0].tag is tag

    def test_naive_timestamp_taken_as_utc(self, buffer):
        buffer.push_line(datetime(2024, 1, 1, 12, 0), '', 'x')
        assert buffer.lines()[0].timestamp.tzinfo == timezone.utc

    def test_missing_timestamp_means_now(self, buffer):
        before = datetime.now(timezone.utc)
        buffer.push_line(None, '', 'x')
        assert buffer.lines()[0].timestamp >= before

    def test_lines_is_a_snapshot(self, filled_buffer, timestamp):
        snapshot = filled_buffer.lines()
        filled_buffer.push_line(timestamp, 'tag', 'later')
        assert len(snapshot) == 20

    def test_clear(self, filled_buffer):
        filled_buffer.set_scroll(4)
        filled_buffer.clear()
        assert filled_buffer.count() == 0
        assert filled_buffer.scroll() == 0


class TestAutoFollow:
    """Test scroll behavior as new lines arrive."""

    def test_pinned_view_stays_pinned(self, filled_buffer, timestamp):
        assert filled_buffer.scroll() == 0
        filled_buffer.push_line(timestamp, 'tag', 'new')
        assert filled_buffer.scroll() == 0

    def test_panned_view_is_anchored(self, filled_buffer, timestamp):
        filled_buffer.set_scroll(3)
        filled_buffer.push_line(timestamp, 'tag', 'new')
        assert filled_buffer.scroll() == 4
        filled_buffer.push_line(timestamp, 'tag', 'newer')
        assert filled_buffer.scroll() == 5

    def test_anchored_window_shows_same_lines(self, filled_buffer, timestamp):
        filled_buffer.render(80, 10)
        filled_buffer.set_scroll(5)
        before = bodies(filled_buffer.render(80, 10))
        filled_buffer.push_line(timestamp, 'tag', 'new')
        assert bodies(filled_buffer.render(80, 10)) == before

    def test_anchored_scroll_stays_in_range_at_capacity(self, timestamp):
        buffer = ScrollbackBuffer(capacity=5)
        for i in range(4):
            buffer.push_line(timestamp, 'tag', f'line {i}')
        buffer.render(80, 4)
        buffer.set_scroll(10 ** 9)
        assert buffer.scroll() == 2

        buffer.push_line(timestamp, 'tag', 'evicting')
        assert buffer.count() == 4
        assert buffer.scroll() <= max(0, buffer.count() + 2 - 4)

    def test_followed_window_moves(self, filled_buffer, timestamp):
        filled_buffer.render(80, 10)
        filled_buffer.push_line(timestamp, 'tag', 'new')
        assert bodies(filled_buffer.render(80, 10))[-1] == 'new'


class TestScrollClamp:
    """Test scroll offset limits."""

    def test_dec_saturates_at_zero(self, filled_buffer):
        filled_buffer.dec_scroll()
        assert filled_buffer.scroll() == 0

    def test_inc_and_dec(self, filled_buffer):
        filled_buffer.inc_scroll()
        filled_buffer.inc_scroll()
        filled_buffer.dec_scroll()
        assert filled_buffer.scroll() == 1

    def test_before_any_render_height_is_zero(self, filled_buffer):
        filled_buffer.set_scroll(10 ** 9)
        assert filled_buffer.scroll() == 20 + 2

    def test_uses_last_rendered_height(self, filled_buffer):
        filled_buffer.render(80, 10)
        assert filled_buffer.last_viewport_height == 10
        filled_buffer.set_scroll(10 ** 9)
        assert filled_buffer.scroll() == 20 + 2 - 10

    def test_render_reclamps_huge_scroll(self, filled_buffer):
        filled_buffer.set_scroll(10 ** 9)
        filled_buffer.render(80, 10)
        assert filled_buffer.scroll() <= max(0, filled_buffer.count() + 2 - 10)

    def test_tall_viewport_clamps_to_zero(self, filled_buffer):
        filled_buffer.render(80, 100)
        filled_buffer.set_scroll(5)
        assert filled_buffer.scroll() == 0

    def test_negative_values_clamp_to_zero(self, filled_buffer):
        filled_buffer.set_scroll(-7)
        assert filled_buffer.scroll() == 0

    def test_empty_buffer(self, buffer):
        buffer.render(80, 10)
        buffer.inc_scroll()
        assert buffer.scroll() == 0


class TestRender:
    """Test row layout and window selection."""

    def test_bottom_window(self, filled_buffer):
        rows = filled_buffer.render(80, 10)
        assert bodies(rows) == [f'line {i}' for i in range(12, 20)]

    def test_scrolled_window(self, filled_buffer):
        filled_buffer.render(80, 10)
        filled_buffer.set_scroll(5)
        rows = filled_buffer.render(80, 10)
        assert bodies(rows)[0] == 'line 7'
        assert bodies(rows)[-1] == 'line 14'

    def test_scrolled_to_top(self, filled_buffer):
        filled_buffer.render(80, 10)
        filled_buffer.set_scroll(10 ** 9)
        rows = filled_buffer.render(80, 10)
        assert bodies(rows)[0] == 'line 0'

    def test_short_buffer_shows_everything(self, buffer, timestamp):
        buffer.push_line(timestamp, 'a', 'one')
        buffer.push_line(timestamp, 'b', 'two')
        assert bodies(buffer.render(80, 24)) == ['one', 'two']

    def test_empty_buffer(self, buffer):
        assert buffer.render(80, 24) == []

    def test_degenerate_sizes(self, filled_buffer):
        assert filled_buffer.render(80, 0) == []
        assert filled_buffer.render(80, 2) == []
        rows = filled_buffer.render(0, 5)
        assert len(rows) >= 1
        assert filled_buffer.render(-5, -5) == []

    def test_row_columns(self, buffer, timestamp):
        buffer.push_line(timestamp, Line([Span('<nick>', 'cyan')]), 'hello')
        row = buffer.render(80, 10)[0]
        assert row.timestamp == '[01:20:00]'
        assert row.tag.text == '<nick>'
        assert row.body[0].text == 'hello'
        assert row.height == 1

    def test_timestamp_in_configured_zone(self, timestamp):
        buffer = ScrollbackBuffer(tz=ZoneInfo('Europe/Berlin'))
        buffer.push_line(timestamp, '', 'x')
        assert buffer.render(80, 10)[0].timestamp == '[02:20:00]'

    def test_body_wrapped_to_content_width(self, buffer, timestamp):
        width = CHROME_WIDTH + 12 + 10
        assert buffer.content_width(width) == 10
        buffer.push_line(timestamp, 'tag', 'a' * 25)
        row = buffer.render(width, 10)[0]
        assert [line.text for line in row.body] == ['a' * 10, 'a' * 10, 'a' * 5]
        assert row.height == 3

    def test_tall_rows_fill_the_window(self, buffer, timestamp):
        width = CHROME_WIDTH + 12 + 10
        for i in range(5):
            buffer.push_line(timestamp, 'tag', str(i) * 25)
        # 6 content rows; each line needs 3
        rows = buffer.render(width, 8)
        assert len(rows) == 2

    def test_content_width_saturates(self, buffer):
        assert buffer.content_width(5) == 0

    def test_line_height_helper(self):
        assert ScrollbackBuffer.line_height(Line.from_str('abcdef'), 4) == 2


class TestLocking:
    """Test the poisoned lock behavior."""

    def test_failure_under_lock_poisons(self, filled_buffer, timestamp, monkeypatch):
        def broken_wrap(line, width):
            raise RuntimeError('wrap failed')

        monkeypatch.setattr(scrollback_module, 'wrap', broken_wrap)
        with pytest.raises(RuntimeError):
            filled_buffer.render(80, 10)

        assert filled_buffer.poisoned
        with pytest.raises(LockPoisonedError):
            filled_buffer.push_line(timestamp, 'tag', 'after')
        with pytest.raises(LockPoisonedError):
            filled_buffer.scroll()

    def test_recover_keeps_lines(self, filled_buffer, monkeypatch):
        monkeypatch.setattr(scrollback_module, 'wrap', lambda line, width: 1 / 0)
        with pytest.raises(ZeroDivisionError):
            filled_buffer.render(80, 10)
        monkeypatch.undo()

        filled_buffer.recover()
        assert not filled_buffer.poisoned
        assert filled_buffer.count() == 20
        assert len(filled_buffer.render(80, 10)) == 8

    def test_concurrent_pushes_and_renders(self, timestamp):
        buffer = ScrollbackBuffer(capacity=50)
        errors = []

        def writer(n):
            try:
                for i in range(200):
                    buffer.push_line(timestamp, f'w{n}', f'line {i}')
                    assert buffer.count() <= 50
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for _ in range(100):
            buffer.render(80, 20)
            buffer.inc_scroll()
        for thread in threads:
            thread.join()

        assert errors == []
        assert buffer.count() == 49


class TestPoisonLock:
    """Test the lock on its own."""

    def test_plain_use(self):
        lock = PoisonLock('test')
        with lock:
            pass
        assert not lock.poisoned

    def test_exception_poisons_and_propagates(self):
        lock = PoisonLock('test')
        with pytest.raises(ValueError):
            with lock:
                raise ValueError('boom')
        assert lock.poisoned
        with pytest.raises(LockPoisonedError, match='test'):
            with lock:
                pass

    def test_clear_poison(self):
        lock = PoisonLock('test')
        with pytest.raises(ValueError):
            with lock:
                raise ValueError('boom')
        lock.clear_poison()
        with lock:
            pass

    def test_lock_released_after_failure(self):
        lock = PoisonLock('test')
        with pytest.raises(ValueError):
            with lock:
                raise ValueError('boom')
        # The underlying mutex is free even though the lock is poisoned
        assert lock._lock.acquire(blocking=False)
        lock._lock.release()
