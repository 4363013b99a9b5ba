# File: tests/tools/shell/test_output_buffer.py
# Purpose: Bounded buffer eviction, draining and concurrent producers
import threading

import pytest

from conftest import FakeProcess
from shell_agent.tools.shell.session import (
    BashSession,
    OutputBuffer,
    OutputLine,
    OutputStream,
    SessionStatus,
)


class TestOutputBuffer:
    """OutputBuffer keeps the newest lines up to its capacity"""

    def test_capacity_overflow_keeps_most_recent(self):
        buffer = OutputBuffer(10_000)
        for i in range(10_005):
            buffer.append(OutputLine(OutputStream.STDOUT, f"line-{i}"))

        assert len(buffer) == 10_000
        lines = buffer.drain()
        assert lines[0].text == "line-5"
        assert lines[-1].text == "line-10004"

    def test_drain_empties_buffer(self):
        buffer = OutputBuffer(3)
        buffer.append(OutputLine(OutputStream.STDOUT, "a"))
        buffer.append(OutputLine(OutputStream.STDERR, "b"))

        assert [line.text for line in buffer.drain()] == ["a", "b"]
        assert buffer.drain() == []
        assert len(buffer) == 0

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            OutputBuffer(0)

    def test_concurrent_producers_preserve_per_stream_order(self):
        buffer = OutputBuffer(10_000)

        def produce(stream, count):
            for i in range(count):
                buffer.append(OutputLine(stream, f"{stream.value}-{i}"))

        threads = [
            threading.Thread(target=produce, args=(OutputStream.STDOUT, 2000)),
            threading.Thread(target=produce, args=(OutputStream.STDERR, 2000)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        lines = buffer.drain()
        assert len(lines) == 4000
        for stream in OutputStream:
            texts = [line.text for line in lines if line.stream is stream]
            assert texts == [f"{stream.value}-{i}" for i in range(2000)]


class TestSessionBuffering:
    """BashSession feeds lines into its buffer"""

    def test_session_buffer_is_bounded(self):
        session = BashSession("yes", "spam output", FakeProcess(), max_buffered_lines=10_000)
        for i in range(10_001):
            session.enqueue(OutputStream.STDOUT, str(i))

        assert session.buffered_line_count() == 10_000
        assert session.drain()[0].text == "1"

    def test_lines_after_close_are_dropped(self):
        session = BashSession("true", "nothing", FakeProcess(returncode=0))
        session.enqueue(OutputStream.STDOUT, "kept")
        assert session.close() is True
        session.enqueue(OutputStream.STDOUT, "dropped")

        assert [line.text for line in session.drain()] == ["kept"]

    def test_close_releases_once(self):
        session = BashSession("true", "nothing", FakeProcess(returncode=0))

        assert session.close() is True
        assert session.close() is False
        assert session.closed

    def test_status_follows_process(self):
        process = FakeProcess()
        session = BashSession("sleep 1", "wait a bit", process)
        assert session.status is SessionStatus.RUNNING
        assert not session.is_drain_complete

        process.returncode = 0
        assert session.status is SessionStatus.EXITED
        assert session.is_drain_complete

    def test_ids_are_unique(self):
        ids = {BashSession("true", "nothing", FakeProcess()).id for _ in range(100)}

        assert len(ids) == 100
