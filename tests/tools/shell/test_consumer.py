# File: tests/tools/shell/test_consumer.py
# Purpose: Destructive and filtered output retrieval
import pytest

from conftest import FakeProcess
from shell_agent.tools.shell.consumer import ConsumedOutput, compile_filter, consume
from shell_agent.tools.shell.errors import ValidationError
from shell_agent.tools.shell.session import BashSession, OutputStream


def make_session(*lines):
    session = BashSession("cmd", "test session", FakeProcess())
    for stream, text in lines:
        session.enqueue(stream, text)
    return session


class TestConsume:
    def test_drain_is_destructive(self):
        session = make_session((OutputStream.STDOUT, "a"), (OutputStream.STDOUT, "b"))

        assert consume(session).text() == "a\nb"
        assert consume(session).text() == ""

    def test_filtered_lines_are_gone_for_good(self):
        session = make_session((OutputStream.STDOUT, "abc"), (OutputStream.STDOUT, "xyz"))

        assert consume(session, compile_filter("^a")).text() == "abc"
        assert consume(session).text() == ""

    def test_filter_matches_anywhere_in_line(self):
        session = make_session((OutputStream.STDOUT, "warning: disk"), (OutputStream.STDOUT, "ok"))

        assert consume(session, compile_filter("disk")).text() == "warning: disk"

    def test_stderr_block_wins(self):
        session = make_session((OutputStream.STDOUT, "out"), (OutputStream.STDERR, "bad"))

        result = consume(session)
        assert result.stdout == "out"
        assert result.stderr == "bad"
        assert result.text() == "bad"

    def test_stdout_returned_when_stderr_blank(self):
        output = ConsumedOutput(stdout="out", stderr="", completed=False)

        assert output.text() == "out"

    def test_trailing_whitespace_trimmed(self):
        session = make_session((OutputStream.STDOUT, "a  "), (OutputStream.STDOUT, ""))

        assert consume(session).text() == "a"

    def test_completed_flag(self):
        process = FakeProcess(returncode=0)
        session = BashSession("true", "done", process)

        assert consume(session).completed is True


class TestCompileFilter:
    @pytest.mark.parametrize("pattern", [None, "", "   "])
    def test_blank_means_no_filter(self, pattern):
        assert compile_filter(pattern) is None

    def test_invalid_pattern(self):
        with pytest.raises(ValidationError, match="Invalid filter regex"):
            compile_filter("(unclosed")
