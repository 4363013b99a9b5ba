# File: shell_agent/tools/shell/consumer.py
# Purpose: Destructive, optionally filtered retrieval of a session's buffered output
import re
from dataclasses import dataclass
from typing import Optional

from shell_agent.tools.shell.errors import ValidationError
from shell_agent.tools.shell.session import BashSession, OutputStream


@dataclass(frozen=True)
class ConsumedOutput:
    stdout: str
    stderr: str
    completed: bool

    def text(self) -> str:
        """The stderr block wins whenever it has content."""
        if self.stderr.strip():
            return self.stderr
        return self.stdout


def compile_filter(pattern: Optional[str]) -> Optional[re.Pattern]:
    """Compile a filter pattern; blank means no filter."""
    if pattern is None or not pattern.strip():
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ValidationError(f"Invalid filter regex: {exc}") from exc


def consume(session: BashSession, pattern: Optional[re.Pattern] = None) -> ConsumedOutput:
    """
    Drain everything buffered for ``session``.

    This is not a peek: every line currently held is removed, and lines that
    do not match ``pattern`` are thrown away. A later call, with or without a
    filter, never sees them again.
    """
    stdout: list[str] = []
    stderr: list[str] = []
    for line in session.drain():
        if pattern is not None and not pattern.search(line.text):
            continue
        if line.stream is OutputStream.STDERR:
            stderr.append(line.text)
        else:
            stdout.append(line.text)
    return ConsumedOutput(
        stdout="\n".join(stdout).rstrip(),
        stderr="\n".join(stderr).rstrip(),
        completed=session.has_exited,
    )
