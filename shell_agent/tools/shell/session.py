# File: shell_agent/tools/shell/session.py
# Purpose: Background bash session: one process, three producer threads, one bounded buffer
import subprocess
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import IO, Optional

import structlog

from shell_agent.tools.shell.launcher import close_pipes

logger = structlog.get_logger(__name__)

DEFAULT_MAX_BUFFERED_LINES = 10_000


class OutputStream(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


class SessionStatus(str, Enum):
    RUNNING = "running"
    EXITED = "exited"


@dataclass(frozen=True)
class OutputLine:
    stream: OutputStream
    text: str


class OutputBuffer:
    """
    Bounded FIFO of output lines shared by the producers of one session.

    When full, appending evicts the oldest line. ``drain`` removes and
    returns everything currently held in a single step.
    """

    def __init__(self, capacity: int = DEFAULT_MAX_BUFFERED_LINES) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._lines: deque[OutputLine] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._lines.maxlen

    def append(self, line: OutputLine) -> None:
        with self._lock:
            self._lines.append(line)

    def drain(self) -> list[OutputLine]:
        with self._lock:
            lines = list(self._lines)
            self._lines.clear()
        return lines

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)


class BashSession:
    """
    A background shell process and the output it has produced so far.

    Call ``begin_capture`` once the process is running to start the stdout
    reader, the stderr reader and the exit watcher. ``close`` releases the
    process resources; it is idempotent and lines arriving afterwards are
    dropped.
    """

    def __init__(
        self,
        command: str,
        description: str,
        process: subprocess.Popen,
        max_buffered_lines: int = DEFAULT_MAX_BUFFERED_LINES,
        exit_drain_wait_s: float = 1.0,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.command = command
        self.description = description
        self.process = process
        self.started_at = time.time()
        self.exit_drain_wait_s = exit_drain_wait_s

        self._buffer = OutputBuffer(max_buffered_lines)
        self._readers: list[threading.Thread] = []
        self._watcher: Optional[threading.Thread] = None
        self._exit_code: Optional[int] = None
        self._exited = threading.Event()
        self._close_lock = threading.Lock()
        self._closed = False

    # --- state ---

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.EXITED if self.has_exited else SessionStatus.RUNNING

    @property
    def exit_code(self) -> Optional[int]:
        return self._exit_code

    @property
    def has_exited(self) -> bool:
        if self._exited.is_set():
            return True
        return self.process.poll() is not None

    @property
    def is_drain_complete(self) -> bool:
        return len(self._buffer) == 0 and self.has_exited

    @property
    def closed(self) -> bool:
        return self._closed

    def buffered_line_count(self) -> int:
        return len(self._buffer)

    # --- producers ---

    def begin_capture(self) -> None:
        """Start reader threads for both streams plus the exit watcher."""
        if self._readers:
            return
        for stream, kind in ((self.process.stdout, OutputStream.STDOUT),
                             (self.process.stderr, OutputStream.STDERR)):
            if stream is None:
                continue
            reader = threading.Thread(
                target=self._pump,
                args=(stream, kind),
                daemon=True,
                name=f"bash-{kind.value}-{self.id[:8]}",
            )
            self._readers.append(reader)
        self._watcher = threading.Thread(
            target=self._watch_exit,
            daemon=True,
            name=f"bash-exit-{self.id[:8]}",
        )
        for reader in self._readers:
            reader.start()
        self._watcher.start()

    def enqueue(self, stream: OutputStream, text: str) -> None:
        if self._closed:
            return
        self._buffer.append(OutputLine(stream, text))

    def _pump(self, stream: IO[str], kind: OutputStream) -> None:
        try:
            for raw in stream:
                self.enqueue(kind, raw.rstrip("\r\n"))
        except (OSError, ValueError):
            # Pipe closed underneath us during shutdown
            pass
        finally:
            try:
                stream.close()
            except (OSError, ValueError):
                pass

    def _watch_exit(self) -> None:
        try:
            exit_code = self.process.wait()
        except Exception as exc:
            logger.warning("bash_session_wait_failed", session_id=self.id, error=str(exc))
            return
        self._exit_code = exit_code
        self._exited.set()
        # Let the readers reach EOF so the marker follows trailing output
        for reader in self._readers:
            reader.join(timeout=self.exit_drain_wait_s)
        self.enqueue(OutputStream.STDOUT, f"[process exited with code {exit_code}]")
        logger.info("bash_session_exited", session_id=self.id, exit_code=exit_code)

    def join_capture(self, timeout: Optional[float] = None) -> bool:
        """Wait until the exit watcher has recorded the exit. True if it has."""
        if self._watcher is None:
            return False
        self._watcher.join(timeout=timeout)
        return not self._watcher.is_alive()

    # --- consumer ---

    def drain(self) -> list[OutputLine]:
        return self._buffer.drain()

    # --- lifecycle ---

    def wait(self, timeout: Optional[float] = None) -> int:
        return self.process.wait(timeout=timeout)

    def close(self) -> bool:
        """
        Release the process resources exactly once.

        Returns True on the call that actually released them.
        """
        with self._close_lock:
            if self._closed:
                return False
            self._closed = True

        for reader in self._readers:
            reader.join(timeout=self.exit_drain_wait_s)
        # Readers still blocked are held open by an escaped descendant;
        # leave their pipe to them and close the rest.
        if not any(reader.is_alive() for reader in self._readers):
            close_pipes(self.process)
        if self.process.poll() is not None:
            # Reap so no zombie is left behind
            self.process.wait()
        logger.info(
            "bash_session_released",
            session_id=self.id,
            runtime_s=round(time.time() - self.started_at, 3),
        )
        return True
