# File: shell_agent/tools/shell/executor.py
# Purpose: Run one command to completion or timeout, without persistent state
import subprocess
import threading
import time
from typing import IO, Optional

import structlog

from shell_agent.tools.shell.errors import CommandTimeoutError, LaunchFailure
from shell_agent.tools.shell.invocation import ShellInvocation
from shell_agent.tools.shell.launcher import ProcessLauncher, try_terminate

logger = structlog.get_logger(__name__)

# Upper bound for collecting what is left of a killed process
_REAP_TIMEOUT_S = 5.0


def _collect(stream: IO[str], chunks: list[str]) -> None:
    try:
        for chunk in stream:
            chunks.append(chunk)
    except (OSError, ValueError):
        pass
    finally:
        try:
            stream.close()
        except (OSError, ValueError):
            pass


class ForegroundExecutor:
    """Runs a shell invocation and returns a single output stream."""

    def __init__(self, launcher: ProcessLauncher, exit_drain_wait_s: float = 1.0) -> None:
        self.launcher = launcher
        self.exit_drain_wait_s = exit_drain_wait_s

    def run(self, invocation: ShellInvocation, timeout_ms: int) -> str:
        """
        Run the invocation, racing shell exit against ``timeout_ms``.

        Returns stdout (trailing whitespace trimmed) on exit code 0, stderr
        otherwise. Output still held open by a backgrounded child is not
        waited for beyond ``exit_drain_wait_s``. On timeout the process tree
        is killed, partial output is discarded and CommandTimeoutError is
        raised.
        """
        process = self.launcher.launch(invocation)
        if process is None:
            raise LaunchFailure("Failed to start bash process.")

        started = time.perf_counter()
        stdout: list[str] = []
        stderr: list[str] = []
        readers = [
            self._start_reader(process.stdout, stdout),
            self._start_reader(process.stderr, stderr),
        ]
        try:
            exit_code = process.wait(timeout=timeout_ms / 1000)
        except subprocess.TimeoutExpired:
            try_terminate(process)
            self._reap(process, readers)
            logger.warning(
                "bash_command_timed_out",
                command=invocation.command_line,
                timeout_ms=timeout_ms,
                pid=process.pid,
            )
            raise CommandTimeoutError(timeout_ms)

        self._join(readers, self.exit_drain_wait_s)
        logger.info(
            "bash_command_completed",
            command=invocation.command_line,
            exit_code=exit_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            pipes_held_open=any(reader.is_alive() for reader in readers if reader),
        )
        chunks = stdout if exit_code == 0 else stderr
        return "".join(list(chunks)).rstrip()

    @staticmethod
    def _start_reader(stream: Optional[IO[str]], chunks: list[str]) -> Optional[threading.Thread]:
        if stream is None:
            return None
        reader = threading.Thread(
            target=_collect,
            args=(stream, chunks),
            daemon=True,
            name="bash-foreground-reader",
        )
        reader.start()
        return reader

    @staticmethod
    def _join(readers: list[Optional[threading.Thread]], timeout: float) -> None:
        deadline = time.monotonic() + timeout
        for reader in readers:
            if reader is not None:
                reader.join(timeout=max(0.0, deadline - time.monotonic()))

    def _reap(self, process: subprocess.Popen, readers: list[Optional[threading.Thread]]) -> None:
        try:
            process.wait(timeout=_REAP_TIMEOUT_S)
        except subprocess.TimeoutExpired:
            logger.warning("bash_command_reap_timed_out", pid=process.pid)
        # Readers blocked on a pipe an escaped process still holds are left to finish on their own
        self._join(readers, self.exit_drain_wait_s)
