# File: shell_agent/tools/shell/service.py
# Purpose: The three public bash operations; every failure becomes "ERROR: ..." text here
from typing import Optional

import structlog

from shell_agent.config import Settings, get_settings
from shell_agent.infrastructure.invocation_logger import InvocationLogger
from shell_agent.tools.shell.consumer import compile_filter, consume
from shell_agent.tools.shell.errors import (
    LaunchFailure,
    SessionNotFoundError,
    ShellToolError,
    ValidationError,
)
from shell_agent.tools.shell.executor import ForegroundExecutor
from shell_agent.tools.shell.invocation import ShellInvocation, build_shell_invocation
from shell_agent.tools.shell.launcher import ProcessLauncher, SubprocessLauncher, try_terminate
from shell_agent.tools.shell.session import BashSession
from shell_agent.tools.shell.session_registry import SessionRegistry
from shell_agent.tools.shell.terminator import terminate_session

logger = structlog.get_logger(__name__)

KILL_SUCCESS = "Successfully terminated bash session."


def error(message: str) -> str:
    return f"ERROR: {message}"


def _require(value: Optional[str], message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return str(value)


class BashService:
    """
    Foreground commands, background sessions, output retrieval and kill.

    All three operations return plain text and never raise. The registry is
    injected so separate services (and tests) keep separate sessions.
    """

    def __init__(
        self,
        registry: Optional[SessionRegistry] = None,
        launcher: Optional[ProcessLauncher] = None,
        invocation_logger: Optional[InvocationLogger] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else SessionRegistry()
        self.launcher = launcher or SubprocessLauncher()
        self.invocation_logger = invocation_logger or InvocationLogger()
        self.executor = ForegroundExecutor(self.launcher, self.settings.BASH_EXIT_DRAIN_WAIT_S)

    def _invocation(self, command: str) -> ShellInvocation:
        return build_shell_invocation(
            command,
            posix_shell=self.settings.BASH_POSIX_SHELL,
            windows_shell=self.settings.BASH_WINDOWS_SHELL,
        )

    # --- RunCommand ---

    def run_command(
        self,
        command: str,
        description: str,
        background: bool = False,
        timeout_ms: int = 0,
        client_id: Optional[str] = None,
    ) -> str:
        """
        Run ``command`` in the foreground, or start it as a background session.

        Foreground returns stdout on exit code 0 and stderr otherwise.
        Background returns a success line carrying the new session id as soon
        as the process has started.
        """
        try:
            _require(command, "command must be provided.")
            _require(description, "description must be provided.")
        except ValidationError as exc:
            return error(str(exc))

        if background:
            return self._start_session(command, description, client_id)

        try:
            resolved_timeout = self.settings.effective_timeout_ms(int(timeout_ms or 0))
            return self.executor.run(self._invocation(command), resolved_timeout)
        except ShellToolError as exc:
            return error(str(exc))
        except Exception as exc:
            logger.error(
                "bash_command_failed",
                command=command,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            return error(f"Failed to execute bash command: {exc}")

    def _start_session(self, command: str, description: str, client_id: Optional[str]) -> str:
        log_args = {"command": command, "description": description, "run_in_background": True}
        session: Optional[BashSession] = None
        try:
            process = self.launcher.launch(self._invocation(command))
            if process is None:
                raise LaunchFailure("Failed to start bash process.")
            session = BashSession(
                command,
                description,
                process,
                max_buffered_lines=self.settings.BASH_MAX_BUFFERED_LINES,
                exit_drain_wait_s=self.settings.BASH_EXIT_DRAIN_WAIT_S,
            )
            session.begin_capture()
            self.registry.add(session)
        except Exception as exc:
            if session is not None:
                try_terminate(session.process)
                session.close()
            message = str(exc) if isinstance(exc, ShellToolError) else f"Failed to execute bash command: {exc}"
            logger.error(
                "bash_session_start_failed",
                command=command,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            self.invocation_logger.log("Bash.RunInBackground", {**log_args, "error": message}, client_id)
            return error(message)

        logger.info(
            "bash_session_started",
            session_id=session.id,
            pid=session.process.pid,
            command=command,
            description=description,
        )
        self.invocation_logger.log("Bash.RunInBackground", {**log_args, "session_id": session.id}, client_id)
        return (
            f"SUCCESS: Started background bash session with id: {session.id}\n"
            "Use the BashOutput tool with this id to check output as it becomes available."
        )

    # --- FetchOutput ---

    def fetch_output(
        self,
        session_id: str,
        filter: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> str:
        """
        Drain a session's buffered output.

        Destructive: every buffered line is removed, including the lines a
        ``filter`` rejects. Returns the stderr block if it has content,
        otherwise the stdout block.
        """
        self.invocation_logger.log(
            "BashOutput.BashOutput",
            {"bashId": session_id, "filter": filter},
            client_id,
        )
        try:
            _require(session_id, "bash_id must be provided.")
            session = self.registry.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            pattern = compile_filter(filter)
            return consume(session, pattern).text()
        except ShellToolError as exc:
            return error(str(exc))
        except Exception as exc:
            logger.error(
                "bash_output_failed",
                session_id=session_id,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            return error(f"Failed to read bash output: {exc}")

    # --- Kill ---

    def kill(self, session_id: str) -> str:
        """Unregister a session, stop its process tree and release it."""
        try:
            _require(session_id, "shell_id must be provided.")
        except ValidationError as exc:
            return error(str(exc))

        session = self.registry.remove(session_id)
        if session is None:
            return error(str(SessionNotFoundError(session_id)))

        try:
            terminate_session(session, self.settings.BASH_KILL_WAIT_TIMEOUT_S)
        except Exception as exc:
            logger.error(
                "bash_session_kill_failed",
                session_id=session.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return error(f"Failed to terminate bash session: {exc}")

        logger.info("bash_session_killed", session_id=session.id)
        return KILL_SUCCESS

    # --- shutdown ---

    def shutdown(self) -> int:
        """Terminate every registered session. Returns how many were stopped."""
        sessions = self.registry.remove_all()
        for session in sessions:
            try:
                terminate_session(session, self.settings.BASH_KILL_WAIT_TIMEOUT_S)
            except Exception as exc:
                logger.warning(
                    "bash_session_shutdown_failed",
                    session_id=session.id,
                    error=str(exc),
                )
        if sessions:
            logger.info("bash_sessions_shutdown", count=len(sessions))
        return len(sessions)
