# File: shell_agent/tools/shell/errors.py
# Purpose: Exception taxonomy for the bash tools, converted to "ERROR: ..." text at the service boundary


class ShellToolError(Exception):
    """Base class for every failure the bash tools report to their caller."""


class ValidationError(ShellToolError):
    """Bad input rejected before any process is touched."""


class LaunchFailure(ShellToolError):
    """The shell process could not be started."""


class CommandTimeoutError(ShellToolError):
    """A foreground command outlived its deadline and was terminated."""

    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"Command timed out after {timeout_ms} ms and was terminated.")
        self.timeout_ms = timeout_ms


class SessionNotFoundError(ShellToolError):
    """No background session is registered under the given id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"No active bash session found for id: {session_id}")
        self.session_id = session_id


class TerminationFailure(ShellToolError):
    """Stopping a background session's process raised."""
