# File: shell_agent/tools/shell/invocation.py
# Purpose: Turn a command string into the platform shell invocation (pure, no process spawned)
import sys
from dataclasses import dataclass
from typing import Optional, Union

from shell_agent.tools.shell.errors import ValidationError

DEFAULT_POSIX_SHELL = "/bin/bash"
DEFAULT_WINDOWS_SHELL = "cmd.exe"


def is_windows() -> bool:
    return sys.platform.startswith("win")


@dataclass(frozen=True)
class ShellInvocation:
    """Executable plus argument vector for one shell command."""

    executable: str
    args: tuple[str, ...]
    windows: bool = False

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    @property
    def command_line(self) -> str:
        """Single-string form, as a Windows CreateProcess call or a log line would see it."""
        if self.windows:
            return " ".join(self.argv)
        flag, command = self.args
        escaped = command.replace('"', '\\"')
        return f'{self.executable} {flag} "{escaped}"'

    def popen_args(self) -> Union[str, list[str]]:
        """Value for subprocess.Popen's first argument."""
        # cmd.exe does its own parsing of the raw command line
        if self.windows:
            return self.command_line
        return self.argv


def build_shell_invocation(
    command: str,
    *,
    windows: Optional[bool] = None,
    posix_shell: str = DEFAULT_POSIX_SHELL,
    windows_shell: str = DEFAULT_WINDOWS_SHELL,
) -> ShellInvocation:
    """
    Build the shell invocation for a command.

    POSIX runs the command through a login shell (``bash -lc``). The argument
    vector carries the command untouched; ``command_line`` renders it with
    embedded double quotes backslash-escaped. Windows runs it through
    ``cmd.exe /C`` with the whole command quoted.

    Args:
        command: Shell command text
        windows: Force the Windows or POSIX form; None detects the platform
        posix_shell: Shell executable used on POSIX
        windows_shell: Command interpreter used on Windows

    Returns:
        ShellInvocation for the command
    """
    if command is None or not command.strip():
        raise ValidationError("command must be provided.")

    if windows is None:
        windows = is_windows()

    if windows:
        return ShellInvocation(
            executable=windows_shell,
            args=("/C", f'"{command}"'),
            windows=True,
        )
    return ShellInvocation(executable=posix_shell, args=("-lc", command))
