"""Bash command execution: foreground runs, background sessions, output retrieval and kill."""

from shell_agent.tools.shell.service import BashService
from shell_agent.tools.shell.session import BashSession, OutputBuffer, OutputLine, OutputStream
from shell_agent.tools.shell.session_registry import SessionRegistry
from shell_agent.tools.shell.tools import BashOutputTool, BashTool, KillBashTool, build_bash_tools

__all__ = [
    "BashService",
    "BashSession",
    "OutputBuffer",
    "OutputLine",
    "OutputStream",
    "SessionRegistry",
    "BashTool",
    "BashOutputTool",
    "KillBashTool",
    "build_bash_tools",
]
