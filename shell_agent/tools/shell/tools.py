# File: shell_agent/tools/shell/tools.py
# Purpose: Bash / BashOutput / KillBash tool adapters with function-calling schemas
from dataclasses import dataclass
from typing import Any, Optional

from shell_agent.tools.shell.service import BashService


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _as_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    return int(value)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


@dataclass
class BashTool:
    """Run a shell command in the foreground or as a background session."""

    service: BashService
    name: str = "Bash"
    description: str = (
        "Executes a given bash command with an optional timeout.\n"
        "- The command and description arguments are required.\n"
        "- Optional timeout in milliseconds (up to 600000ms / 10 minutes). "
        "If not specified, commands time out after 120000ms (2 minutes).\n"
        "- Write a clear, concise description of what the command does in 5-10 words.\n"
        "- Set run_in_background to true to start the command in the background and get a "
        "session id back immediately. Read its output later with BashOutput and stop it with "
        "KillBash. Do not use '&' at the end of the command in that case.\n"
        "- Successful commands return stdout; failing commands return stderr."
    )
    parameters: dict[str, Any] = None

    def __post_init__(self) -> None:
        if self.parameters is None:
            self.parameters = {
                "type": "object",
                "properties": {
                    "command": {
                        "type": "string",
                        "description": "The command to execute",
                    },
                    "description": {
                        "type": "string",
                        "description": "Clear, concise description of what this command does in 5-10 words, in active voice.",
                    },
                    "run_in_background": {
                        "type": "boolean",
                        "description": "Set to true to run this command in the background. Use BashOutput to read the output later.",
                    },
                    "timeout": {
                        "type": "integer",
                        "description": "Optional timeout in milliseconds (max 600000)",
                    },
                },
                "required": ["command", "description"],
            }

    def execute(self, args: dict[str, Any]) -> str:
        try:
            timeout_ms = _as_int(args.get("timeout"))
        except (TypeError, ValueError):
            return "ERROR: timeout must be an integer number of milliseconds."
        return self.service.run_command(
            command=str(args.get("command") or ""),
            description=str(args.get("description") or ""),
            background=_as_bool(args.get("run_in_background", False)),
            timeout_ms=timeout_ms,
            client_id=_optional_str(args.get("client_id")),
        )


@dataclass
class BashOutputTool:
    """Read (and remove) new output from a background session."""

    service: BashService
    name: str = "BashOutput"
    description: str = (
        "- Retrieves output from a running or completed background bash shell\n"
        "- Takes a bashId parameter identifying the shell\n"
        "- Always returns only new output since the last check\n"
        "- Returns stderr if there is any, otherwise stdout\n"
        "- Supports optional regex filtering to show only lines matching a pattern. "
        "Lines that do not match are discarded and can never be read again\n"
        "- Use this tool when you need to monitor the output of a long-running shell"
    )
    parameters: dict[str, Any] = None

    def __post_init__(self) -> None:
        if self.parameters is None:
            self.parameters = {
                "type": "object",
                "properties": {
                    "bashId": {
                        "type": "string",
                        "description": "The ID of the background shell to retrieve output from",
                    },
                    "filter": {
                        "type": "string",
                        "description": (
                            "Optional regular expression to filter the output lines. Only lines matching "
                            "this regex will be included in the result. Any lines that do not match will "
                            "no longer be available to read."
                        ),
                    },
                },
                "required": ["bashId"],
            }

    def execute(self, args: dict[str, Any]) -> str:
        return self.service.fetch_output(
            session_id=str(args.get("bashId") or ""),
            filter=_optional_str(args.get("filter")),
            client_id=_optional_str(args.get("client_id")),
        )


@dataclass
class KillBashTool:
    """Stop a background session and forget it."""

    service: BashService
    name: str = "KillBash"
    description: str = (
        "- Kills a running background bash shell by its ID\n"
        "- Takes a shell_id parameter identifying the shell to kill\n"
        "- Returns a success or failure status\n"
        "- Use this tool when you need to terminate a long-running shell"
    )
    parameters: dict[str, Any] = None

    def __post_init__(self) -> None:
        if self.parameters is None:
            self.parameters = {
                "type": "object",
                "properties": {
                    "shell_id": {
                        "type": "string",
                        "description": "The ID of the background shell to kill",
                    },
                },
                "required": ["shell_id"],
            }

    def execute(self, args: dict[str, Any]) -> str:
        return self.service.kill(str(args.get("shell_id") or ""))


def build_bash_tools(service: BashService) -> list[Any]:
    """The three bash tools sharing one service (and so one session registry)."""
    return [
        BashTool(service=service),
        BashOutputTool(service=service),
        KillBashTool(service=service),
    ]
