# File: shell_agent/tools/base.py
# Purpose: Structural type every registered tool satisfies
from typing import Any, Protocol


class Tool(Protocol):
    name: str
    description: str
    parameters: dict[str, Any]

    def execute(self, args: dict[str, Any]) -> str:
        ...
