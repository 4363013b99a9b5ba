# File: shell_agent/tools/registry.py
# Purpose: Name-indexed tool lookup and OpenAI-style tool schemas
from typing import Any

from shell_agent.tools.base import Tool


class ToolRegistry:
    def __init__(self, tools: list[Tool]) -> None:
        self._tools = {tool.name: tool for tool in tools}

    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def openai_tools(self) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }
            for tool in self._tools.values()
        ]

    def execute(self, name: str, args: dict[str, Any]) -> str:
        tool = self.get(name)
        if not tool:
            return f"ERROR: Unknown tool: {name}"
        return tool.execute(args or {})
