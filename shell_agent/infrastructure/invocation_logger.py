# File: shell_agent/infrastructure/invocation_logger.py
# Purpose: Fire-and-forget record of tool invocations for dashboards and audit logs
import json
from typing import Any, Callable, Optional

import structlog

from shell_agent.infrastructure.logging.formatters import SensitiveDataFilter

logger = structlog.get_logger(__name__)

# (client_id, function_name, args_json)
InvocationSink = Callable[[Optional[str], str, str], None]

UNSERIALIZABLE_ARGS = "<failed-to-serialize-args>"


class InvocationLogger:
    """
    Records which tool functions were called and with what arguments.

    Every entry is written to the structured log; when a sink is attached
    (for example a console dashboard) it also receives the entry. Nothing
    raised here ever reaches the caller of the tool.
    """

    def __init__(self, sink: Optional[InvocationSink] = None) -> None:
        self.sink = sink

    def log(self, function_name: str, args: Any, client_id: Optional[str] = None) -> None:
        try:
            args_json = self._serialize(args)
            logger.info(
                "tool_invocation",
                function=function_name,
                args=args_json,
                client_id=client_id,
            )
            sink = self.sink
            if sink is not None:
                sink(client_id, function_name, args_json)
        except Exception as exc:
            logger.warning(
                "tool_invocation_log_failed",
                function=function_name,
                error=str(exc),
                error_type=type(exc).__name__,
            )

    @staticmethod
    def _serialize(args: Any) -> str:
        try:
            return json.dumps(
                SensitiveDataFilter.redact(args),
                ensure_ascii=False,
                separators=(",", ":"),
            )
        except (TypeError, ValueError):
            return UNSERIALIZABLE_ARGS
