# File: shell_agent/app.py
# Purpose: Composition root and JSON-lines driver for the bash tools
import atexit
import json
import sys
from typing import Any, Optional, TextIO

from shell_agent.config import Settings, get_settings
from shell_agent.infrastructure.invocation_logger import InvocationLogger, InvocationSink
from shell_agent.infrastructure.logging import get_logger, setup_logging
from shell_agent.tools.registry import ToolRegistry
from shell_agent.tools.shell import BashService, SessionRegistry, build_bash_tools

logger = get_logger(__name__)


def build_service(
    settings: Optional[Settings] = None,
    sink: Optional[InvocationSink] = None,
) -> BashService:
    return BashService(
        registry=SessionRegistry(),
        invocation_logger=InvocationLogger(sink),
        settings=settings or get_settings(),
    )


def build_default_tools(service: BashService) -> list[Any]:
    return build_bash_tools(service)


def handle_request(registry: ToolRegistry, raw: str) -> dict[str, Any]:
    """Run one ``{"tool": ..., "args": {...}}`` request line."""
    try:
        request = json.loads(raw)
    except json.JSONDecodeError as exc:
        return {"tool": None, "result": f"ERROR: Invalid request JSON: {exc.msg}"}
    if not isinstance(request, dict):
        return {"tool": None, "result": "ERROR: Request must be a JSON object."}
    name = str(request.get("tool") or "")
    args = request.get("args") or {}
    if not isinstance(args, dict):
        return {"tool": name, "result": "ERROR: args must be a JSON object."}
    return {"tool": name, "result": registry.execute(name, args)}


def serve(registry: ToolRegistry, stdin: TextIO, stdout: TextIO) -> int:
    handled = 0
    for raw in stdin:
        raw = raw.strip()
        if not raw:
            continue
        response = handle_request(registry, raw)
        stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
        stdout.flush()
        handled += 1
    return handled


def main(argv: Optional[list[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()
    setup_logging(
        log_level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR if settings.LOG_TO_FILE else None,
        app_name=settings.APP_NAME,
    )
    service = build_service(settings)
    registry = ToolRegistry(build_default_tools(service))
    logger.info("tools_registered", tools=registry.names())

    if "--list-tools" in argv:
        sys.stdout.write(json.dumps(registry.openai_tools(), ensure_ascii=False, indent=2) + "\n")
        return 0

    atexit.register(service.shutdown)
    try:
        handled = serve(registry, sys.stdin, sys.stdout)
    finally:
        stopped = service.shutdown()
    logger.info("driver_finished", requests=handled, sessions_stopped=stopped)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
