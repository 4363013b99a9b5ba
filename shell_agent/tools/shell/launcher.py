# File: shell_agent/tools/shell/launcher.py
# Purpose: Process launching capability and process-tree termination
import subprocess
from typing import Optional, Protocol

import psutil
import structlog

from shell_agent.tools.shell.invocation import ShellInvocation

logger = structlog.get_logger(__name__)


class ProcessLauncher(Protocol):
    """Starts a shell invocation with stdout and stderr piped as text."""

    def launch(self, invocation: ShellInvocation) -> subprocess.Popen:
        ...


class SubprocessLauncher:
    """Default launcher backed by subprocess.Popen."""

    def __init__(self, cwd: Optional[str] = None, env: Optional[dict[str, str]] = None) -> None:
        self.cwd = cwd
        self.env = env

    def launch(self, invocation: ShellInvocation) -> subprocess.Popen:
        return subprocess.Popen(  # noqa: S603
            invocation.popen_args(),
            cwd=self.cwd,
            env=self.env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )


def kill_process_tree(pid: int) -> None:
    """
    Kill a process and all of its descendants.

    Descendants are collected before the parent dies so that re-parented
    grandchildren are still found. Processes that are already gone are skipped.
    """
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return
    try:
        children = parent.children(recursive=True)
    except psutil.NoSuchProcess:
        children = []
    for proc in children:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            continue
    try:
        parent.kill()
    except psutil.NoSuchProcess:
        pass


def try_terminate(process: subprocess.Popen) -> None:
    """Best-effort tree kill; errors are logged and swallowed."""
    try:
        if process.poll() is None:
            kill_process_tree(process.pid)
    except Exception as exc:
        logger.warning(
            "process_terminate_failed",
            pid=process.pid,
            error=str(exc),
            error_type=type(exc).__name__,
        )


def close_pipes(process: subprocess.Popen) -> None:
    for stream in (process.stdin, process.stdout, process.stderr):
        if stream is None:
            continue
        try:
            stream.close()
        except (OSError, ValueError):
            pass
