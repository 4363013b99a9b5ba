# File: tests/conftest.py
# Purpose: Shared fixtures for the bash tool tests
import os
import subprocess
import sys
import time

import pytest

from shell_agent.config import Settings
from shell_agent.infrastructure.invocation_logger import InvocationLogger
from shell_agent.tools.shell.launcher import SubprocessLauncher
from shell_agent.tools.shell.service import BashService
from shell_agent.tools.shell.session_registry import SessionRegistry

requires_bash = pytest.mark.skipif(
    sys.platform.startswith("win") or not os.path.exists("/bin/bash"),
    reason="needs /bin/bash",
)


def wait_for(predicate, timeout: float = 10.0, interval: float = 0.02) -> bool:
    """Poll ``predicate`` until it is truthy or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


class RecordingLauncher(SubprocessLauncher):
    """Real launcher that remembers every process it started."""

    def __init__(self, env: dict[str, str] | None = None) -> None:
        super().__init__(env=env)
        self.processes: list[subprocess.Popen] = []

    def launch(self, invocation):
        process = super().launch(invocation)
        self.processes.append(process)
        return process


class FailingLauncher:
    """Launcher whose process never starts."""

    def __init__(self, exc: Exception | None = None) -> None:
        self.exc = exc or OSError("No such file or directory: '/bin/bash'")
        self.calls = 0

    def launch(self, invocation):
        self.calls += 1
        raise self.exc


class FakeProcess:
    """Stand-in for subprocess.Popen with no pipes and scripted wait()."""

    def __init__(self, pid: int = 99_999_999, returncode=None, wait_exc: Exception | None = None) -> None:
        self.pid = pid
        self.returncode = returncode
        self.stdin = None
        self.stdout = None
        self.stderr = None
        self.wait_exc = wait_exc

    def poll(self):
        return self.returncode

    def wait(self, timeout=None):
        if self.wait_exc is not None:
            raise self.wait_exc
        if self.returncode is None:
            self.returncode = -9
        return self.returncode


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        BASH_DEFAULT_TIMEOUT_MS=120_000,
        BASH_MAX_TIMEOUT_MS=600_000,
        BASH_MAX_BUFFERED_LINES=10_000,
        BASH_EXIT_DRAIN_WAIT_S=1.0,
        BASH_KILL_WAIT_TIMEOUT_S=None,
    )


@pytest.fixture()
def invocations() -> list[tuple]:
    return []


@pytest.fixture()
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture()
def launcher(tmp_path) -> RecordingLauncher:
    # Empty HOME: no login profile output leaks into stderr
    home = tmp_path / "home"
    home.mkdir()
    return RecordingLauncher(env={**os.environ, "HOME": str(home)})


@pytest.fixture()
def service(settings, registry, launcher, invocations):
    def sink(client_id, function_name, args_json):
        invocations.append((client_id, function_name, args_json))

    bash_service = BashService(
        registry=registry,
        launcher=launcher,
        invocation_logger=InvocationLogger(sink),
        settings=settings,
    )
    yield bash_service
    bash_service.shutdown()
    for process in launcher.processes:
        if process.poll() is None:
            process.kill()
            process.wait()
