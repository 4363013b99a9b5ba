# File: shell_agent/tools/shell/terminator.py
# Purpose: Stop a background session's process tree and release its resources
import subprocess
from typing import Optional

import structlog

from shell_agent.tools.shell.errors import TerminationFailure
from shell_agent.tools.shell.launcher import kill_process_tree
from shell_agent.tools.shell.session import BashSession

logger = structlog.get_logger(__name__)


def terminate_session(session: BashSession, wait_timeout_s: Optional[float] = None) -> None:
    """
    Kill the session's process tree if it is still running and wait for it.

    ``wait_timeout_s`` of None waits for as long as the process takes.
    The session is closed on every path, including failures.

    Raises:
        TerminationFailure: killing or waiting raised, or the bounded wait expired
    """
    try:
        if not session.has_exited:
            kill_process_tree(session.process.pid)
            session.wait(timeout=wait_timeout_s)
    except subprocess.TimeoutExpired as exc:
        raise TerminationFailure(
            f"process {session.process.pid} still running after {wait_timeout_s} s"
        ) from exc
    except Exception as exc:
        raise TerminationFailure(str(exc)) from exc
    finally:
        session.close()
    logger.info("bash_session_terminated", session_id=session.id, exit_code=session.process.returncode)
