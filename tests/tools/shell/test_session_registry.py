# File: tests/tools/shell/test_session_registry.py
# Purpose: Session registry bookkeeping
import pytest

from conftest import FakeProcess
from shell_agent.tools.shell.session import BashSession
from shell_agent.tools.shell.session_registry import SessionRegistry


def new_session():
    return BashSession("sleep 10", "idle", FakeProcess())


class TestSessionRegistry:
    def test_add_get_remove(self):
        registry = SessionRegistry()
        session = new_session()
        registry.add(session)

        assert registry.get(session.id) is session
        assert session.id in registry
        assert len(registry) == 1

        assert registry.remove(session.id) is session
        assert registry.get(session.id) is None
        assert registry.remove(session.id) is None
        assert len(registry) == 0

    def test_lookup_ignores_case(self):
        registry = SessionRegistry()
        session = new_session()
        registry.add(session)

        assert registry.get(session.id.upper()) is session

    def test_duplicate_id_rejected(self):
        registry = SessionRegistry()
        session = new_session()
        registry.add(session)

        with pytest.raises(ValueError):
            registry.add(session)

    def test_remove_all(self):
        registry = SessionRegistry()
        sessions = [new_session() for _ in range(3)]
        for session in sessions:
            registry.add(session)

        removed = registry.remove_all()
        assert {s.id for s in removed} == {s.id for s in sessions}
        assert len(registry) == 0

    def test_registries_are_isolated(self):
        first, second = SessionRegistry(), SessionRegistry()
        session = new_session()
        first.add(session)

        assert session.id not in second
        assert 42 not in first
