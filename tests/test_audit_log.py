# tests/test_audit_log.py

from __future__ import annotations

import pytest

from workorders.domain.audit.service import ChangeAuditLog, get_audit_log
from workorders.main import app

from .fakes import BrokenSession


def test_history_is_newest_first(db_session) -> None:
    audit = ChangeAuditLog()
    for description in ("Created", "Renamed", "Deleted"):
        assert audit.record("employee", 7, "uid-1", description) is True

    entries = audit.history(db_session, "employee", 7)

    assert [e.description for e in entries] == ["Deleted", "Renamed", "Created"]
    assert audit.history(db_session, "employee", 8) == []


def test_failed_write_is_swallowed(db_session) -> None:
    audit = ChangeAuditLog(session_factory=BrokenSession)

    assert audit.record("client", 1, "uid-1", "Created client") is False


def test_unknown_entity_kind_is_a_programming_error(db_session) -> None:
    with pytest.raises(ValueError):
        ChangeAuditLog().history(db_session, "invoice", 1)


def test_business_operation_survives_a_broken_change_log(client) -> None:
    app.dependency_overrides[get_audit_log] = lambda: ChangeAuditLog(session_factory=BrokenSession)

    response = client.post("/clients", json={"full_name": "Сидорова Анна", "phone_number": "+79161234567"})

    assert response.status_code == 201
    assert client.get(f"/clients/{response.json()['id']}").status_code == 200
    assert client.get(f"/clients/{response.json()['id']}/changes").json() == []


def test_unknown_entity_kind_is_logged_not_raised(db_session) -> None:
    assert ChangeAuditLog().record("invoice", 1, "uid-1", "Created invoice") is False
