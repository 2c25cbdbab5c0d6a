# tests/conftest.py

from __future__ import annotations

import os

# Must be set before workorders.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_ENABLED"] = "false"
os.environ["PUSH_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from workorders.database import Base, SessionLocal, engine  # noqa: E402
from workorders.domain.audit.service import ChangeAuditLog  # noqa: E402
from workorders.domain.tasks.lifecycle import TaskLifecycleController  # noqa: E402
from workorders.main import app  # noqa: E402
from workorders.models import Employee, InventoryItem, Service  # noqa: E402
from workorders.services.photo_storage import get_photo_storage  # noqa: E402
from workorders.services.push_service import get_push_notifier  # noqa: E402

from .fakes import FakeNotifier, FakePhotoStorage  # noqa: E402

ACTOR = "uid-manager"


def task_payload(**overrides) -> dict:
    """A complete, non-draft task body"""
    payload = {
        "status": "новая",
        "service": "Химчистка дивана",
        "payment": "Наличные",
        "cost": 4500,
        "start_date": "2026-10-20",
        "start_time": "10:00",
        "responsible": "Иванова Мария",
        "fullname_client": "Петров Пётр",
        "address_client": "ул. Ленина, 1",
        "phone": "+79990001122",
        "description": "Диван трёхместный",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def db_session():
    """
    Fresh schema per test on the shared in-memory SQLite connection.

    The app's own sessions see the same data, so rows committed here are
    visible to API calls and vice versa.
    """
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def storage() -> FakePhotoStorage:
    return FakePhotoStorage()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def controller(db_session, storage, notifier) -> TaskLifecycleController:
    """Lifecycle controller running side effects inline"""
    return TaskLifecycleController(db_session, ChangeAuditLog(), storage, notifier)


@pytest.fixture()
def client(db_session, storage, notifier):
    app.dependency_overrides[get_photo_storage] = lambda: storage
    app.dependency_overrides[get_push_notifier] = lambda: notifier
    try:
        yield TestClient(app, headers={"X-User-Id": ACTOR})
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def seed(db_session):
    """Insert reference rows and commit them so every session can see them"""

    class Seeder:
        def employee(self, full_name: str, employee_id: int | None = None, user_id: str | None = None) -> Employee:
            employee = Employee(id=employee_id, full_name=full_name, user_id=user_id)
            db_session.add(employee)
            db_session.commit()
            return employee

        def item(self, name: str, quantity: int, item_id: int | None = None, measure: str = "шт") -> InventoryItem:
            item = InventoryItem(id=item_id, name=name, measure=measure, quantity=quantity)
            db_session.add(item)
            db_session.commit()
            return item

        def service(self, service_name: str) -> Service:
            service = Service(service_name=service_name)
            db_session.add(service)
            db_session.commit()
            return service

    return Seeder()
