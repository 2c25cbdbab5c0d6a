# tests/test_task_lifecycle.py

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from workorders.domain.inventory.schemas import InventoryUsage
from workorders.domain.tasks.schemas import TaskInput
from workorders.exceptions import ConflictError, NotFoundError, TransactionError, ValidationError
from workorders.models import InventoryChange, InventoryItem, Task, TaskEmployee, TaskInventory, TaskPhoto, TaskStatus

from .conftest import ACTOR, task_payload


def _usage(*lines: tuple[int, int]) -> list[InventoryUsage]:
    return [InventoryUsage(inventory_id=item_id, quantity=qty) for item_id, qty in lines]


def test_draft_can_be_created_empty(controller) -> None:
    task = controller.create(TaskInput(), ACTOR)

    assert task.status == TaskStatus.DRAFT
    assert task.employee_count == 0


def test_non_draft_task_missing_cost_is_rejected(controller, db_session) -> None:
    payload = task_payload()
    del payload["cost"]

    with pytest.raises(ValidationError) as exc_info:
        controller.create(TaskInput(**payload), ACTOR)

    assert exc_info.value.fields == ["cost"]
    assert "cost" in exc_info.value.message
    assert db_session.query(Task).count() == 0


def test_unknown_employee_leaves_no_task_behind(controller, db_session, seed) -> None:
    seed.employee("Алексей", employee_id=1)

    with pytest.raises(ConflictError) as exc_info:
        controller.create(TaskInput(**task_payload(employees=[1, 2])), ACTOR)

    assert exc_info.value.missing_ids == [2]
    assert db_session.query(Task).count() == 0
    assert db_session.query(TaskEmployee).count() == 0


def test_create_links_employees_and_notifies_them(controller, notifier, seed) -> None:
    a = seed.employee("Алексей")
    b = seed.employee("Борис")

    task = controller.create(TaskInput(**task_payload(employees=[a.id, b.id])), ACTOR)

    assert task.employee_count == 2
    assert [p.id for p in controller.list_participants(task.id)] == [a.id, b.id]
    assert notifier.sent[0].employee_ids == [a.id, b.id]
    assert notifier.sent[0].data == {"task_id": task.id}


def test_complete_consumes_inventory(controller, db_session, seed) -> None:
    seed.item("Шампунь для ковров", 10, item_id=5)
    task = controller.create(TaskInput(**task_payload()), ACTOR)

    done = controller.complete(task.id, _usage((5, 3)), ACTOR)

    assert done.status == TaskStatus.COMPLETED
    assert db_session.get(InventoryItem, 5).quantity == 7
    reservation = db_session.query(TaskInventory).one()
    assert (reservation.task_id, reservation.inventory_id, reservation.quantity) == (task.id, 5, 3)
    entries = db_session.query(InventoryChange).filter_by(inventory_id=5).all()
    assert len(entries) == 1
    assert entries[0].user_id == ACTOR


def test_failed_complete_rolls_everything_back(controller, db_session, seed) -> None:
    seed.item("Шампунь для ковров", 10, item_id=5)
    task = controller.create(TaskInput(**task_payload()), ACTOR)

    with pytest.raises(ValidationError):
        controller.complete(task.id, _usage((5, 3), (999, 1)), ACTOR)

    db_session.expire_all()
    assert db_session.get(InventoryItem, 5).quantity == 10
    assert db_session.get(Task, task.id).status == TaskStatus.NEW
    assert db_session.query(TaskInventory).count() == 0


def test_complete_requires_a_started_task(controller) -> None:
    draft = controller.create(TaskInput(), ACTOR)

    with pytest.raises(ConflictError):
        controller.complete(draft.id, _usage((1, 1)), ACTOR)
    with pytest.raises(ValidationError):
        controller.complete(draft.id, [], ACTOR)
    with pytest.raises(NotFoundError):
        controller.complete(404, _usage((1, 1)), ACTOR)


def test_completed_task_cannot_be_completed_again(controller, seed) -> None:
    seed.item("Салфетки", 10, item_id=1)
    task = controller.create(TaskInput(**task_payload()), ACTOR)
    controller.complete(task.id, _usage((1, 1)), ACTOR)

    with pytest.raises(ConflictError):
        controller.complete(task.id, _usage((1, 1)), ACTOR)


def test_delete_returns_reserved_stock(controller, db_session, seed, storage) -> None:
    seed.item("Пятновыводитель", 10, item_id=5)
    task = controller.create(TaskInput(**task_payload()), ACTOR)
    controller.complete(task.id, _usage((5, 3)), ACTOR)
    photo = controller.add_photo(task.id, "after.jpg", b"jpeg-bytes", "image/jpeg", ACTOR)

    result = controller.delete(task.id, ACTOR)

    db_session.expire_all()
    assert result == {"message": "Task deleted", "task_id": task.id}
    assert db_session.get(InventoryItem, 5).quantity == 10
    assert db_session.query(Task).count() == 0
    assert db_session.query(TaskInventory).count() == 0
    assert db_session.query(TaskPhoto).count() == 0
    assert storage.deleted == [photo.storage_key]


def test_replace_inventory_restores_old_usage_first(controller, db_session, seed) -> None:
    seed.item("Перчатки", 4, item_id=1)
    task = controller.create(TaskInput(**task_payload()), ACTOR)
    controller.complete(task.id, _usage((1, 4)), ACTOR)

    # All four units belong to this task, so asking for four again must succeed
    reservations = controller.replace_inventory(task.id, _usage((1, 4)), ACTOR)

    assert [(r.inventory_id, r.quantity) for r in reservations] == [(1, 4)]
    assert db_session.get(InventoryItem, 1).quantity == 0

    controller.replace_inventory(task.id, [], ACTOR)
    db_session.expire_all()
    assert db_session.get(InventoryItem, 1).quantity == 4
    assert db_session.query(TaskInventory).count() == 0


def test_status_moves_forward_only(controller) -> None:
    task = controller.create(TaskInput(**task_payload()), ACTOR)

    assert controller.update_status(task.id, TaskStatus.IN_PROGRESS, ACTOR).status == TaskStatus.IN_PROGRESS
    with pytest.raises(ConflictError):
        controller.update_status(task.id, TaskStatus.NEW, ACTOR)
    with pytest.raises(ConflictError):
        controller.update_status(task.id, TaskStatus.COMPLETED, ACTOR)


def test_draft_cannot_leave_draft_while_incomplete(controller) -> None:
    draft = controller.create(TaskInput(service="Мойка окон"), ACTOR)

    with pytest.raises(ValidationError) as exc_info:
        controller.update_status(draft.id, TaskStatus.NEW, ACTOR)

    assert "payment" in exc_info.value.fields
    assert "service" not in exc_info.value.fields


def test_failed_full_update_leaves_task_unchanged(controller, db_session, seed) -> None:
    a = seed.employee("Алексей")
    task = controller.create(TaskInput(**task_payload(employees=[a.id])), ACTOR)

    with pytest.raises(ConflictError):
        controller.update_full(task.id, TaskInput(**task_payload(cost=9999, employees=[a.id, 77])), ACTOR)

    db_session.expire_all()
    stored = db_session.get(Task, task.id)
    assert stored.cost == 4500
    assert stored.employee_count == 1
    assert [p.id for p in controller.list_participants(task.id)] == [a.id]


def test_full_update_replaces_links_and_notifies_newcomers(controller, notifier, seed) -> None:
    a = seed.employee("Алексей")
    b = seed.employee("Борис")
    task = controller.create(TaskInput(**task_payload(employees=[a.id])), ACTOR)

    updated = controller.update_full(task.id, TaskInput(**task_payload(cost=5000, employees=[a.id, b.id])), ACTOR)

    assert updated.cost == 5000
    assert updated.employee_count == 2
    assert notifier.sent[-1].employee_ids == [b.id]


def test_photo_upload_is_undone_when_linking_fails(controller, storage, monkeypatch) -> None:
    task = controller.create(TaskInput(), ACTOR)

    def broken_add_photo(db, task_id, storage_key):
        raise OperationalError("INSERT INTO task_photos", {}, Exception("disk I/O error"))

    monkeypatch.setattr(controller.repo, "add_photo", broken_add_photo)

    with pytest.raises(TransactionError):
        controller.add_photo(task.id, "before.png", b"png-bytes", "image/png", ACTOR)

    assert storage.objects == {}
    assert len(storage.deleted) == 1


def test_photo_type_is_checked_before_upload(controller, storage) -> None:
    task = controller.create(TaskInput(), ACTOR)

    with pytest.raises(ValidationError):
        controller.add_photo(task.id, "notes.pdf", b"%PDF", "application/pdf", ACTOR)

    assert storage.objects == {}


def test_inventory_rows_are_locked_in_ascending_id_order(controller, seed, monkeypatch) -> None:
    seed.item("Мыло", 10, item_id=1)
    seed.item("Тряпки", 10, item_id=2)
    first = controller.create(TaskInput(**task_payload()), ACTOR)
    second = controller.create(TaskInput(**task_payload()), ACTOR)

    locked: list[int] = []
    repo = controller.ledger.repo
    real_get_item = repo.get_item

    def spy_get_item(db, item_id, for_update=False):
        if for_update:
            locked.append(item_id)
        return real_get_item(db, item_id, for_update=for_update)

    monkeypatch.setattr(repo, "get_item", spy_get_item)

    controller.complete(first.id, _usage((1, 1), (2, 1)), ACTOR)
    controller.complete(second.id, _usage((2, 1), (1, 1)), ACTOR)
    assert locked == [1, 2, 1, 2]

    locked.clear()
    controller.replace_inventory(second.id, _usage((2, 2), (1, 1)), ACTOR)
    # Release of the old reservations, then the new usage
    assert locked == [1, 2, 1, 2]


def test_repeated_usage_lines_are_merged(controller, db_session, seed) -> None:
    seed.item("Салфетки", 10, item_id=3)
    task = controller.create(TaskInput(**task_payload()), ACTOR)

    controller.complete(task.id, _usage((3, 2), (3, 4)), ACTOR)

    reservation = db_session.query(TaskInventory).one()
    assert reservation.quantity == 6
    assert db_session.get(InventoryItem, 3).quantity == 4


def test_status_change_leaves_links_and_inventory_alone(controller, db_session, seed) -> None:
    a = seed.employee("Алексей")
    b = seed.employee("Борис")
    wash = seed.service("Мойка окон")
    seed.item("Перчатки", 10, item_id=1)
    task = controller.create(TaskInput(**task_payload(employees=[a.id, b.id], services=[wash.id])), ACTOR)
    controller.replace_inventory(task.id, _usage((1, 3)), ACTOR)

    controller.update_status(task.id, TaskStatus.IN_PROGRESS, ACTOR)

    db_session.expire_all()
    stored = db_session.get(Task, task.id)
    assert stored.status == TaskStatus.IN_PROGRESS
    assert stored.employee_count == 2
    assert [p.id for p in controller.list_participants(task.id)] == [a.id, b.id]
    assert [s.id for s in controller.list_services(task.id)] == [wash.id]
    assert [(r.inventory_id, r.quantity) for r in db_session.query(TaskInventory).all()] == [(1, 3)]
    assert db_session.get(InventoryItem, 1).quantity == 7
