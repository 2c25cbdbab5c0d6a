# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import OperationalError


class FakePhotoStorage:
    """
    In-memory stand-in for the R2 photo store.

    - Keeps uploaded objects by key
    - Records every delete call for assertions
    """

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self._counter = 0

    def upload(self, task_id: int, filename: str, data: bytes, content_type: str | None) -> str:
        self._counter += 1
        key = f"tasks/{task_id}/photos/{self._counter}-{filename}"
        self.objects[key] = data
        return key

    def presigned_url(self, key: str, expiration: int = 3600) -> str:
        return f"https://photos.test/{key}"

    def delete(self, keys: list[str]) -> int:
        self.deleted.extend(keys)
        for key in keys:
            self.objects.pop(key, None)
        return len(keys)


@dataclass(slots=True)
class SentPush:
    employee_ids: list[int]
    title: str
    body: str
    data: dict | None


@dataclass(slots=True)
class FakeNotifier:
    """Captures push notifications instead of calling FCM"""

    sent: list[SentPush] = field(default_factory=list)

    def notify_employees(self, employee_ids, title, body, data=None) -> int:
        self.sent.append(SentPush(list(employee_ids), title, body, data))
        return len(employee_ids)


class BrokenSession:
    """Session whose writes always fail, used to simulate an unavailable change log"""

    def add(self, _obj) -> None:
        raise OperationalError("INSERT INTO client_changes", {}, Exception("database is locked"))

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass

    def close(self) -> None:
        pass
