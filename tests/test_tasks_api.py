# tests/test_tasks_api.py

from __future__ import annotations

from .conftest import task_payload


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "healthy"}


def test_task_round_trip_through_the_api(client, seed) -> None:
    a = seed.employee("Алексей")
    seed.item("Шампунь для ковров", 10, item_id=5)

    created = client.post("/tasks", json=task_payload(employees=[a.id]))
    assert created.status_code == 201
    task_id = created.json()["task_id"]

    task = client.get(f"/tasks/{task_id}").json()
    assert task["status"] == "новая"
    assert task["employees"] == 1
    assert client.get("/task-dates").json() == ["2026-10-20"]
    assert [p["full_name"] for p in client.get(f"/task-participants/{task_id}").json()] == ["Алексей"]

    started = client.put(f"/tasks/{task_id}", json={"status": "в работе"})
    assert started.status_code == 200
    assert started.json()["cost"] == 4500

    completed = client.put(f"/tasks/{task_id}/complete", json={"inventory": [{"inventory_id": 5, "quantity": 3}]})
    assert completed.status_code == 200
    assert completed.json()["status"] == "выполнено"
    assert client.get(f"/tasks/{task_id}/inventory").json() == [
        {"inventory_id": 5, "name": "Шампунь для ковров", "measure": "шт", "quantity": 3}
    ]
    assert client.get("/inventory/5").json()["quantity"] == 7

    deleted = client.delete(f"/tasks/{task_id}")
    assert deleted.json() == {"message": "Task deleted", "task_id": task_id}
    assert client.get("/inventory/5").json()["quantity"] == 10
    assert client.get(f"/tasks/{task_id}").status_code == 404


def test_missing_required_field_is_named(client) -> None:
    payload = task_payload()
    del payload["cost"]

    response = client.post("/tasks", json=payload)

    assert response.status_code == 400
    assert "cost" in response.json()["error"]


def test_unknown_employee_is_rejected_without_creating_task(client, seed) -> None:
    seed.employee("Алексей", employee_id=1)

    response = client.post("/tasks", json=task_payload(employees=[1, 2]))

    assert response.status_code == 400
    assert "2" in response.json()["error"]
    assert client.get("/tasks").json() == []


def test_malformed_body_is_a_400(client) -> None:
    response = client.post("/tasks", json=task_payload(start_time="25:99"))

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request")


def test_list_tasks_filters_by_start_date(client) -> None:
    client.post("/tasks", json=task_payload(start_date="2026-10-20"))
    client.post("/tasks", json=task_payload(start_date="2026-10-21"))

    tasks = client.get("/tasks", params={"start_date": "2026-10-21"}).json()

    assert [t["start_date"] for t in tasks] == ["2026-10-21"]


def test_attach_employees_and_services(client, seed, notifier) -> None:
    a = seed.employee("Алексей")
    b = seed.employee("Борис")
    wash = seed.service("Мойка окон")
    task_id = client.post("/tasks", json={}).json()["task_id"]

    response = client.post(f"/tasks/{task_id}/employees", json={"employees": [a.id, b.id]})
    assert response.status_code == 201
    assert response.json()["added"] == [a.id, b.id]
    assert client.get(f"/tasks/{task_id}").json()["employees"] == 2
    assert notifier.sent[-1].employee_ids == [a.id, b.id]

    response = client.post(f"/tasks/{task_id}/services", json={"services": [wash.id]})
    assert response.status_code == 201
    assert [s["service_name"] for s in client.get(f"/tasks/{task_id}/services").json()] == ["Мойка окон"]

    assert client.post(f"/tasks/{task_id}/employees", json={"employees": []}).status_code == 400


def test_photo_upload_and_listing(client, storage) -> None:
    task_id = client.post("/tasks", json={}).json()["task_id"]

    response = client.post(
        f"/tasks/{task_id}/photos",
        files={"file": ("after.jpg", b"jpeg-bytes", "image/jpeg")},
    )

    assert response.status_code == 201
    key = response.json()["storage_key"]
    assert key in storage.objects
    photos = client.get(f"/tasks/{task_id}/photos").json()
    assert [p["url"] for p in photos] == [f"https://photos.test/{key}"]


def test_unknown_task_is_404(client) -> None:
    assert client.get("/tasks/12345").status_code == 404
    assert client.put("/tasks/12345", json={"status": "в работе"}).status_code == 404
    assert client.delete("/tasks/12345").json() == {"error": "Task 12345 not found"}
