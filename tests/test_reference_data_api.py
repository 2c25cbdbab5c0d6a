# tests/test_reference_data_api.py

from __future__ import annotations

from workorders.models import PaymentMethod, Responsible, UserToken

from .conftest import task_payload


def test_employee_crud(client) -> None:
    created = client.post("/employees", json={"full_name": "Алексей", "phone_number": "+7 999 000-11-22"})
    assert created.status_code == 201
    employee_id = created.json()["id"]
    assert created.json()["phone_number"] == "+79990001122"

    renamed = client.put(f"/employees/{employee_id}", json={"full_name": "Алексей Смирнов"})
    assert renamed.json()["full_name"] == "Алексей Смирнов"
    assert [e["full_name"] for e in client.get("/employees").json()] == ["Алексей Смирнов"]
    assert len(client.get(f"/employees/{employee_id}/changes").json()) == 2


def test_deleting_employee_unlinks_and_recounts_tasks(client) -> None:
    a = client.post("/employees", json={"full_name": "Алексей"}).json()["id"]
    b = client.post("/employees", json={"full_name": "Борис"}).json()["id"]
    task_id = client.post("/tasks", json=task_payload(employees=[a, b])).json()["task_id"]

    response = client.delete(f"/employees/{a}")

    assert response.status_code == 200
    assert response.json()["affected_tasks"] == [task_id]
    assert client.get(f"/tasks/{task_id}").json()["employees"] == 1
    assert [p["id"] for p in client.get(f"/tasks/{task_id}/employees").json()] == [b]
    assert client.get(f"/employees/{a}").status_code == 404


def test_services_catalog(client) -> None:
    created = client.post("/services", json={"service_name": "Мойка окон"})
    assert created.status_code == 201
    service_id = created.json()["id"]

    assert client.post("/services", json={"service_name": "Мойка окон"}).status_code == 400
    assert client.put(f"/services/{service_id}", json={"description": "До 10 окон"}).json()["description"] == "До 10 окон"

    task_id = client.post("/tasks", json={"services": [service_id]}).json()["task_id"]
    assert client.delete(f"/services/{service_id}").status_code == 200
    assert client.get(f"/tasks/{task_id}/services").json() == []
    assert client.get("/services").json() == []


def test_reference_listings(client, db_session) -> None:
    db_session.add_all([PaymentMethod(payment="Наличные"), PaymentMethod(payment="Карта")])
    db_session.add(Responsible(full_name="Иванова Мария"))
    db_session.commit()

    assert [p["payment"] for p in client.get("/paymentmethods").json()] == ["Наличные", "Карта"]
    assert [r["full_name"] for r in client.get("/responsibles").json()] == ["Иванова Мария"]


def test_push_token_is_stored_and_replaced(client, db_session) -> None:
    assert client.put("/users/uid-7/push-token", json={"token": "fcm-1"}).status_code == 200
    assert client.put("/users/uid-7/push-token", json={"token": "fcm-2"}).status_code == 200

    tokens = db_session.query(UserToken).filter_by(user_id="uid-7").all()
    assert [t.token for t in tokens] == ["fcm-2"]
