from datetime import datetime

import pytest


def create_task_payload(
    title="Test Task",
    description="Do something",
    priority=None,
    completed=None,
    due_date=None,
):
    payload = {"title": title, "description": description}
    if priority is not None:
        payload["priority"] = priority
    if completed is not None:
        payload["completed"] = completed
    if due_date is not None:
        payload["dueDate"] = due_date
    return payload


def assert_task_shape(task: dict):
    for key in ["id", "title", "description", "priority", "completed", "createdAt", "updatedAt"]:
        assert key in task
    for key in ["dueDate", "aiPriority", "aiReason"]:
        assert key in task
    assert isinstance(task["id"], str) and task["id"]
    assert isinstance(task["title"], str)
    assert isinstance(task["completed"], bool)
    assert task["priority"] in ("urgent", "high", "medium", "low")
    datetime.fromisoformat(task["createdAt"])
    datetime.fromisoformat(task["updatedAt"])
    if task["dueDate"] is not None:
        datetime.fromisoformat(task["dueDate"])


def create(client, **kwargs) -> dict:
    res = client.post("/api/tasks", json=create_task_payload(**kwargs))
    assert res.status_code == 201, res.text
    return res.json()


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "AI Task Manager API is running!"
        assert data["backend"] in ("memory", "sqlite")


class TestTasksCRUD:
    def test_create_with_only_title_applies_defaults(self, client):
        res = client.post("/api/tasks", json={"title": "Buy milk"})
        assert res.status_code == 201
        task = res.json()
        assert_task_shape(task)
        assert task["title"] == "Buy milk"
        assert task["description"] == ""
        assert task["priority"] == "medium"
        assert task["completed"] is False
        assert task["dueDate"] is None
        assert task["aiPriority"] is None
        assert task["aiReason"] is None

    def test_create_trims_title_and_promotes_due_date(self, client):
        task = create(client, title="  Pay bills  ", due_date="2099-12-25", priority="high")
        assert task["title"] == "Pay bills"
        assert task["priority"] == "high"
        assert task["dueDate"].startswith("2099-12-25T00:00:00")

    def test_create_ignores_client_supplied_id_and_extra_fields(self, client):
        res = client.post("/api/tasks", json={"title": "X", "id": "mine", "tags": ["a"]})
        assert res.status_code == 201
        assert res.json()["id"] != "mine"
        assert "tags" not in res.json()

    def test_ids_are_unique(self, client):
        ids = {create(client, title=f"T{i}")["id"] for i in range(5)}
        assert len(ids) == 5

    def test_list_returns_newest_first(self, client):
        first = create(client, title="first")
        second = create(client, title="second")
        third = create(client, title="third")

        res = client.get("/api/tasks")
        assert res.status_code == 200
        ids = [t["id"] for t in res.json()]
        assert ids == [third["id"], second["id"], first["id"]]

    def test_update_merges_fields(self, client):
        tid = create(client, title="Partial", description="X")["id"]

        res = client.put(f"/api/tasks/{tid}", json={"title": "Partial Updated", "completed": True})
        assert res.status_code == 200
        updated = res.json()
        assert updated["id"] == tid
        assert updated["title"] == "Partial Updated"
        assert updated["completed"] is True
        assert updated["description"] == "X"
        assert updated["priority"] == "medium"

    def test_update_sets_and_clears_ai_fields(self, client):
        tid = create(client, title="AI", priority="low")["id"]

        res = client.put(f"/api/tasks/{tid}", json={"aiPriority": "urgent", "aiReason": "due soon"})
        assert res.status_code == 200
        body = res.json()
        assert body["aiPriority"] == "urgent"
        assert body["aiReason"] == "due soon"
        # Stored priority is untouched by the AI fields
        assert body["priority"] == "low"

        res = client.put(f"/api/tasks/{tid}", json={"aiPriority": None, "aiReason": None})
        assert res.json()["aiPriority"] is None
        assert res.json()["aiReason"] is None

    def test_update_clears_due_date_with_null(self, client):
        tid = create(client, title="Dated", due_date="2100-01-01")["id"]
        res = client.put(f"/api/tasks/{tid}", json={"dueDate": None})
        assert res.status_code == 200
        assert res.json()["dueDate"] is None

    def test_update_cannot_change_id(self, client):
        tid = create(client, title="Stable")["id"]
        res = client.put(f"/api/tasks/{tid}", json={"id": "other", "title": "Still stable"})
        assert res.status_code == 200
        assert res.json()["id"] == tid
        assert client.put("/api/tasks/other", json={"title": "x"}).status_code == 404

    def test_update_bumps_updated_at(self, client):
        task = create(client, title="Clock")
        res = client.put(f"/api/tasks/{task['id']}", json={"completed": True})
        assert datetime.fromisoformat(res.json()["updatedAt"]) >= datetime.fromisoformat(task["updatedAt"])
        assert res.json()["createdAt"] == task["createdAt"]

    def test_update_not_found(self, client):
        res = client.put("/api/tasks/does-not-exist", json={"title": "Nope"})
        assert res.status_code == 404
        assert res.json()["detail"] == "Task not found"

    def test_delete_returns_snapshot_and_removes(self, client):
        task = create(client, title="ToDelete")

        res = client.delete(f"/api/tasks/{task['id']}")
        assert res.status_code == 200
        body = res.json()
        assert body["message"] == "Task deleted successfully"
        assert body["task"]["id"] == task["id"]
        assert body["task"]["title"] == "ToDelete"

        listed = client.get("/api/tasks").json()
        assert task["id"] not in [t["id"] for t in listed]

        again = client.delete(f"/api/tasks/{task['id']}")
        assert again.status_code == 404
        assert again.json()["detail"] == "Task not found"


class TestBulkUpdate:
    def test_applies_each_update(self, client):
        a = create(client, title="A")
        b = create(client, title="B")

        res = client.patch(
            "/api/tasks/bulk-update",
            json={
                "tasks": [
                    {"id": a["id"], "aiPriority": "high", "aiReason": "r1"},
                    {"_id": b["id"], "completed": True},
                ]
            },
        )
        assert res.status_code == 200
        results = res.json()
        assert [r["id"] for r in results] == [a["id"], b["id"]]
        assert results[0]["aiPriority"] == "high"
        assert results[1]["completed"] is True

    def test_unknown_id_does_not_block_others(self, client):
        a = create(client, title="A")

        res = client.patch(
            "/api/tasks/bulk-update",
            json={"tasks": [{"id": "missing", "title": "ghost"}, {"id": a["id"], "title": "A2"}]},
        )
        assert res.status_code == 200
        results = res.json()
        assert results[0] is None
        assert results[1]["title"] == "A2"
        assert client.get("/api/tasks").json()[0]["title"] == "A2"

    def test_entry_without_id_is_rejected(self, client):
        res = client.patch("/api/tasks/bulk-update", json={"tasks": [{"title": "no id"}]})
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"


class TestValidationErrors:
    @pytest.mark.parametrize("payload", [{"title": "  "}, {"description": "no title"}, {"title": None}])
    def test_create_requires_title(self, client, payload):
        res = client.post("/api/tasks", json=payload)
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)

    def test_create_rejects_unknown_priority(self, client):
        res = client.post("/api/tasks", json={"title": "x", "priority": "critical"})
        assert res.status_code == 422

    def test_update_rejects_bad_values(self, client):
        tid = create(client, title="Valid")["id"]

        for payload in (
            {"priority": "someday"},
            {"aiPriority": "asap"},
            {"dueDate": "not-a-date"},
            {"title": ""},
            {"title": None},
            {"completed": None},
        ):
            res = client.put(f"/api/tasks/{tid}", json=payload)
            assert res.status_code == 422, payload
            assert res.json()["error"] == "ValidationError"

        # Nothing was written by the rejected requests
        task = client.get("/api/tasks").json()[0]
        assert task["title"] == "Valid"
        assert task["priority"] == "medium"
