import json

from taskmanager.api.generate_openapi import generate_openapi


def test_generate_openapi_writes_schema(tmp_path):
    out = tmp_path / "interfaces" / "openapi.json"
    path = generate_openapi(str(out))

    assert path == str(out)
    schema = json.loads(out.read_text(encoding="utf-8"))
    assert schema["info"]["title"] == "AI Task Manager API"
    assert {"/api/tasks", "/api/tasks/{task_id}", "/api/tasks/bulk-update", "/api/ai/generate"} <= set(schema["paths"])
    assert {t["name"] for t in schema["tags"]} >= {"health", "tasks", "ai"}
