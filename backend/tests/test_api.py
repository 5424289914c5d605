"""HTTP tests against in-memory storage."""
import pytest
from fastapi.testclient import TestClient

from roadmapper.config import get_settings
from roadmapper.deps import get_ai_generator, get_storage
from roadmapper.errors import PersistenceError
from roadmapper.main import app


@pytest.fixture
def client(storage, settings):
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_ai_generator] = lambda: None
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def project_id(client):
    response = client.post(
        "/projects",
        json={"name": "Acme Portal", "goals": [{"title": "Expand to EU market", "priority": "high"}]},
    )
    assert response.status_code == 201
    return response.json()["id"]


def _generate(client, project_id, **overrides):
    body = {"projectId": project_id, "name": "Q2 plan"}
    body.update(overrides)
    return client.post("/roadmaps/generate", json=body)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestProjectsAndFeedback:
    def test_feedback_lifecycle(self, client, project_id):
        created = client.post(
            f"/projects/{project_id}/feedback",
            json={"content": "Exports are slow", "priority": "high", "extractedKeywords": ["Export", "export"]},
        )
        assert created.status_code == 201
        feedback = created.json()
        assert feedback["extractedKeywords"] == ["export"]
        assert feedback["isIgnored"] is False

        patched = client.patch(f"/projects/{project_id}/feedback/{feedback['id']}", json={"isIgnored": True})
        assert patched.json()["isIgnored"] is True
        assert len(client.get(f"/projects/{project_id}/feedback").json()) == 1

    def test_unknown_project(self, client):
        response = client.get("/projects/missing")
        assert response.status_code == 404
        assert response.json() == {"detail": "Project not found"}


class TestRoadmapRoutes:
    def test_generate_falls_back_without_ai(self, client, project_id):
        response = _generate(client, project_id)
        assert response.status_code == 201
        body = response.json()
        assert body["allocationStrategy"] == {"strategic": 60, "customerDriven": 30, "maintenance": 10}
        assert 8 <= len(body["items"]) <= 14
        assert body["generationContext"]["generatedBy"] == "fallback"
        assert body["rationale"]
        assert body["analytics"]["totalItems"] == len(body["items"])

    def test_generate_missing_name(self, client, project_id):
        response = client.post("/roadmaps/generate", json={"projectId": project_id})
        assert response.status_code == 400
        assert response.json()["detail"] == "Project ID and name are required"

    def test_generate_invalid_type_rejected_by_schema(self, client, project_id):
        response = _generate(client, project_id, type="everything")
        assert response.status_code == 422

    def test_create_with_bad_allocation(self, client, project_id):
        response = client.post(
            "/roadmaps",
            json={
                "projectId": project_id,
                "name": "Manual",
                "allocationStrategy": {"strategic": 40, "customerDriven": 40, "maintenance": 19},
            },
        )
        assert response.status_code == 400
        assert "must total 100%" in response.json()["detail"]

    def test_item_routes(self, client, project_id):
        roadmap = client.post("/roadmaps", json={"projectId": project_id, "name": "Manual"}).json()
        added = client.post(f"/roadmaps/{roadmap['id']}/items", json={"title": "SSO", "category": "customer-driven"})
        assert added.status_code == 201
        item_id = added.json()["items"][0]["id"]

        updated = client.put(f"/roadmaps/{roadmap['id']}/items/{item_id}", json={"status": "completed"})
        assert updated.json()["analytics"]["completionRate"] == 100
        assert updated.json()["version"] == 3

        missing = client.delete(f"/roadmaps/{roadmap['id']}/items/missing")
        assert missing.status_code == 404

        removed = client.delete(f"/roadmaps/{roadmap['id']}/items/{item_id}")
        assert removed.json()["items"] == []

    def test_convert_timeline_and_listing(self, client, project_id):
        roadmap = _generate(client, project_id).json()

        converted = client.post(f"/roadmaps/{roadmap['id']}/convert-to-tasks", json={})
        assert converted.status_code == 200
        tasks = converted.json()["convertedTasks"]
        assert len(tasks) == len(roadmap["items"])
        assert "roadmap-generated" in tasks[0]["tags"]
        assert len(client.get(f"/projects/{project_id}/tasks").json()) == len(tasks)

        timeline = client.get(f"/roadmaps/{roadmap['id']}/timeline").json()
        assert sum(p["summary"]["totalItems"] for p in timeline["timeline"].values()) == len(roadmap["items"])

        listing = client.get(f"/projects/{project_id}/roadmaps", params={"type": "balanced"}).json()
        assert listing["pagination"] == {"current": 1, "pages": 1, "total": 1}

        analytics = client.get(f"/projects/{project_id}/roadmaps/analytics").json()
        assert analytics["totalRoadmaps"] == 1

        assert client.delete(f"/roadmaps/{roadmap['id']}").status_code == 200
        assert client.get(f"/roadmaps/{roadmap['id']}").json()["isActive"] is False

    def test_partial_conversion_response(self, client, storage, project_id):
        roadmap = _generate(client, project_id).json()
        original_create = storage.create_task
        calls = {"n": 0}

        async def flaky_create(data):
            calls["n"] += 1
            if calls["n"] > 1:
                raise PersistenceError("Failed to create task")
            return await original_create(data)

        storage.create_task = flaky_create
        response = client.post(f"/roadmaps/{roadmap['id']}/convert-to-tasks", json={})
        assert response.status_code == 500
        body = response.json()
        assert len(body["convertedTasks"]) == 1
        assert len(body["failedItemIds"]) == len(roadmap["items"]) - 1
