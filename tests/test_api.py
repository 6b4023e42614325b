"""
API tests through the FastAPI app with the database dependency overridden.
"""
import pytest
from uuid import uuid4

API = "/api/v1"


@pytest.fixture
async def api_project(client, auth_headers):
    response = await client.post(f"{API}/projects", json={"name": "Store", "key": "sto"}, headers=auth_headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def create_item(client, auth_headers, api_project):

    async def _create_item(title, **fields):
        payload = {"project_id": api_project["id"], "title": title, "type": "Story", "priority": "Medium"}
        payload.update(fields)
        response = await client.post(f"{API}/backlog", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_item


@pytest.fixture
def create_sprint(client, auth_headers, api_project):

    async def _create_sprint(name, start="2024-01-01", end="2024-01-15"):
        payload = {"project_id": api_project["id"], "name": name, "start_date": start, "end_date": end}
        response = await client.post(f"{API}/sprints", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_sprint


class TestPublicEndpoints:

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_missing_token(self, client):
        response = await client.get(f"{API}/projects")

        assert response.status_code in (401, 403)

    async def test_invalid_token(self, client):
        response = await client.get(f"{API}/projects", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    async def test_me(self, client, auth_headers, user_id):
        response = await client.get(f"{API}/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["id"] == str(user_id)


class TestProjectsApi:

    async def test_create_and_list(self, client, auth_headers, api_project):
        assert api_project["key"] == "STO"

        response = await client.get(f"{API}/projects", headers=auth_headers)

        body = response.json()
        assert body["total"] == 1
        assert body["total_pages"] == 1
        assert body["projects"][0]["creator"]["name"] == "Alice"

    async def test_duplicate_key_conflict(self, client, auth_headers, api_project):
        response = await client.post(f"{API}/projects", json={"name": "Other", "key": "STO"}, headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "project_key_exists"

    async def test_unknown_project(self, client, auth_headers):
        response = await client.get(f"{API}/projects/{uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["code"] == "project_not_found"


class TestBacklogApi:

    async def test_item_lifecycle(self, client, auth_headers, create_item):
        item = await create_item("Cart page", labels=["ui"])
        item_url = f"{API}/backlog/{item['id']}"

        response = await client.patch(f"{item_url}/status", json={"status": "In Progress"}, headers=auth_headers)
        assert response.json()["status"] == "In Progress"

        response = await client.post(f"{item_url}/comments", json={"content": "Blocked on API"}, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["action"] == "CommentAdded"

        response = await client.delete(f"{item_url}/labels/ui", headers=auth_headers)
        assert response.json()["labels"] == []

        response = await client.get(f"{item_url}/history", headers=auth_headers)
        actions = [entry["action"] for entry in response.json()]
        assert actions == ["LabelRemoved", "CommentAdded", "StatusChanged", "Created"]

    async def test_invalid_type_is_bad_request(self, client, auth_headers, api_project):
        payload = {"project_id": api_project["id"], "title": "x", "type": "Feature", "priority": "Low"}

        response = await client.post(f"{API}/backlog", json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_item_type"

    async def test_list_unassigned(self, client, auth_headers, create_item, create_sprint, api_project):
        planned = await create_item("Planned")
        loose = await create_item("Loose")
        sprint = await create_sprint("Sprint 1")
        await client.post(f"{API}/sprints/{sprint['id']}/items", json={"item_id": planned["id"]}, headers=auth_headers)

        response = await client.get(
            f"{API}/backlog",
            params={"project_id": api_project["id"], "sprint_id": "none"},
            headers=auth_headers
        )

        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["id"] == loose["id"]

    async def test_bad_sprint_filter(self, client, auth_headers):
        response = await client.get(f"{API}/backlog", params={"sprint_id": "abc"}, headers=auth_headers)

        assert response.status_code == 400

    async def test_delete(self, client, auth_headers, create_item):
        item = await create_item("Temp")

        response = await client.delete(f"{API}/backlog/{item['id']}", headers=auth_headers)
        assert response.status_code == 204

        response = await client.get(f"{API}/backlog/{item['id']}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "item_not_found"


class TestSprintsApi:

    async def test_sprint_lifecycle(self, client, auth_headers, create_item, create_sprint, api_project):
        item = await create_item("Checkout", story_points=5)
        sprint = await create_sprint("Sprint 1")
        sprint_url = f"{API}/sprints/{sprint['id']}"
        assert sprint["status"] == "Planning"

        response = await client.post(f"{sprint_url}/items", json={"item_id": item["id"]}, headers=auth_headers)
        assert response.json()["sprint_id"] == sprint["id"]

        response = await client.post(f"{sprint_url}/start", headers=auth_headers)
        assert response.json()["status"] == "Active"

        response = await client.get(
            f"{API}/sprints/active", params={"project_id": api_project["id"]}, headers=auth_headers
        )
        assert response.json()["id"] == sprint["id"]

        await client.patch(f"{API}/backlog/{item['id']}/status", json={"status": "Done"}, headers=auth_headers)

        response = await client.post(f"{sprint_url}/complete", headers=auth_headers)
        assert response.json()["status"] == "Completed"
        assert response.json()["velocity"] == 5

        response = await client.get(f"{sprint_url}/history", headers=auth_headers)
        actions = [entry["action"] for entry in response.json()]
        assert actions == ["Completed", "Started", "ItemAdded", "Created"]

        response = await client.get(f"{sprint_url}/report", headers=auth_headers)
        assert response.json()["completion_percentage"] == 100.0

    async def test_second_start_conflicts(self, client, auth_headers, create_sprint):
        first = await create_sprint("Sprint 1")
        second = await create_sprint("Sprint 2", start="2024-01-15", end="2024-01-29")
        await client.post(f"{API}/sprints/{first['id']}/start", headers=auth_headers)

        response = await client.post(f"{API}/sprints/{second['id']}/start", headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "sprint_already_active"

    async def test_bad_date_range(self, client, auth_headers, api_project):
        payload = {"project_id": api_project["id"], "name": "Backwards",
                   "start_date": "2024-02-01", "end_date": "2024-01-01"}

        response = await client.post(f"{API}/sprints", json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_date_range"

    async def test_no_active_sprint(self, client, auth_headers, api_project):
        response = await client.get(
            f"{API}/sprints/active", params={"project_id": api_project["id"]}, headers=auth_headers
        )

        assert response.status_code == 404
        assert response.json()["code"] == "no_active_sprint"

    async def test_complete_planning_sprint_conflicts(self, client, auth_headers, create_sprint):
        sprint = await create_sprint("Sprint 1")

        response = await client.post(f"{API}/sprints/{sprint['id']}/complete", headers=auth_headers)

        assert response.status_code == 409


class TestUsersApi:

    async def test_activities(self, client, auth_headers, user_id, create_item, create_sprint):
        await create_item("Search")
        await create_sprint("Sprint 1")

        response = await client.get(f"{API}/users/{user_id}/activities", params={"limit": 1}, headers=auth_headers)

        body = response.json()
        assert body["total"] == 2
        assert body["limit"] == 1
        assert len(body["activities"]) == 1
        assert body["activities"][0]["type"] == "sprint"

    @pytest.mark.parametrize("params", [{}, {"limit": 0}, {"limit": -5}])
    async def test_activities_default_page_size(self, client, auth_headers, user_id, create_item, params):
        await create_item("Search")

        response = await client.get(f"{API}/users/{user_id}/activities", params=params, headers=auth_headers)

        body = response.json()
        assert body["limit"] == 50
        assert body["total"] == len(body["activities"]) == 1

    async def test_activities_unknown_user(self, client, auth_headers):
        response = await client.get(f"{API}/users/{uuid4()}/activities", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["code"] == "user_not_found"

    async def test_update_profile(self, client, auth_headers):
        response = await client.put(f"{API}/users/profile", json={"name": "Alice B"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Alice B"
