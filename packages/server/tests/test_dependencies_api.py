"""
HTTP tests for the /api/v1/dependencies endpoints.

State is checked through the API itself so the test session and the request
sessions never hold the shared connection at the same time.
"""

import uuid

from conftest import USER_B, auth_headers

BASE = "/api/v1/dependencies"


async def _post_edge(client, headers, blocked, blocking):
    return await client.post(
        f"{BASE}/",
        json={"blocked_task_id": str(blocked.id), "blocking_task_id": str(blocking.id)},
        headers=headers,
    )


def _ids(payload):
    return [item["task"]["id"] for item in payload]


class TestCreateEndpoint:
    async def test_returns_201_with_id(self, client, factory, headers_a):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")

        response = await _post_edge(client, headers_a, blocked=b, blocking=a)

        assert response.status_code == 201
        uuid.UUID(response.json()["id"])

    async def test_requires_token(self, client, factory):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")

        response = await _post_edge(client, {}, blocked=b, blocking=a)

        assert response.status_code == 401
        assert response.json() == {"detail": "Unauthorized"}

    async def test_invalid_token_is_unauthenticated(self, client, factory):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")

        response = await _post_edge(
            client, {"Authorization": "Bearer not-a-jwt"}, blocked=b, blocking=a
        )

        assert response.status_code == 401

    async def test_self_dependency(self, client, factory, headers_a):
        project = await factory.project()
        a = await factory.task(project, "A")

        response = await _post_edge(client, headers_a, blocked=a, blocking=a)

        assert response.status_code == 409
        assert response.json()["detail"] == "A task cannot block itself"

    async def test_missing_tasks(self, client, factory, headers_a, missing_id):
        project = await factory.project()
        a = await factory.task(project, "A")

        response = await client.post(
            f"{BASE}/",
            json={"blocked_task_id": str(missing_id), "blocking_task_id": str(a.id)},
            headers=headers_a,
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Blocked task not found"

        response = await client.post(
            f"{BASE}/",
            json={"blocked_task_id": str(a.id), "blocking_task_id": str(missing_id)},
            headers=headers_a,
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Blocking task not found"

    async def test_other_users_task_is_not_found(self, client, factory, headers_b):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")

        response = await _post_edge(client, headers_b, blocked=b, blocking=a)

        assert response.status_code == 404
        assert response.json()["detail"] == "Blocked task not found"

    async def test_cross_project(self, client, factory, headers_a):
        p1 = await factory.project(name="One")
        p2 = await factory.project(name="Two")
        a = await factory.task(p1, "A")
        b = await factory.task(p2, "B")

        response = await _post_edge(client, headers_a, blocked=b, blocking=a)

        assert response.status_code == 422
        assert response.json()["detail"] == "Tasks must belong to the same project"

    async def test_duplicate(self, client, factory, headers_a):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")
        assert (await _post_edge(client, headers_a, blocked=b, blocking=a)).status_code == 201

        response = await _post_edge(client, headers_a, blocked=b, blocking=a)

        assert response.status_code == 409
        assert response.json()["detail"] == "This dependency already exists"

    async def test_cycle(self, client, factory, headers_a):
        project = await factory.project()
        a, b, c = await factory.tasks(project, "A", "B", "C")
        assert (await _post_edge(client, headers_a, blocked=b, blocking=a)).status_code == 201
        assert (await _post_edge(client, headers_a, blocked=c, blocking=b)).status_code == 201

        response = await _post_edge(client, headers_a, blocked=a, blocking=c)

        assert response.status_code == 409
        assert response.json()["detail"] == "This dependency would create a circular reference"

    async def test_rejects_malformed_body(self, client, headers_a):
        response = await client.post(
            f"{BASE}/", json={"blocked_task_id": "nope"}, headers=headers_a
        )
        assert response.status_code == 422


class TestRemoveEndpoints:
    async def test_remove_by_pair(self, client, factory, headers_a):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")
        await _post_edge(client, headers_a, blocked=b, blocking=a)

        response = await client.delete(
            f"{BASE}/tasks/{b.id}/blockers/{a.id}", headers=headers_a
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        blockers = await client.get(f"{BASE}/tasks/{b.id}/blockers", headers=headers_a)
        assert blockers.json() == []

    async def test_remove_by_id(self, client, factory, headers_a):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")
        dep_id = (await _post_edge(client, headers_a, blocked=b, blocking=a)).json()["id"]

        response = await client.delete(f"{BASE}/{dep_id}", headers=headers_a)
        assert response.status_code == 200

        again = await client.delete(f"{BASE}/{dep_id}", headers=headers_a)
        assert again.status_code == 404
        assert again.json()["detail"] == "Dependency not found"

    async def test_remove_missing_pair(self, client, factory, headers_a):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")

        response = await client.delete(
            f"{BASE}/tasks/{b.id}/blockers/{a.id}", headers=headers_a
        )

        assert response.status_code == 404

    async def test_remove_someone_elses_edge(self, client, factory, headers_a, headers_b):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")
        dep_id = (await _post_edge(client, headers_a, blocked=b, blocking=a)).json()["id"]

        by_pair = await client.delete(f"{BASE}/tasks/{b.id}/blockers/{a.id}", headers=headers_b)
        by_id = await client.delete(f"{BASE}/{dep_id}", headers=headers_b)

        assert by_pair.status_code == 403
        assert by_id.status_code == 403
        assert by_id.json()["detail"] == "Unauthorized"
        blockers = await client.get(f"{BASE}/tasks/{b.id}/blockers", headers=headers_a)
        assert _ids(blockers.json()) == [str(a.id)]

    async def test_remove_requires_token(self, client, missing_id):
        response = await client.delete(f"{BASE}/{missing_id}")
        assert response.status_code == 401


class TestQueryEndpoints:
    async def test_blockers_and_blocked(self, client, factory, headers_a):
        project = await factory.project()
        a, b, c = await factory.tasks(project, "A", "B", "C")
        await _post_edge(client, headers_a, blocked=c, blocking=a)
        await _post_edge(client, headers_a, blocked=c, blocking=b)

        blockers = await client.get(f"{BASE}/tasks/{c.id}/blockers", headers=headers_a)
        blocked = await client.get(f"{BASE}/tasks/{a.id}/blocked", headers=headers_a)

        assert blockers.status_code == 200
        assert _ids(blockers.json()) == [str(a.id), str(b.id)]
        assert blockers.json()[0]["task"]["title"] == "A"
        assert "dependency_id" in blockers.json()[0]
        assert _ids(blocked.json()) == [str(c.id)]

    async def test_anonymous_queries_are_empty(self, client, factory, headers_a):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")
        await _post_edge(client, headers_a, blocked=b, blocking=a)

        for path in (
            f"{BASE}/tasks/{b.id}/blockers",
            f"{BASE}/tasks/{a.id}/blocked",
            f"{BASE}/tasks/{a.id}/available-blockers",
            f"{BASE}/tasks/{a.id}/available-blocked",
        ):
            response = await client.get(path)
            assert response.status_code == 200
            assert response.json() == []

        batch = await client.post(f"{BASE}/batch", json={"task_ids": [str(a.id)]})
        assert batch.status_code == 200
        assert batch.json() == {}

    async def test_other_user_sees_nothing(self, client, factory, headers_a, headers_b):
        project = await factory.project()
        a, b = await factory.tasks(project, "A", "B")
        await _post_edge(client, headers_a, blocked=b, blocking=a)

        response = await client.get(f"{BASE}/tasks/{b.id}/blockers", headers=headers_b)

        assert response.json() == []

    async def test_batch(self, client, factory, headers_a, missing_id):
        project = await factory.project()
        a, b, c = await factory.tasks(project, "A", "B", "C")
        await _post_edge(client, headers_a, blocked=b, blocking=a)
        await _post_edge(client, headers_a, blocked=c, blocking=b)

        response = await client.post(
            f"{BASE}/batch",
            json={"task_ids": [str(a.id), str(b.id), str(missing_id)]},
            headers=headers_a,
        )

        assert response.status_code == 200
        assert response.json() == {
            str(a.id): {"blocker_ids": [], "blocking_ids": [str(b.id)]},
            str(b.id): {"blocker_ids": [str(a.id)], "blocking_ids": [str(c.id)]},
            str(missing_id): {"blocker_ids": [], "blocking_ids": []},
        }

    async def test_batch_empty(self, client, headers_a):
        response = await client.post(f"{BASE}/batch", json={"task_ids": []}, headers=headers_a)
        assert response.json() == {}

    async def test_pickers(self, client, factory, headers_a):
        project = await factory.project()
        a, b, c, d = await factory.tasks(project, "A", "B", "C", "D")
        await _post_edge(client, headers_a, blocked=b, blocking=a)
        await _post_edge(client, headers_a, blocked=c, blocking=b)

        blockers_for_a = await client.get(
            f"{BASE}/tasks/{a.id}/available-blockers", headers=headers_a
        )
        blocked_for_a = await client.get(
            f"{BASE}/tasks/{a.id}/available-blocked", headers=headers_a
        )

        # B and C already wait on A, so only D may block it.
        assert [t["id"] for t in blockers_for_a.json()] == [str(d.id)]
        # B is already blocked by A; C is reachable and still offered.
        assert [t["id"] for t in blocked_for_a.json()] == [str(c.id), str(d.id)]

    async def test_picker_for_unknown_task(self, client, headers_a, missing_id):
        response = await client.get(
            f"{BASE}/tasks/{missing_id}/available-blockers", headers=headers_a
        )
        assert response.json() == []

    async def test_picker_candidates_are_accepted(self, client, factory):
        headers = auth_headers(USER_B)
        project = await factory.project(user_id=USER_B)
        a, b, c = await factory.tasks(project, "A", "B", "C")
        await _post_edge(client, headers, blocked=b, blocking=a)

        candidates = await client.get(f"{BASE}/tasks/{c.id}/available-blockers", headers=headers)
        for candidate in candidates.json():
            response = await client.post(
                f"{BASE}/",
                json={"blocked_task_id": str(c.id), "blocking_task_id": candidate["id"]},
                headers=headers,
            )
            assert response.status_code == 201
