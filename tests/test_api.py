"""
Integration tests for the HTTP API.
"""
import json

import httpx
import pytest
from fastapi import Request

from daytodos.api.main import app, global_exception_handler
from daytodos.api.routes import get_todo_service
from daytodos.storage.buckets import BucketStore
from daytodos.storage.connection import close_db


INTERNAL_ERROR = {
    "error": "Internal server error",
    "message": "An unexpected error occurred. Please try again later.",
}


def todo_body(task: str, created: str) -> dict:
    return {"Task": task, "Created": created}


class TestTodoRoutes:
    """Integration tests for the todo endpoints."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_todo(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/day/mon", json=todo_body("milk cows", "2024-01-15T08:00:00Z")
        )

        assert response.status_code == 201
        assert response.json() == {
            "key": "1/2024-01-15T08:00:00.000000Z",
            "day": "mon",
            "task": "milk cows",
            "message": "put todo for 1/2024-01-15T08:00:00.000000Z: milk cows",
        }

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_todo_without_created(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/day/Sunday", json={"task": "pray quietly"})

        assert response.status_code == 201
        assert response.json()["key"].startswith("7/")
        assert response.json()["day"] == "sun"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_todo_invalid_body(self, client: httpx.AsyncClient) -> None:
        assert (await client.post("/day/mon", json={"Day": "mon"})).status_code == 422
        assert (await client.post("/day/mon", json={"Task": ""})).status_code == 422
        assert (await client.post("/day/mon", content=b"nope")).status_code == 422

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unknown_day(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/day/funday")
        assert response.status_code == 404
        assert response.json() == {"detail": "unknown day: funday"}

        response = await client.post("/day/funday", json={"Task": "x"})
        assert response.status_code == 404

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_day_tasks(self, client: httpx.AsyncClient) -> None:
        await client.post("/day/tue", json=todo_body("fold laundry", "2024-01-16T09:00:00Z"))
        await client.post("/day/tue", json=todo_body("wash laundry", "2024-01-16T08:00:00Z"))
        await client.post("/day/wed", json=todo_body("flip burgers", "2024-01-17T08:00:00Z"))

        response = await client.get("/day/tue")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"When": "tue", "Tasks": ["wash laundry", "fold laundry"]}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_empty_day(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/day/thu")
        assert response.json() == {"When": "thu", "Tasks": []}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_weekdays_and_weekend(self, client: httpx.AsyncClient) -> None:
        await client.post("/day/sat", json=todo_body("have beer", "2024-01-20T08:00:00Z"))
        await client.post("/day/fri", json=todo_body("kill time", "2024-01-19T08:00:00Z"))
        await client.post("/day/mon", json=todo_body("milk cows", "2024-01-15T08:00:00Z"))
        await client.post("/day/sun", json=todo_body("take aspirin", "2024-01-21T08:00:00Z"))

        weekdays = (await client.get("/weekdays")).json()
        weekend = (await client.get("/weekend")).json()

        assert weekdays == {"When": "weekdays", "Tasks": ["milk cows", "kill time"]}
        assert weekend == {"When": "weekend", "Tasks": ["have beer", "take aspirin"]}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_week(self, client: httpx.AsyncClient) -> None:
        await client.post("/day/wed", json=todo_body("flip burgers", "2024-01-17T08:00:00Z"))

        days = (await client.get("/week")).json()["days"]

        assert [d["When"] for d in days] == ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
        assert days[2] == {"When": "wed", "Tasks": ["flip burgers"]}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_clear_day(self, client: httpx.AsyncClient) -> None:
        await client.post("/day/sat", json=todo_body("have beer", "2024-01-20T08:00:00Z"))
        await client.post("/day/sat", json=todo_body("make merry", "2024-01-20T09:00:00Z"))

        response = await client.delete("/day/sat")

        assert response.status_code == 200
        assert response.json() == {"day": "sat", "deleted": 2}
        assert (await client.get("/day/sat")).json()["Tasks"] == []

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_corrupt_record_is_server_error(self, client: httpx.AsyncClient) -> None:
        await BucketStore().bucket("todos").put(b"6/garbage", b"{not json")

        response = await client.get("/weekend")

        assert response.status_code == 500
        assert "Invalid todo record" in response.json()["detail"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_request_id_header(self, client: httpx.AsyncClient) -> None:
        first = await client.get("/weekdays")
        second = await client.get("/weekdays")

        assert first.headers["X-Request-ID"]
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_created_out_of_range(self, client: httpx.AsyncClient) -> None:
        """Times that cannot be expressed in UTC are rejected, not stored."""
        for created in ("0001-01-01T00:00:00+01:00", "9999-12-31T23:30:00-01:00"):
            response = await client.post("/day/mon", json=todo_body("x", created))

            assert response.status_code == 422
            assert response.headers["X-Request-ID"]

        assert (await client.get("/day/mon")).json()["Tasks"] == []

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_error_responses_carry_request_id(self, client: httpx.AsyncClient) -> None:
        assert (await client.get("/day/funday")).headers["X-Request-ID"]
        assert (await client.post("/day/mon", json={})).headers["X-Request-ID"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_storage_failure_is_server_error(self, database_url: str) -> None:
        """Reading from a store whose tables were never created fails with 500."""
        await close_db()
        transport = httpx.ASGITransport(app=app)
        try:
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
                response = await ac.get("/weekdays")
        finally:
            await close_db()

        assert response.status_code == 500
        assert "on bucket 'todos' failed" in response.json()["detail"]
        assert response.headers["X-Request-ID"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unhandled_error_is_json_500(self, client: httpx.AsyncClient) -> None:
        class BrokenService:
            async def weekday_tasks(self) -> None:
                raise RuntimeError("clock fell off the wall")

        app.dependency_overrides[get_todo_service] = BrokenService
        try:
            response = await client.get("/weekdays")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == INTERNAL_ERROR
        assert response.headers["X-Request-ID"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_global_exception_handler(self) -> None:
        request = Request(
            {"type": "http", "method": "GET", "path": "/week", "headers": [], "query_string": b""}
        )

        response = await global_exception_handler(request, RuntimeError("boom"))

        assert response.status_code == 500
        assert json.loads(response.body) == INTERNAL_ERROR


class TestMonitoringRoutes:
    """Integration tests for root, health and metrics endpoints."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_root(self, client: httpx.AsyncClient) -> None:
        data = (await client.get("/")).json()
        assert data["status"] == "operational"
        assert data["health"] == "/health"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_health_check(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"]["status"] == "healthy"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_liveness_and_readiness(self, client: httpx.AsyncClient) -> None:
        assert (await client.get("/health/live")).status_code == 200
        assert (await client.get("/health/ready")).status_code == 200

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_readiness_without_tables(self, database_url: str) -> None:
        """A store that was never initialised is not ready."""
        await close_db()
        transport = httpx.ASGITransport(app=app)
        try:
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
                health = await ac.get("/health")
                ready = await ac.get("/health/ready")
        finally:
            await close_db()

        assert health.json()["status"] == "unhealthy"
        assert ready.status_code == 503

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, client: httpx.AsyncClient) -> None:
        await client.post("/day/mon", json={"Task": "milk cows"})
        await client.get("/day/mon")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert 'todos_created_total{day="mon"}' in response.text
        assert 'task_list_requests_total{when="mon"}' in response.text
