"""Middleware tests: request ID, rate limiting, CORS, error handling."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from httpx import AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from chronolog.tracking.time_service import TimeEntryIntegrityError


class FakePipeline:
    """Queues INCR/EXPIRE like a redis pipeline and applies them on execute()."""

    def __init__(self, store: "FakeRedis") -> None:
        self._store = store
        self._ops: list[tuple[str, str, int]] = []

    def incr(self, key: str) -> None:
        self._ops.append(("incr", key, 0))

    def expire(self, key: str, seconds: int) -> None:
        self._ops.append(("expire", key, seconds))

    async def execute(self) -> list[object]:
        if self._store.fail:
            raise RedisConnectionError("connection refused")
        results: list[object] = []
        for op, key, seconds in self._ops:
            if op == "incr":
                self._store.counts[key] = self._store.counts.get(key, 0) + 1
                results.append(self._store.counts[key])
            else:
                self._store.ttls[key] = seconds
                results.append(True)
        return results


class FakeRedis:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.counts: dict[str, int] = {}
        self.ttls: dict[str, int] = {}

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedis:
    redis = FakeRedis()
    monkeypatch.setattr("chronolog.middleware.rate_limit.get_redis", lambda: redis)
    # One fixed window for the whole test.
    monkeypatch.setattr("chronolog.middleware.rate_limit.time", SimpleNamespace(time=lambda: 1_700_000_000.0))
    return redis


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    """Request ID is auto-generated when not provided."""
    response = await client.get("/health")
    assert "x-request-id" in response.headers
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


@pytest.mark.asyncio
async def test_malformed_request_id_replaced(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-Id": "x" * 200})
    assert len(response.headers["x-request-id"]) == 36

    response = await client.get("/health", headers={"X-Request-Id": "bad id with spaces"})
    assert response.headers["x-request-id"] != "bad id with spaces"


@pytest.mark.asyncio
async def test_rate_limit_headers(client: AsyncClient, fake_redis: FakeRedis) -> None:
    response = await client.get("/api/v1/catalog/stats")
    assert response.status_code == 200
    assert response.headers["x-ratelimit-limit"] == "100"
    assert response.headers["x-ratelimit-remaining"] == "99"

    (key,) = fake_redis.counts
    assert key.startswith("ratelimit:")
    assert fake_redis.ttls[key] == 61


@pytest.mark.asyncio
async def test_rate_limit_blocks_excess(client: AsyncClient, fake_redis: FakeRedis) -> None:
    """101st request in the window returns 429 with Retry-After."""
    for _ in range(100):
        await client.get("/api/v1/catalog/stats")
    response = await client.get("/api/v1/catalog/stats")
    assert response.status_code == 429
    assert response.headers["retry-after"] == "60"
    assert response.headers["x-ratelimit-remaining"] == "0"
    assert response.json()["detail"] == "Rate limit exceeded. Try again later."


@pytest.mark.asyncio
async def test_health_exempt_from_rate_limit(client: AsyncClient, fake_redis: FakeRedis) -> None:
    for _ in range(150):
        response = await client.get("/health")
        assert response.status_code == 200
    assert fake_redis.counts == {}


@pytest.mark.asyncio
async def test_rate_limit_passes_through_without_redis(client: AsyncClient) -> None:
    """Without Redis the limiter lets every request through and adds no headers."""
    for _ in range(5):
        response = await client.get("/api/v1/catalog/stats")
        assert response.status_code == 200
    assert "x-ratelimit-limit" not in response.headers


@pytest.mark.asyncio
async def test_rate_limit_passes_through_on_redis_error(client: AsyncClient, fake_redis: FakeRedis) -> None:
    fake_redis.fail = True
    response = await client.get("/api/v1/catalog/stats")
    assert response.status_code == 200
    assert "x-ratelimit-limit" not in response.headers


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    response = await client.options(
        "/health",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


@pytest.mark.asyncio
async def test_404_returns_json(client: AsyncClient) -> None:
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    assert response.json()["detail"] == "Not Found"


@pytest.mark.asyncio
async def test_validation_error_shape(authed_client: AsyncClient) -> None:
    """Body validation failures come back as 422 with the error list."""
    response = await authed_client.post("/api/v1/rewards/claim", json={"activity_id": "not-a-number"})
    assert response.status_code == 422
    data = response.json()
    assert data["detail"] == "Validation error"
    assert data["errors"]


@pytest.mark.asyncio
async def test_unmapped_integrity_error_returns_json_500(app, client: AsyncClient) -> None:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def broken() -> dict[str, str]:
        raise TimeEntryIntegrityError(7, start, start - timedelta(seconds=5))

    app.add_api_route("/broken-entries", broken)
    response = await client.get("/broken-entries")
    assert response.status_code == 500
    assert response.json() == {"detail": "Stored time entries are inconsistent"}
