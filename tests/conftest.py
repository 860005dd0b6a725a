"""Shared fixtures: fake clock, fake sleep, and an in-process fake of the upstream APIs.

No test touches the network. Upstream APIs are served by FakeApi through
httpx.MockTransport; the FastAPI app is driven through httpx.ASGITransport.
"""

from typing import Any, Callable

import httpx
import pytest

from config import Settings
from services.cache import MemoryCache
from services.liquidity import LiquidityService
from services.releases import ReleaseService


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeApi:
    """Serves canned responses by URL path and records every request.

    Responses queued for a path are consumed in order; the last one keeps
    being served. Unknown paths answer 404.
    """

    def __init__(self):
        self.routes: dict[str, list[Callable[[httpx.Request], httpx.Response]]] = {}
        self.calls: list[httpx.Request] = []

    def add(self, path: str, status_code: int = 200, json: Any = None, text: str | None = None) -> None:
        def respond(_request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, json=json)

        self.routes.setdefault(path, []).append(respond)

    def add_handler(self, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes.setdefault(path, []).append(handler)

    def fail(self, path: str) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.routes.setdefault(path, []).append(respond)

    def count(self, path: str) -> int:
        return sum(1 for request in self.calls if request.url.path == path)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        queue = self.routes.get(request.url.path)
        if not queue:
            return httpx.Response(404, json={"message": "Not Found"})
        handler = queue.pop(0) if len(queue) > 1 else queue[0]
        return handler(request)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
async def http_client(api):
    async with httpx.AsyncClient(transport=httpx.MockTransport(api)) as client:
        yield client


@pytest.fixture
def memory_cache(clock) -> MemoryCache:
    return MemoryCache(ttl_seconds=600, clock=clock)


@pytest.fixture
def liquidity(memory_cache, http_client, fake_sleep) -> LiquidityService:
    return LiquidityService(memory_cache, http_client, retries=3, backoff_seconds=1.0, sleep=fake_sleep)


@pytest.fixture
def releases(memory_cache, http_client, fake_sleep) -> ReleaseService:
    return ReleaseService(memory_cache, http_client, retries=3, backoff_seconds=1.0, sleep=fake_sleep)


@pytest.fixture
def site_settings(tmp_path, monkeypatch) -> Settings:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    s = Settings()
    s.cache_dir = str(tmp_path / "cache")
    s.retry_backoff_seconds = 0
    s.api_retries = 2
    return s


@pytest.fixture
async def site_client(site_settings, api, clock):
    from app import create_app

    site = create_app(
        site_settings,
        cache=MemoryCache(clock=clock),
        transport=httpx.MockTransport(api),
    )
    transport = httpx.ASGITransport(app=site)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await site.state.http_client.aclose()
