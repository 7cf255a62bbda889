import httpx
import pytest

from fastapi import FastAPI
from fastapi.testclient import TestClient
from assetproxy import AssetProxy
from assetproxy.config import ConfigManager


ASSET_ORIGIN = "https://assets.test"


class FakeUpstream:
    """Deterministic upstream served through httpx.MockTransport.

    Unknown URLs fail the way an unresolvable host does.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, url, status_code=200, headers=None, content=b""):
        self.routes[str(httpx.URL(url))] = (status_code, headers or {}, content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url not in self.routes:
            raise httpx.ConnectError("[Errno -2] Name or service not known", request=request)
        status_code, headers, content = self.routes[url]
        return httpx.Response(status_code, headers=headers, content=content)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def config(monkeypatch):
    monkeypatch.setenv("ASSET_ORIGIN", ASSET_ORIGIN)
    return ConfigManager()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def client(config, upstream):
    app = FastAPI()
    AssetProxy(config=config, transport=upstream.transport).to_fastapi(app)
    return TestClient(app)


@pytest.fixture
def anyio_backend():
    return 'asyncio'
