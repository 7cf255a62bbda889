import logging
import typing

import httpx

from assetproxy.config import ConfigManager
from assetproxy.datastructures import ProxyRequest, ProxyTarget
from assetproxy.exceptions import (
    ProxyClientTimeoutException,
    UpstreamConnectionException,
    UpstreamStatusException,
)

logger = logging.getLogger("assetproxy")


class UpstreamResponse:
    """A received upstream response whose body has not been read yet.

    Owns the per-request client; closing the response closes both.
    """

    def __init__(self, response: httpx.Response, client: httpx.AsyncClient):
        self._response = response
        self._client = client

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def url(self) -> str:
        return str(self._response.url)

    async def aiter_bytes(self) -> typing.AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self):
        await self._response.aclose()
        await self._client.aclose()


class UpstreamClient:
    def __init__(self, config: ConfigManager, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.PROXY_CLIENT_TIMEOUT_SECS,
            follow_redirects=True,
            max_redirects=self.config.PROXY_MAX_REDIRECTS,
            transport=self.transport,
        )

    async def fetch(
        self, proxy_request: ProxyRequest, target: ProxyTarget, correlation_id: str = None,
    ) -> UpstreamResponse:
        logger.debug(f"Fetching upstream {proxy_request.url}", extra={"correlation_id": correlation_id})
        client = self._client()
        try:
            request = client.build_request(
                "GET", proxy_request.url, headers=proxy_request.headers,
            )
            response = await client.send(request, stream=True)
        except httpx.TimeoutException as e:
            await client.aclose()
            raise ProxyClientTimeoutException(f"Request timed out: {e!s}") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            await client.aclose()
            raise UpstreamConnectionException(str(e) or e.__class__.__name__) from e
        except Exception:
            await client.aclose()
            raise

        upstream = UpstreamResponse(response, client)
        if not target.accepts_status(upstream.status_code):
            raise UpstreamStatusException(
                f"Request failed with status code {upstream.status_code}", upstream,
            )
        return upstream
