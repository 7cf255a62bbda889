import functools
import logging
import time
import uuid

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from assetproxy.config import ConfigManager
from assetproxy.constants import (
    INTERNAL_ERROR_MESSAGE,
    MISSING_URL_MESSAGE,
    NOT_FOUND_MESSAGE,
    PROXY_ERROR_HEADER,
    UPSTREAM_ERROR_MESSAGE,
)
from assetproxy.datastructures import ProxyRequest, ProxyResponse, ProxyTarget
from assetproxy.exceptions import (
    InvalidTargetException,
    MalformedPathException,
    MissingTargetException,
    UpstreamConnectionException,
    UpstreamStatusException,
)
from assetproxy.headers import build_error_headers, build_request_headers, build_response_headers
from assetproxy.logging import setup_logging
from assetproxy.routing import classify_asset, classify_explicit
from assetproxy.upstream import UpstreamClient, UpstreamResponse


setup_logging()

logger = logging.getLogger("assetproxy")


def _error_response(status_code: int, message: str) -> PlainTextResponse:
    return PlainTextResponse(
        message, status_code=status_code, headers={PROXY_ERROR_HEADER: "proxy"},
    )


def _relay(upstream: UpstreamResponse, status_code: int, headers) -> StreamingResponse:
    return StreamingResponse(
        upstream.aiter_bytes(),
        status_code=status_code,
        headers=headers,
        background=BackgroundTask(upstream.aclose),
    )


def proxy_route():
    def wrapper(func):
        @functools.wraps(func)
        async def wrapped(*args, **kwargs):
            request: Request = kwargs.get('request') or args[0]
            correlation_id = str(uuid.uuid4())
            request.state.correlation_id = correlation_id
            logger.info(
                "Incoming proxy request",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "url": str(request.url),
                    "client_host": request.client.host if request.client else "unknown",
                }
            )
            start_time = time.time()

            def elapsed():
                return f"{time.time() - start_time:.3f}s"

            try:
                response = await func(*args, **kwargs)
                logger.info(
                    "Proxy request streaming",
                    extra={
                        "correlation_id": correlation_id,
                        "status_code": response.status_code,
                        "content_type": response.headers.get("Content-Type", "unknown"),
                        "elapsed_time": elapsed(),
                    }
                )
                return response
            except MissingTargetException as e:
                logger.warning(
                    "Rejected request without target URL",
                    extra={"correlation_id": correlation_id, "exception": str(e)},
                )
                return _error_response(400, MISSING_URL_MESSAGE)
            except MalformedPathException as e:
                logger.warning(
                    "Rejected malformed asset path",
                    extra={"correlation_id": correlation_id, "exception": str(e)},
                )
                return _error_response(404, NOT_FOUND_MESSAGE)
            except UpstreamStatusException as e:
                # Relay the upstream error body as-is, without header rewriting
                logger.warning(
                    "Upstream returned a non-accepted status",
                    extra={
                        "correlation_id": correlation_id,
                        "status_code": e.status_code,
                        "target": e.response.url,
                        "elapsed_time": elapsed(),
                    }
                )
                return _relay(e.response, e.status_code, build_error_headers(e.response.headers))
            except (UpstreamConnectionException, InvalidTargetException) as e:
                logger.error(
                    "Could not reach upstream",
                    exc_info=True,
                    extra={
                        "correlation_id": correlation_id,
                        "exception": str(e),
                        "elapsed_time": elapsed(),
                    }
                )
                return _error_response(500, UPSTREAM_ERROR_MESSAGE.format(reason=e))
            except Exception as exc:
                logger.error(
                    "Unexpected error occurred",
                    exc_info=True,
                    extra={
                        "correlation_id": correlation_id,
                        "exception": str(exc),
                        "elapsed_time": elapsed(),
                    }
                )
                return _error_response(500, INTERNAL_ERROR_MESSAGE)
        return wrapped
    return wrapper


class AssetProxy:
    def __init__(
        self,
        config: ConfigManager | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or ConfigManager()
        self.config.validate()
        self.upstream = UpstreamClient(self.config, transport=transport)

        logger.info(
            "Asset proxy configured",
            extra={
                "asset_origin": self.config.asset_origin,
                "proxy_path": self.config.PROXY_PATH,
            },
        )

    @proxy_route()
    async def _explicit_route(self, request: Request):
        target = classify_explicit(request.query_params.get("url"))
        return await self._forward(request, target)

    @proxy_route()
    async def _asset_route(self, request: Request):
        raw_path = request.scope.get("raw_path")
        if raw_path:
            path = raw_path.split(b"?", 1)[0].decode("latin-1")
        else:
            path = request.url.path
        target = classify_asset(
            path, self.config.asset_origin, proxy_path=self.config.PROXY_PATH,
        )
        return await self._forward(request, target)

    async def _forward(self, request: Request, target: ProxyTarget) -> StreamingResponse:
        correlation_id = request.state.correlation_id
        transformer = ProxyTransformer(config=self.config, target=target)
        proxy_request = transformer.transform_request(request)

        logger.info(
            "Proxying request",
            extra={
                "correlation_id": correlation_id,
                "target": proxy_request.url,
                "asset": target.is_asset_request,
            }
        )
        upstream = await self.upstream.fetch(proxy_request, target, correlation_id=correlation_id)
        try:
            proxy_response = transformer.transform_response(upstream)
        except Exception:
            await upstream.aclose()
            raise
        return StreamingResponse(
            proxy_response.body,
            status_code=proxy_response.status_code,
            headers=proxy_response.headers,
            background=BackgroundTask(upstream.aclose),
        )

    def to_fastapi(self, app: FastAPI):
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
        app.api_route(self.config.PROXY_PATH, methods=["GET"])(self._explicit_route)
        app.api_route("/{path:path}", methods=["GET"])(self._asset_route)


class ProxyTransformer:
    def __init__(self, *, config: ConfigManager, target: ProxyTarget):
        self.config = config
        self.target = target

    def transform_request(self, in_request: Request) -> ProxyRequest:
        headers = build_request_headers(
            in_request.headers, self.target, self.config.asset_origin,
        )
        return ProxyRequest(url=self.target.resolved_url, headers=headers)

    def transform_response(self, upstream: UpstreamResponse) -> ProxyResponse:
        return ProxyResponse(
            status_code=upstream.status_code,
            headers=build_response_headers(upstream.headers, self.target),
            body=upstream.aiter_bytes(),
        )
