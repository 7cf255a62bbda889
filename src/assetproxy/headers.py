import typing
from urllib.parse import urlsplit

import httpx
from starlette.datastructures import Headers, MutableHeaders

from assetproxy.constants import (
    ASSET_ACCEPT_FALLBACK,
    ASSET_ACCEPT_TABLE,
    ASSET_MIME_CORRECTIONS,
    BROWSER_USER_AGENT,
    DEFAULT_CONTENT_TYPE,
    STRIP_ASSET_REQUEST_HEADERS,
    STRIP_REQUEST_HEADERS,
    STRIP_RESPONSE_HEADERS,
)
from assetproxy.datastructures import ProxyTarget
from assetproxy.exceptions import InvalidTargetException


def _filter(
    raw: typing.Iterable[typing.Tuple[bytes, bytes]], strip: typing.AbstractSet[str],
) -> MutableHeaders:
    # Values stay as received bytes; only names are decoded for the lookup
    return MutableHeaders(
        raw=[
            (k.lower(), v)
            for k, v in raw
            if k.lower().decode("latin-1") not in strip
        ],
    )


DEFAULT_PORTS = {"http": 80, "https": 443}


def target_origin(url: str) -> str:
    """Scheme, host and non-default port of ``url``. Userinfo is never included."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as e:
        raise InvalidTargetException(f"Invalid URL: {url}") from e
    if not parts.scheme or not parts.hostname:
        raise InvalidTargetException(f"Invalid URL: {url}")

    scheme = parts.scheme.lower()
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    return f"{scheme}://{host}"


def accept_for_path(path: str) -> str:
    path = path.lower()
    for needles, accept in ASSET_ACCEPT_TABLE:
        if any(needle in path for needle in needles):
            return accept
    return ASSET_ACCEPT_FALLBACK


def build_request_headers(
    in_headers: Headers, target: ProxyTarget, asset_origin: str,
) -> MutableHeaders:
    """Forwardable inbound headers plus the browser-identity overrides."""
    if target.is_asset_request:
        headers = _filter(in_headers.raw, STRIP_ASSET_REQUEST_HEADERS)
        headers["user-agent"] = BROWSER_USER_AGENT
        headers["referer"] = asset_origin + "/"
        headers["origin"] = asset_origin
        if "accept" not in headers:
            headers["accept"] = accept_for_path(target.asset_path)
        return headers

    headers = _filter(in_headers.raw, STRIP_REQUEST_HEADERS)
    if "user-agent" not in headers:
        headers["user-agent"] = BROWSER_USER_AGENT
    if "referer" not in headers:
        headers["referer"] = target_origin(target.resolved_url) + "/"
    return headers


def resolve_content_type(upstream_content_type: str | None, target: ProxyTarget) -> str:
    content_type = upstream_content_type or DEFAULT_CONTENT_TYPE
    if not target.is_asset_request or "text/html" not in content_type.lower():
        return content_type

    path = target.asset_path.lower()
    for needle, corrected in ASSET_MIME_CORRECTIONS:
        if needle in path:
            return corrected
    return content_type


def build_response_headers(upstream_headers: httpx.Headers, target: ProxyTarget) -> MutableHeaders:
    headers = _filter(upstream_headers.raw, STRIP_RESPONSE_HEADERS)
    upstream_content_type = upstream_headers.get("content-type")
    content_type = resolve_content_type(upstream_content_type, target)
    if content_type != upstream_content_type:
        headers["content-type"] = content_type
    return headers


def build_error_headers(upstream_headers: httpx.Headers) -> MutableHeaders:
    """Headers for relaying a non-accepted upstream response: content type only."""
    headers = MutableHeaders(
        raw=[(k.lower(), v) for k, v in upstream_headers.raw if k.lower() == b"content-type"],
    )
    if "content-type" not in headers:
        headers["content-type"] = "text/plain"
    return headers
