from urllib.parse import unquote

from assetproxy.datastructures import ProxyTarget
from assetproxy.exceptions import MalformedPathException, MissingTargetException


def classify_explicit(url: str | None) -> ProxyTarget:
    """Target for ``/proxy?url=...``. The URL itself is not validated."""
    if not url:
        raise MissingTargetException("Missing target URL.")
    return ProxyTarget(resolved_url=url, is_asset_request=False)


def normalize_asset_path(raw_path: str) -> str:
    return "/" + unquote(raw_path).lstrip("/")


def looks_like_proxy_path(path: str, proxy_path: str) -> bool:
    return (
        path == proxy_path
        or path.startswith(proxy_path + "?")
        or path.startswith(proxy_path + "/")
    )


def classify_asset(raw_path: str, asset_origin: str, proxy_path: str = "/proxy") -> ProxyTarget:
    """Map any other request path onto the asset origin.

    ``/`` is forwarded as the origin root. A path that decodes back into the
    proxy route is refused rather than fetched from the asset origin.
    """
    asset_path = normalize_asset_path(raw_path)
    if looks_like_proxy_path(asset_path, proxy_path):
        raise MalformedPathException(f"Asset path resolves to the proxy route: {asset_path}")

    return ProxyTarget(
        resolved_url=asset_origin.rstrip("/") + asset_path,
        is_asset_request=True,
        asset_path=asset_path,
    )

