import typing
from dataclasses import dataclass
from starlette.datastructures import MutableHeaders


@dataclass(frozen=True)
class ProxyTarget:
    resolved_url: str
    is_asset_request: bool
    asset_path: str = ""

    def accepts_status(self, status_code: int) -> bool:
        if 200 <= status_code < 300:
            return True
        # Explicit callers get upstream 404s relayed as-is
        return not self.is_asset_request and status_code == 404


@dataclass
class ProxyRequest:
    url: str
    headers: MutableHeaders


@dataclass
class ProxyResponse:
    status_code: int
    headers: MutableHeaders
    body: typing.AsyncIterator[bytes]
