import os

from assetproxy.exceptions import ConfigurationException


class ConfigManager:
    PROXY_PATH = "/proxy"
    PROXY_MAX_REDIRECTS = 5

    def __init__(self):
        self.PORT: int = int(os.environ.get("PORT", 3000))
        self.ASSET_ORIGIN: str = os.environ.get("ASSET_ORIGIN", "")
        self.PROXY_CLIENT_TIMEOUT_SECS: float = float(
            os.environ.get("PROXY_CLIENT_TIMEOUT_SECS", 60)
        )

    @property
    def asset_origin(self) -> str:
        return self.ASSET_ORIGIN.rstrip("/")

    def validate(self):
        origin = self.asset_origin
        if not origin:
            raise ConfigurationException("ASSET_ORIGIN is not set.")
        if not origin.startswith(("http://", "https://")):
            raise ConfigurationException(
                f"ASSET_ORIGIN must be an absolute http(s) URL: '{origin}'"
            )
