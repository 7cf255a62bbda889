class AssetProxyException(Exception):
    pass


class ConfigurationException(AssetProxyException):
    pass


class RoutingException(AssetProxyException):
    pass


class MissingTargetException(RoutingException):
    pass


class MalformedPathException(RoutingException):
    pass


class InvalidTargetException(AssetProxyException):
    pass


class UpstreamConnectionException(AssetProxyException):
    pass


class ProxyClientTimeoutException(UpstreamConnectionException):
    pass


class UpstreamStatusException(AssetProxyException):
    """Upstream answered, but with a status the target does not accept.

    The response is still open so the caller can relay it.
    """

    def __init__(self, message, response):
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code
