from assetproxy.proxy import AssetProxy

__all__ = ["AssetProxy"]
