
"""
对外统一入口：从这里 import client / 异常，内部实现可自由演进。
"""

from .rest_client import ShopifyRestClient

from .errors import (
    ShopifyError, ShopifyHTTPError, ShopifyConnectionError, ShopifyPayloadError,
)


__all__ = [
    "ShopifyRestClient",
    "ShopifyError", "ShopifyHTTPError", "ShopifyConnectionError", "ShopifyPayloadError",
]
