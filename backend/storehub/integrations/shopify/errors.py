
"""
   Shopify REST 集成层专用异常类型。
   全部继承 RemoteError：上层只需要 except RemoteError，HTTP 映射为 500 + 简短信息。
"""

from __future__ import annotations
from typing import Optional

from storehub.core.errors import RemoteError


class ShopifyError(RemoteError):
    """Base for all Shopify REST errors."""


class ShopifyHTTPError(ShopifyError):
    """Non-2xx response."""

    def __init__(self, method: str, path: str, status_code: int, body: Optional[str] = None) -> None:
        self.method = method
        self.path = path
        self.remote_status = status_code   # status_code 已用于 HTTP 映射
        self.body = (body or "")[:300]   # 截断，避免日志/响应过大
        super().__init__(f"HTTP error! status: {status_code} ({method} {path})")


class ShopifyConnectionError(ShopifyError):
    """Network/timeout failure before any response arrived."""


class ShopifyPayloadError(ShopifyError):
    """2xx response whose body is not the expected JSON shape."""
