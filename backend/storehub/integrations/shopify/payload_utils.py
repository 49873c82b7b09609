from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional


# 价格列是 Numeric(10, 2)
MAX_PRICE = Decimal("99999999.99")

def normalize_shop_domain(store_url: str) -> str:
    """
    店铺 URL → 纯域名：去掉协议和末尾斜杠
      https://demo.myshopify.com/  → demo.myshopify.com
    """
    value = (store_url or "").strip()
    for scheme in ("https://", "http://"):
        if value.lower().startswith(scheme):
            value = value[len(scheme):]
            break
    return value.rstrip("/")


def normalize_tags(value: Any) -> List[str]:
    """
    Shopify REST 的 tags 是逗号拼接字符串："a, b,,c" → ["a", "b", "c"]
    兼容 list[str]；None / 其它类型 → []
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if isinstance(v, str) and str(v).strip()]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def join_tags(tags: List[str]) -> str:
    return ", ".join(tags)


def normalize_price(value: Any) -> Decimal | None:
    """
    Shopify 价格是字符串（"19.99"），转 Decimal 保留两位；
    空值 / 非法值 / 超出 Numeric(10, 2) 的值返回 None
    """
    if value is None or value == "":
        return None
    try:
        price = Decimal(str(value).strip())
        if not price.is_finite():
            return None
        price = price.quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if abs(price) > MAX_PRICE:
        return None
    return price


def format_price(value: Decimal | float | None) -> Optional[str]:
    """本地价格 → Shopify 需要的字符串格式"""
    if value is None:
        return None
    return f"{Decimal(str(value)).quantize(Decimal('0.01'))}"


def pick_image(product: Dict[str, Any]) -> Optional[str]:
    """主图：image.src 优先，否则 images[0].src"""
    image = product.get("image") or {}
    if isinstance(image, dict) and image.get("src"):
        return image["src"]
    images = product.get("images") or []
    if images and isinstance(images[0], dict):
        return images[0].get("src") or None
    return None


def remote_id(value: Any) -> Optional[str]:
    """Shopify 的数字 ID 统一存成字符串"""
    if value is None or value == "":
        return None
    return str(value)


def to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
