
"""
Shopify REST 商品 <-> 本地行 的字段映射（纯函数，不碰数据库/网络）

导入方向:
    product.title            -> Product.title
    product.body_html        -> Product.description
    variants[0].price        -> Product.price（缺失为 0）
    variants[0].compare_at_price -> Product.compare_at_price（缺失为 None）
    image.src / images[0].src -> Product.image
    tags "a, b,,c"           -> ["a", "b", "c"]

导出方向:
    本地 edit -> PUT products/{id}.json 的 product 字段（只放有变化的字段）
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from storehub.db.model.product import Metafield, Product, Variant
from storehub.integrations.shopify.payload_utils import (
    format_price,
    join_tags,
    normalize_price,
    normalize_tags,
    pick_image,
    remote_id,
    to_int,
)


@dataclass(slots=True)
class ProductFields:
    remote_id: str
    title: str
    description: Optional[str]
    price: Decimal
    compare_at_price: Optional[Decimal]
    image: Optional[str]
    tags: List[str] = field(default_factory=list)


# ---------- 导入方向 ----------
def product_fields_from_remote(remote: Dict[str, Any]) -> ProductFields:
    variants = remote.get("variants") or []
    first = variants[0] if variants else {}
    return ProductFields(
        remote_id=remote_id(remote.get("id")) or "",
        title=remote.get("title") or "",
        description=remote.get("body_html"),
        price=normalize_price(first.get("price")) or Decimal("0.00"),
        compare_at_price=normalize_price(first.get("compare_at_price")),
        image=pick_image(remote),
        tags=normalize_tags(remote.get("tags")),
    )


def variants_from_remote(remote: Dict[str, Any]) -> List[Variant]:
    rows: List[Variant] = []
    for v in remote.get("variants") or []:
        rows.append(Variant(
            remote_id=remote_id(v.get("id")),
            title=v.get("title"),
            price=normalize_price(v.get("price")) or Decimal("0.00"),
            compare_at_price=normalize_price(v.get("compare_at_price")),
            sku=v.get("sku") or None,
            inventory_quantity=to_int(v.get("inventory_quantity")),
            option1=v.get("option1"),
            option2=v.get("option2"),
            option3=v.get("option3"),
        ))
    return rows


def metafields_from_remote(metafields: List[Dict[str, Any]]) -> List[Metafield]:
    return [
        Metafield(
            remote_id=remote_id(mf.get("id")),
            namespace=mf.get("namespace") or "",
            key=mf.get("key") or "",
            value="" if mf.get("value") is None else str(mf.get("value")),
            type=mf.get("type") or "",
        )
        for mf in metafields
    ]


def apply_product_fields(product: Product, fields: ProductFields) -> None:
    product.remote_id = fields.remote_id
    product.title = fields.title
    product.description = fields.description
    product.price = fields.price
    product.compare_at_price = fields.compare_at_price
    product.image = fields.image


# ---------- 导出方向 ----------
def build_remote_product_patch(
    product: Product,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
    price_changed: bool = False,
) -> Dict[str, Any]:
    """
    只包含本次 edit 里出现的字段；价格变化时带上全部变体的新价格。
    """
    patch: Dict[str, Any] = {}
    if title is not None:
        patch["title"] = title
    if description is not None:
        patch["body_html"] = description
    if tags is not None:
        patch["tags"] = join_tags(tags)
    if price_changed:
        patch["variants"] = [_variant_price_payload(v) for v in product.variants if v.remote_id]
    return patch


def _variant_price_payload(variant: Variant) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"id": variant.remote_id, "price": format_price(variant.price)}
    if variant.compare_at_price:
        payload["compare_at_price"] = format_price(variant.compare_at_price)
    return payload


def metafield_payload(*, namespace: str, key: str, value: str, type: str, id: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"namespace": namespace, "key": key, "value": value, "type": type}
    if id:
        payload["id"] = id
    return payload
