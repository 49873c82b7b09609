
"""
本地编辑 → 写库 → 推回 Shopify

本地写库（一个事务）:
    - title / description / price 有值才改
    - price 有值时同步到该商品的 **所有** 变体（不支持单变体改价）
    - tags / metafields 有值时整体替换

推送 Shopify（仅 SHOPIFY 店铺且商品有 remote_id）:
    - PUT products/{id}.json：只带本次出现的字段；价格变化时带全部变体价格
    - 每个带 remote id 的 metafield 单独 PUT 一次
    - 没有 remote id 的 metafield 默认只存本地；
      开启 SHOPIFY_CREATE_NEW_METAFIELDS 后改为 POST 新建，每建成一个立即提交回写的 remote id

远端失败时本地已提交的修改不回滚（两边会不一致），异常上抛给 handler。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from storehub.db.model.product import Metafield, Product
from storehub.db.model.store import StorePlatform
from storehub.repository import product_repo
from storehub.services.product_sync.client import StoreClientFactory
from storehub.services.product_sync.mapper import build_remote_product_patch, metafield_payload


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MetafieldEditDTO:
    namespace: str
    key: str
    value: str
    type: str
    id: Optional[str] = None     # Shopify metafield id；本地新增的为空


@dataclass(slots=True)
class ProductEditDTO:
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    tags: Optional[List[str]] = None
    metafields: Optional[List[MetafieldEditDTO]] = None


def apply_edit(
    db: Session,
    product: Product,
    edit: ProductEditDTO,
    client_factory: StoreClientFactory,
    *,
    create_new_metafields: bool = False,
) -> Product:
    new_metafield_rows = _apply_local(db, product, edit)

    store = product.store
    if store.platform != StorePlatform.SHOPIFY or not product.remote_id:
        logger.info("product_edit.local_only product_id=%s platform=%s remote_id=%s",
                    product.id, store.platform.value, product.remote_id)
        return product_repo.get(db, product.id)

    _push_remote(db, product, edit, new_metafield_rows, client_factory, create_new_metafields)
    return product_repo.get(db, product.id)


def _apply_local(db: Session, product: Product, edit: ProductEditDTO) -> List[Metafield]:
    """本地写库；返回本次新写入的 metafield 行（与 edit.metafields 一一对应）"""
    rows: List[Metafield] = []
    try:
        if edit.title is not None:
            product.title = edit.title
        if edit.description is not None:
            product.description = edit.description
        if edit.price is not None:
            product.price = edit.price
            for variant in product.variants:
                variant.price = edit.price
        if edit.tags is not None:
            product_repo.replace_tags(product, edit.tags)
        if edit.metafields is not None:
            rows = [
                Metafield(remote_id=mf.id or None, namespace=mf.namespace, key=mf.key,
                          value=mf.value, type=mf.type)
                for mf in edit.metafields
            ]
            product_repo.replace_metafields(product, rows)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("product_edit.saved product_id=%s fields=%s", product.id, _edited_fields(edit))
    return rows


def _push_remote(
    db: Session,
    product: Product,
    edit: ProductEditDTO,
    new_rows: List[Metafield],
    client_factory: StoreClientFactory,
    create_new_metafields: bool,
) -> None:
    client = client_factory(product.store)
    try:
        patch = build_remote_product_patch(
            product,
            title=edit.title,
            description=edit.description,
            tags=edit.tags,
            price_changed=edit.price is not None,
        )
        if patch:
            client.update_product(product.remote_id, patch)
        else:
            logger.info("product_edit.remote_patch_empty product_id=%s", product.id)

        for mf, row in zip(edit.metafields or [], new_rows):
            payload = metafield_payload(namespace=mf.namespace, key=mf.key, value=mf.value, type=mf.type, id=mf.id)
            if mf.id:
                client.update_metafield(product.remote_id, mf.id, payload)
            elif create_new_metafields:
                remote = client.create_metafield(product.remote_id, payload)
                if remote.get("id") is not None:
                    # 远端已建好：立即写回 id，后面的请求失败也不会重复新建
                    row.remote_id = str(remote["id"])
                    db.commit()
            else:
                logger.info("product_edit.metafield_local_only product_id=%s namespace=%s key=%s",
                            product.id, mf.namespace, mf.key)
    finally:
        client.close()

    logger.info("product_edit.pushed product_id=%s remote_id=%s", product.id, product.remote_id)


def _edited_fields(edit: ProductEditDTO) -> List[str]:
    return [name for name in ("title", "description", "price", "tags", "metafields")
            if getattr(edit, name) is not None]
