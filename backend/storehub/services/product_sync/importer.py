
"""
全量导入：Shopify 商品 → 本地 Product/Variant/Tag/Metafield

流程（全部串行，在一个请求内完成）:
    1) fetch_products() 拉全部商品（client 内部翻页）
    2) 每个商品再拉一次 metafields（N 次请求，不做批量）
    3) 按 (store_id, remote_id) 查本地商品：不存在则新建，存在则原地更新 + 子集合整体替换
    4) 每个商品单独一个事务：失败时该商品不留半截数据；之前已提交的商品保留
    5) 并发导入撞唯一约束时回滚重试一次（第二次会走更新分支）

同一店铺的导入由 store lock 串行化。
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storehub.core.errors import ValidationError
from storehub.db.model.product import Product
from storehub.db.model.store import Store, StorePlatform
from storehub.integrations.shopify.payload_utils import remote_id
from storehub.repository import product_repo
from storehub.services.product_sync.client import StoreClient, StoreClientFactory
from storehub.services.product_sync.mapper import (
    apply_product_fields,
    metafields_from_remote,
    product_fields_from_remote,
    variants_from_remote,
)


logger = logging.getLogger(__name__)

_MAX_WRITE_ATTEMPTS = 2


def import_all(db: Session, store: Store, client: StoreClient) -> int:
    """导入店铺全部商品，返回处理的商品数。远端异常直接上抛（已提交的商品不回滚）"""
    started = time.perf_counter()
    store_id = store.id
    remote_products = client.fetch_products()
    logger.info("product_import.fetched store_id=%s remote_count=%s", store_id, len(remote_products))

    imported = created = 0
    for remote in remote_products:
        rid = remote_id(remote.get("id"))
        if not rid:
            logger.warning("product_import.skip_no_id store_id=%s title=%r", store_id, remote.get("title"))
            continue

        metafields = client.fetch_metafields(rid)
        if _write_product(db, store_id, rid, remote, metafields):
            created += 1
        imported += 1

    logger.info(
        "product_import.done store_id=%s imported=%s created=%s updated=%s elapsed_ms=%s",
        store_id, imported, created, imported - created, int((time.perf_counter() - started) * 1000),
    )
    return imported


def _write_product(db: Session, store_id, rid: str, remote: Dict[str, Any],
                   metafields: List[Dict[str, Any]]) -> bool:
    """单个商品的 查-写 放在一个事务里；返回是否新建"""
    for attempt in range(1, _MAX_WRITE_ATTEMPTS + 1):
        try:
            created = _upsert_product(db, store_id, rid, remote, metafields)
            db.commit()
            return created
        except IntegrityError:
            db.rollback()
            if attempt == _MAX_WRITE_ATTEMPTS:
                raise
            # 另一个导入刚插入了同一个 remote_id，重来一次会走更新分支
            logger.warning("product_import.race store_id=%s remote_id=%s attempt=%s", store_id, rid, attempt)
        except Exception:
            db.rollback()
            raise
    return False


def _upsert_product(db: Session, store_id, rid: str, remote: Dict[str, Any],
                    metafields: List[Dict[str, Any]]) -> bool:
    fields = product_fields_from_remote(remote)

    product = product_repo.get_by_remote_id(db, store_id, rid)
    created = product is None
    if created:
        product = Product(store_id=store_id)
        db.add(product)

    apply_product_fields(product, fields)
    # 子集合不做 diff：两次导入之间的本地修改会被覆盖
    product_repo.replace_variants(product, variants_from_remote(remote))
    product_repo.replace_tags(product, fields.tags)
    product_repo.replace_metafields(product, metafields_from_remote(metafields))

    db.flush()
    return created


def run_store_import(db: Session, store: Store, client_factory: StoreClientFactory, store_lock) -> int:
    """API 入口：平台校验 + 店铺级互斥 + client 生命周期"""
    if store.platform != StorePlatform.SHOPIFY:
        raise ValidationError("Only Shopify stores are supported currently")

    with store_lock.hold(str(store.id)):
        client = client_factory(store)
        try:
            return import_all(db, store, client)
        finally:
            client.close()
