
# 商品查询/删除 + 归属校验

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from storehub.core.errors import AuthorizationError, NotFoundError
from storehub.db.model.product import Product
from storehub.db.model.user import User
from storehub.repository import product_repo, store_repo
from storehub.services.store_service import get_owned_store


logger = logging.getLogger(__name__)


def list_products(db: Session, user: User, store_id: Optional[uuid.UUID] = None) -> List[Product]:
    """指定 storeId 时先校验归属（不属于自己 → 404），否则列出自己所有店铺的商品"""
    if store_id is not None:
        store = get_owned_store(db, user, store_id)
        return product_repo.list_for_stores(db, [store.id])
    return product_repo.list_for_stores(db, store_repo.owned_store_ids(db, user.id))


def get_owned_product(db: Session, user: User, product_id: uuid.UUID) -> Product:
    """商品不存在 → 404；商品所属店铺不是自己的 → 401"""
    product = product_repo.get(db, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if product.store.user_id != user.id:
        logger.info("product.forbidden product_id=%s user_id=%s", product_id, user.id)
        raise AuthorizationError()
    return product


def delete_product(db: Session, user: User, product_id: uuid.UUID) -> None:
    product = get_owned_product(db, user, product_id)
    product_repo.delete(db, product)
    logger.info("product.deleted product_id=%s user_id=%s", product_id, user.id)
