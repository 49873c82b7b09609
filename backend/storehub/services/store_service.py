
# 店铺 CRUD：所有操作都按当前用户过滤，别人的店铺一律当作不存在（404）

from __future__ import annotations

import logging
import uuid
from typing import List, Tuple

from sqlalchemy.orm import Session

from storehub.core.errors import NotFoundError
from storehub.db.model.store import Store
from storehub.db.model.user import User
from storehub.repository import store_repo
from storehub.repository.store_repo import StoreCreateDTO


logger = logging.getLogger(__name__)


def create_store(db: Session, user: User, dto: StoreCreateDTO) -> Store:
    store = store_repo.create(db, user.id, dto)
    logger.info("store.created store_id=%s user_id=%s platform=%s", store.id, user.id, store.platform.value)
    return store


def list_stores(db: Session, user: User) -> List[Tuple[Store, int]]:
    return store_repo.list_with_product_counts(db, user.id)


def get_owned_store(db: Session, user: User, store_id: uuid.UUID) -> Store:
    store = store_repo.get_owned(db, store_id, user.id)
    if store is None:
        raise NotFoundError("Store not found")
    return store


def product_count(db: Session, store: Store) -> int:
    return store_repo.count_products(db, store.id)


def delete_store(db: Session, user: User, store_id: uuid.UUID) -> None:
    store = get_owned_store(db, user, store_id)
    store_repo.delete(db, store)
    logger.info("store.deleted store_id=%s user_id=%s", store_id, user.id)
