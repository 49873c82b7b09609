# store database repository

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storehub.db.model.product import Product
from storehub.db.model.store import Store, StorePlatform


@dataclass(slots=True)
class StoreCreateDTO:
    name: str
    platform: StorePlatform
    store_url: str
    access_token: str


# ---------- Query ----------
def get_owned(db: Session, store_id: uuid.UUID, user_id: int) -> Optional[Store]:
    """只返回属于该用户的店铺；别人的店铺与不存在一样处理"""
    stmt = select(Store).where(Store.id == store_id, Store.user_id == user_id)
    return db.scalars(stmt).first()


def list_with_product_counts(db: Session, user_id: int) -> List[Tuple[Store, int]]:
    """用户的店铺（新的在前）+ 每个店铺的商品数"""
    counts = (
        select(Product.store_id, func.count(Product.id).label("product_count"))
        .group_by(Product.store_id)
        .subquery()
    )
    stmt = (
        select(Store, func.coalesce(counts.c.product_count, 0))
        .outerjoin(counts, counts.c.store_id == Store.id)
        .where(Store.user_id == user_id)
        .order_by(Store.created_at.desc())
    )
    return [(store, int(count)) for store, count in db.execute(stmt).all()]


def owned_store_ids(db: Session, user_id: int) -> List[uuid.UUID]:
    return list(db.scalars(select(Store.id).where(Store.user_id == user_id)))


def count_products(db: Session, store_id: uuid.UUID) -> int:
    stmt = select(func.count(Product.id)).where(Product.store_id == store_id)
    return int(db.scalar(stmt) or 0)


# ---------- Mutations ----------
def create(db: Session, user_id: int, dto: StoreCreateDTO) -> Store:
    store = Store(
        name=dto.name,
        platform=dto.platform,
        store_url=dto.store_url,
        access_token=dto.access_token,
        user_id=user_id,
    )
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


def delete(db: Session, store: Store) -> None:
    """ORM cascade 删除商品及子表；数据库外键也有 ON DELETE CASCADE 兜底"""
    db.delete(store)
    db.commit()
