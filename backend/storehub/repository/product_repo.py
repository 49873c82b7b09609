# product database repository

from __future__ import annotations

import uuid
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from storehub.db.model.product import Metafield, Product, ProductTag, Variant


# 列表/详情接口返回完整子集合，统一预加载，避免 N+1
_FULL_LOAD = (
    joinedload(Product.store),
    selectinload(Product.variants),
    selectinload(Product.tags),
    selectinload(Product.metafields),
)


# ---------- Query ----------
def get(db: Session, product_id: uuid.UUID) -> Optional[Product]:
    stmt = select(Product).options(*_FULL_LOAD).where(Product.id == product_id)
    return db.scalars(stmt).first()


def get_by_remote_id(db: Session, store_id: uuid.UUID, remote_id: str) -> Optional[Product]:
    stmt = select(Product).where(Product.store_id == store_id, Product.remote_id == remote_id)
    return db.scalars(stmt).first()


def list_for_stores(db: Session, store_ids: Sequence[uuid.UUID]) -> List[Product]:
    """商品列表（新的在前），限定在给定的店铺集合内"""
    if not store_ids:
        return []
    stmt = (
        select(Product)
        .options(*_FULL_LOAD)
        .where(Product.store_id.in_(list(store_ids)))
        .order_by(Product.created_at.desc())
    )
    return list(db.scalars(stmt).unique())


# ---------- 子集合整体替换（delete-then-insert）----------
def replace_variants(product: Product, variants: Iterable[Variant]) -> None:
    product.variants = list(variants)


def replace_tags(product: Product, tags: Iterable[str]) -> None:
    product.tags = [ProductTag(tag=t) for t in tags]


def replace_metafields(product: Product, metafields: Iterable[Metafield]) -> None:
    product.metafields = list(metafields)


# ---------- Mutations ----------
def delete(db: Session, product: Product) -> None:
    db.delete(product)
    db.commit()
