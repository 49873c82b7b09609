
from __future__ import annotations
from decimal import Decimal
import uuid
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import (
    ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from storehub.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from storehub.db.model.store import Store


"""
  商品主表
  remote_id = 平台分配的商品 ID（手工创建的本地商品为空）
  (store_id, remote_id) 唯一：并发导入时由数据库兜底，不会出现重复商品
"""
class Product(TimestampMixin, Base):

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("stores.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    remote_id: Mapped[Optional[str]] = mapped_column(String(64))

    title:       Mapped[str]           = mapped_column(String(512), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)            # = Shopify body_html
    image:       Mapped[Optional[str]] = mapped_column(Text)

    # 商品级价格取第一个变体
    price:            Mapped[Decimal]           = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    compare_at_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))

    store: Mapped["Store"] = relationship(back_populates="products")

    # 子集合整体替换：赋新列表即可，旧行由 delete-orphan 删除
    variants: Mapped[List["Variant"]] = relationship(
        back_populates="product", cascade="all, delete-orphan", order_by="Variant.id",
    )
    tags: Mapped[List["ProductTag"]] = relationship(
        back_populates="product", cascade="all, delete-orphan", order_by="ProductTag.id",
    )
    metafields: Mapped[List["Metafield"]] = relationship(
        back_populates="product", cascade="all, delete-orphan", order_by="Metafield.id",
    )

    __table_args__ = (
        UniqueConstraint("store_id", "remote_id", name="ux_products_store_remote"),
        Index("ix_products_store_created", "store_id", "created_at"),
    )


class Variant(Base):

    __tablename__ = "product_variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    remote_id: Mapped[Optional[str]] = mapped_column(String(64))

    title:              Mapped[Optional[str]]     = mapped_column(String(255))
    price:              Mapped[Decimal]           = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    compare_at_price:   Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    sku:                Mapped[Optional[str]]     = mapped_column(String(255))
    inventory_quantity: Mapped[Optional[int]]     = mapped_column(Integer)
    option1:            Mapped[Optional[str]]     = mapped_column(String(255))
    option2:            Mapped[Optional[str]]     = mapped_column(String(255))
    option3:            Mapped[Optional[str]]     = mapped_column(String(255))

    product: Mapped["Product"] = relationship(back_populates="variants")


class ProductTag(Base):

    __tablename__ = "product_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    tag: Mapped[str] = mapped_column(String(255), nullable=False)

    product: Mapped["Product"] = relationship(back_populates="tags")


class Metafield(Base):

    __tablename__ = "product_metafields"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    remote_id: Mapped[Optional[str]] = mapped_column(String(64))   # 本地新增、尚未推送的为空

    namespace: Mapped[str] = mapped_column(String(255), nullable=False)
    key:       Mapped[str] = mapped_column(String(255), nullable=False)
    value:     Mapped[str] = mapped_column(Text, nullable=False)
    type:      Mapped[str] = mapped_column(String(64), nullable=False)

    product: Mapped["Product"] = relationship(back_populates="metafields")
