
from __future__ import annotations
import enum
import uuid
from typing import List, TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from storehub.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from storehub.db.model.product import Product
    from storehub.db.model.user import User


class StorePlatform(str, enum.Enum):
    SHOPIFY = "SHOPIFY"
    WOOCOMMERCE = "WOOCOMMERCE"
    MAGENTO = "MAGENTO"
    CUSTOM = "CUSTOM"


"""
  已连接的外部店铺（Shopify 等），属于唯一一个用户
  删除店铺 → 级联删除商品及其变体/标签/metafield
"""
class Store(TimestampMixin, Base):

    __tablename__ = "stores"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name:     Mapped[str]           = mapped_column(String(255), nullable=False)
    platform: Mapped[StorePlatform] = mapped_column(
        Enum(StorePlatform, name="store_platform", native_enum=False, length=32),
        nullable=False,
    )
    store_url:    Mapped[str] = mapped_column(String(512), nullable=False)   # 原样保存，client 里再去掉协议/尾斜杠
    access_token: Mapped[str] = mapped_column(Text, nullable=False)          # 平台 Admin API token，不对外返回

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    owner:    Mapped["User"]          = relationship(back_populates="stores")
    products: Mapped[List["Product"]] = relationship(
        back_populates="store",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_stores_user_created", "user_id", "created_at"),
    )
