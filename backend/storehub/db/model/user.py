
from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from storehub.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from storehub.db.model.store import Store


class User(TimestampMixin, Base):

    __tablename__ = "users"

    id:    Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    name:  Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))

    # 删除用户时连带删除其店铺（店铺再级联商品）
    stores: Mapped[List["Store"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
    )
