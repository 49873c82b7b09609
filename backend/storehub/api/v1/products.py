# 商品相关接口 -> 前端商品页面调用（查询 / 编辑并推回店铺）

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Path, Query
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from storehub.api.deps import get_client_factory
from storehub.core.config import Settings
from storehub.core.errors import RemoteError
from storehub.db.model.product import Product
from storehub.db.model.store import StorePlatform
from storehub.db.model.user import User
from storehub.db.session import get_db
from storehub.integrations.shopify.payload_utils import MAX_PRICE
from storehub.services import product_service
from storehub.services.auth_service import get_current_user, get_settings
from storehub.services.product_sync.client import StoreClientFactory
from storehub.services.product_sync.exporter import MetafieldEditDTO, ProductEditDTO, apply_edit


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/products",
    tags=["products"],
    dependencies=[Depends(get_current_user)],
)


# ---------- Pydantic 模型（JSON 用 camelCase） ----------
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoreBrief(_CamelModel):
    name: str
    platform: StorePlatform


class VariantOut(_CamelModel):
    id: int
    remote_id: Optional[str] = None
    title: Optional[str] = None
    price: float
    compare_at_price: Optional[float] = None
    sku: Optional[str] = None
    inventory_quantity: Optional[int] = None
    option1: Optional[str] = None
    option2: Optional[str] = None
    option3: Optional[str] = None


class MetafieldOut(_CamelModel):
    id: int
    remote_id: Optional[str] = None
    namespace: str
    key: str
    value: str
    type: str


class ProductOut(_CamelModel):
    id: uuid.UUID
    remote_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    price: float
    compare_at_price: Optional[float] = None
    image: Optional[str] = None
    store_id: uuid.UUID
    store: StoreBrief
    variants: List[VariantOut] = []
    tags: List[str] = []
    metafields: List[MetafieldOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# edit 里的 metafield.id 是 Shopify metafield id（也接受 remoteId）
class MetafieldIn(_CamelModel):
    id: Optional[Union[str, int]] = Field(None, validation_alias=AliasChoices("id", "remoteId"))
    namespace: str = Field(..., max_length=255)
    key: str = Field(..., max_length=255)
    value: str
    type: str = Field(..., max_length=64)


class ProductUpdate(_CamelModel):
    title: Optional[str] = Field(None, max_length=512)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, le=float(MAX_PRICE), allow_inf_nan=False)
    tags: Optional[List[str]] = None
    metafields: Optional[List[MetafieldIn]] = None


# ---------- 工具 ----------
def _as_float(value) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def _build_product_out(product: Product) -> ProductOut:
    return ProductOut(
        id=product.id,
        remote_id=product.remote_id,
        title=product.title,
        description=product.description,
        price=_as_float(product.price) or 0.0,
        compare_at_price=_as_float(product.compare_at_price),
        image=product.image,
        store_id=product.store_id,
        store=StoreBrief(name=product.store.name, platform=product.store.platform),
        variants=[
            VariantOut(
                id=v.id,
                remote_id=v.remote_id,
                title=v.title,
                price=_as_float(v.price) or 0.0,
                compare_at_price=_as_float(v.compare_at_price),
                sku=v.sku,
                inventory_quantity=v.inventory_quantity,
                option1=v.option1,
                option2=v.option2,
                option3=v.option3,
            )
            for v in product.variants
        ],
        tags=[t.tag for t in product.tags],
        metafields=[
            MetafieldOut(id=m.id, remote_id=m.remote_id, namespace=m.namespace,
                         key=m.key, value=m.value, type=m.type)
            for m in product.metafields
        ],
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _to_edit_dto(body: ProductUpdate) -> ProductEditDTO:
    metafields = None
    if body.metafields is not None:
        metafields = [
            MetafieldEditDTO(
                id=str(mf.id) if mf.id not in (None, "") else None,
                namespace=mf.namespace,
                key=mf.key,
                value=mf.value,
                type=mf.type,
            )
            for mf in body.metafields
        ]
    return ProductEditDTO(
        title=body.title,
        description=body.description,
        price=Decimal(str(body.price)).quantize(Decimal("0.01")) if body.price is not None else None,
        tags=[t.strip() for t in body.tags if t.strip()] if body.tags is not None else None,
        metafields=metafields,
    )


# ---------- 路由 ----------
@router.get("", response_model=List[ProductOut])
def list_products(
    store_id: Optional[uuid.UUID] = Query(None, alias="storeId", description="只看某个店铺的商品"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    products = product_service.list_products(db, user, store_id)
    logger.info("products.list user_id=%s store_id=%s count=%s", user.id, store_id, len(products))
    return [_build_product_out(p) for p in products]


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: uuid.UUID = Path(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _build_product_out(product_service.get_owned_product(db, user, product_id))


'''
  编辑商品：先写本地，再推回 Shopify（仅 Shopify 店铺且有 remote id）
  推送失败时本地修改已提交，不回滚
'''
@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    body: ProductUpdate,
    product_id: uuid.UUID = Path(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    client_factory: StoreClientFactory = Depends(get_client_factory),
    cfg: Settings = Depends(get_settings),
):
    product = product_service.get_owned_product(db, user, product_id)
    try:
        updated = apply_edit(
            db, product, _to_edit_dto(body), client_factory,
            create_new_metafields=cfg.SHOPIFY_CREATE_NEW_METAFIELDS,
        )
    except RemoteError as e:
        raise RemoteError("Failed to update product", details=e.message) from e
    return _build_product_out(updated)


@router.delete("/{product_id}")
def delete_product(
    product_id: uuid.UUID = Path(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    product_service.delete_product(db, user, product_id)
    return {"success": True}
