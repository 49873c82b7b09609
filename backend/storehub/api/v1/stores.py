# 店铺相关接口 -> 前端店铺页面调用

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Path, status
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from storehub.api.deps import get_client_factory, get_store_lock
from storehub.core.errors import RemoteError
from storehub.db.model.store import Store, StorePlatform
from storehub.db.model.user import User
from storehub.db.session import get_db
from storehub.repository.store_repo import StoreCreateDTO
from storehub.services import store_service
from storehub.services.auth_service import get_current_user
from storehub.services.product_sync.client import StoreClientFactory
from storehub.services.product_sync.importer import run_store_import


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/stores",
    tags=["stores"],
    dependencies=[Depends(get_current_user)],
)


# ---------- Pydantic 模型（JSON 用 camelCase） ----------
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoreCreate(_CamelModel):
    name: str = Field(min_length=1, max_length=255)
    platform: StorePlatform
    store_url: AnyHttpUrl
    access_token: str = Field(min_length=1)


# access_token 只写不读，响应里不返回
class StoreOut(_CamelModel):
    id: uuid.UUID
    name: str
    platform: StorePlatform
    store_url: str
    user_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StoreWithCount(StoreOut):
    product_count: int = 0


class ImportResult(_CamelModel):
    success: bool
    imported_count: int
    message: str


def _store_out(store: Store, cls=StoreOut, **extra) -> StoreOut:
    return cls(
        id=store.id,
        name=store.name,
        platform=store.platform,
        store_url=store.store_url,
        user_id=store.user_id,
        created_at=store.created_at,
        updated_at=store.updated_at,
        **extra,
    )


@router.post("", response_model=StoreOut, status_code=status.HTTP_201_CREATED)
def create_store(
    body: StoreCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    dto = StoreCreateDTO(
        name=body.name.strip(),
        platform=body.platform,
        store_url=str(body.store_url),
        access_token=body.access_token,
    )
    return _store_out(store_service.create_store(db, user, dto))


@router.get("", response_model=List[StoreWithCount])
def list_stores(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    rows = store_service.list_stores(db, user)
    return [_store_out(store, StoreWithCount, product_count=count) for store, count in rows]


@router.get("/{store_id}", response_model=StoreWithCount)
def get_store(
    store_id: uuid.UUID = Path(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    store = store_service.get_owned_store(db, user, store_id)
    return _store_out(store, StoreWithCount, product_count=store_service.product_count(db, store))


@router.delete("/{store_id}")
def delete_store(
    store_id: uuid.UUID = Path(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    store_service.delete_store(db, user, store_id)
    return {"success": True}


'''
  触发全量导入（仅 Shopify）
  同一店铺的导入串行执行；等锁超时返回 409
'''
@router.post("/{store_id}/import-products", response_model=ImportResult)
def import_products(
    store_id: uuid.UUID = Path(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    client_factory: StoreClientFactory = Depends(get_client_factory),
    store_lock=Depends(get_store_lock),
):
    store = store_service.get_owned_store(db, user, store_id)
    logger.info("products.import.start store_id=%s user_id=%s", store_id, user.id)

    try:
        imported = run_store_import(db, store, client_factory, store_lock)
    except RemoteError as e:
        raise RemoteError("Failed to import products", details=e.message) from e

    return ImportResult(
        success=True,
        imported_count=imported,
        message=f"Successfully imported {imported} products",
    )
