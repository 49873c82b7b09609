"""
公共 fixture：
    - 每个测试一个 sqlite 内存库（create_app 里自动建表）
    - FakeStoreClient 代替 Shopify，记录所有调用
    - 已登录的 TestClient（Bearer token）
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from storehub.core.config import Settings
from storehub.core.security import create_access_token, get_password_hash
from storehub.db.model.store import Store, StorePlatform
from storehub.db.model.user import User
from storehub.infrastructure.locks import LocalStoreLock
from storehub.main import create_app
from storehub.repository import store_repo, user_repo
from storehub.repository.store_repo import StoreCreateDTO


TEST_PASSWORD = "s3cret-pass"


class FakeStoreClient:
    """内存里的假 Shopify：products / metafields 由测试预置，fail_on 里的操作直接抛异常"""

    def __init__(self) -> None:
        self.products: List[Dict[str, Any]] = []
        self.metafields: Dict[str, List[Dict[str, Any]]] = {}
        self.fail_on: Dict[str, Exception] = {}
        self.calls: List[tuple] = []
        self.closed = 0
        self._next_metafield_id = 9000

    def _record(self, op: str, *args) -> None:
        self.calls.append((op, *args))
        if op in self.fail_on:
            raise self.fail_on[op]

    def calls_for(self, op: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == op]

    # ---- StoreClient ----
    def fetch_products(self) -> List[Dict[str, Any]]:
        self._record("fetch_products")
        return copy.deepcopy(self.products)

    def fetch_metafields(self, product_remote_id):
        self._record("fetch_metafields", str(product_remote_id))
        return copy.deepcopy(self.metafields.get(str(product_remote_id), []))

    def update_product(self, product_remote_id, fields):
        self._record("update_product", str(product_remote_id), copy.deepcopy(fields))
        return {"product": {"id": product_remote_id, **fields}}

    def update_metafield(self, product_remote_id, metafield_remote_id, fields):
        self._record("update_metafield", str(product_remote_id), str(metafield_remote_id), copy.deepcopy(fields))
        return {"metafield": {"id": metafield_remote_id, **fields}}

    def create_metafield(self, product_remote_id, fields):
        self._record("create_metafield", str(product_remote_id), copy.deepcopy(fields))
        self._next_metafield_id += 1
        return {"id": self._next_metafield_id, **fields}

    def close(self) -> None:
        self.closed += 1


def make_remote_product(
    pid: int,
    title: str = "Remote product",
    *,
    price: Optional[str] = "10.00",
    tags: str = "",
    variant_ids: Optional[List[int]] = None,
    body_html: Optional[str] = "<p>desc</p>",
    image: Optional[str] = "https://cdn.example.com/a.jpg",
) -> Dict[str, Any]:
    """Shopify REST products.json 里单个商品的形状"""
    variant_ids = [pid * 10 + 1] if variant_ids is None else variant_ids
    variants = [
        {
            "id": vid,
            "title": f"Variant {i + 1}",
            "price": price,
            "compare_at_price": None,
            "sku": f"SKU-{vid}",
            "inventory_quantity": 5,
            "option1": "Default",
            "option2": None,
            "option3": None,
        }
        for i, vid in enumerate(variant_ids)
    ]
    return {
        "id": pid,
        "title": title,
        "body_html": body_html,
        "tags": tags,
        "variants": variants,
        "image": {"src": image} if image else None,
        "images": [],
    }


@pytest.fixture
def remote_product() -> Callable[..., Dict[str, Any]]:
    return make_remote_product


@pytest.fixture
def cfg() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key",
        BACKEND_CORS_ORIGINS="http://localhost:3000",
        LOG_LEVEL="WARNING",
        REDIS_URL=None,
    )


@pytest.fixture
def fake_client() -> FakeStoreClient:
    return FakeStoreClient()


@pytest.fixture
def client_factory(fake_client: FakeStoreClient):
    """记录每次为哪个店铺构造了 client"""
    built: List[Store] = []

    def _factory(store: Store) -> FakeStoreClient:
        built.append(store)
        return fake_client

    _factory.built = built  # type: ignore[attr-defined]
    return _factory


@pytest.fixture
def app(cfg: Settings, client_factory):
    return create_app(cfg, client_factory=client_factory, store_lock=LocalStoreLock(timeout=0.05))


@pytest.fixture
def session_factory(app):
    return app.state.session_factory


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def user(db: Session) -> User:
    return user_repo.create_user(db, "Owner@Example.com", get_password_hash(TEST_PASSWORD), name="Owner")


@pytest.fixture
def other_user(db: Session) -> User:
    return user_repo.create_user(db, "other@example.com", get_password_hash("other-pass"), name="Other")


@pytest.fixture
def make_store(db: Session) -> Callable[..., Store]:
    def _make(owner: User, *, name: str = "Demo", platform: StorePlatform = StorePlatform.SHOPIFY) -> Store:
        dto = StoreCreateDTO(
            name=name,
            platform=platform,
            store_url="https://demo.myshopify.com",
            access_token="shpat_test_token",
        )
        return store_repo.create(db, owner.id, dto)
    return _make


@pytest.fixture
def store(make_store, user: User) -> Store:
    return make_store(user)


def auth_headers(user: User, cfg: Settings) -> Dict[str, str]:
    token = create_access_token({"user_id": user.id, "email": user.email}, cfg=cfg)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def anon_client(app) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def api(app, user: User, cfg: Settings) -> Iterator[TestClient]:
    """以 user 身份登录的 client"""
    with TestClient(app, headers=auth_headers(user, cfg)) as c:
        yield c


@pytest.fixture
def client_for(app, cfg: Settings):
    """client_for(other_user) → 以任意用户身份登录的 client"""
    clients: List[TestClient] = []

    def _make(who: User) -> TestClient:
        c = TestClient(app, headers=auth_headers(who, cfg))
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()
