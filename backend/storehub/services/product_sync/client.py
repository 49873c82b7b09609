
# 同步服务依赖的远端店铺 client 协议 + 默认工厂
# 工厂挂在 app.state 上，测试里替换成假 client

from __future__ import annotations
from typing import Any, Callable, Dict, List, Protocol

from storehub.core.config import Settings
from storehub.db.model.store import Store
from storehub.integrations.shopify import ShopifyRestClient


class StoreClient(Protocol):

    def fetch_products(self) -> List[Dict[str, Any]]: ...

    def fetch_metafields(self, product_remote_id: str) -> List[Dict[str, Any]]: ...

    def update_product(self, product_remote_id: str, fields: Dict[str, Any]) -> Dict[str, Any]: ...

    def update_metafield(self, product_remote_id: str, metafield_remote_id: str,
                         fields: Dict[str, Any]) -> Dict[str, Any]: ...

    def create_metafield(self, product_remote_id: str, fields: Dict[str, Any]) -> Dict[str, Any]: ...

    def close(self) -> None: ...


StoreClientFactory = Callable[[Store], StoreClient]


def shopify_client_factory(cfg: Settings) -> StoreClientFactory:
    def _build(store: Store) -> StoreClient:
        return ShopifyRestClient(store.store_url, store.access_token, cfg=cfg)
    return _build
