
"""面向 Admin REST API 的轻量 Client：商品 / metafield 的读写，每个店铺一个实例"""
from __future__ import annotations

import logging, time
from typing import Any, Dict, List, Optional

import requests
from requests import RequestException

from storehub.core.config import Settings, settings as default_settings
from storehub.core.logging import mask_token
from storehub.integrations.shopify.errors import (
    ShopifyConnectionError,
    ShopifyHTTPError,
    ShopifyPayloadError,
)
from storehub.integrations.shopify.payload_utils import normalize_shop_domain


logger = logging.getLogger(__name__)


class ShopifyRestClient:

    '''
    每次调用都是一次独立的 HTTP 请求：
        - 非 2xx / 网络异常 → ShopifyError（RemoteError 子类），不重试、不退避
        - 只发送调用方给出的字段
        - products.json 按 Link 头 rel="next" 翻页，最多 SHOPIFY_MAX_PAGES 页
    '''
    def __init__(
        self,
        store_url: str,
        access_token: str,
        *,
        cfg: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        cfg = cfg or default_settings
        self.shop = normalize_shop_domain(store_url)
        self.access_token = access_token
        self.api_version = cfg.SHOPIFY_API_VERSION
        self.timeout = cfg.SHOPIFY_HTTP_TIMEOUT
        self.page_limit = cfg.SHOPIFY_PAGE_LIMIT
        self.max_pages = cfg.SHOPIFY_MAX_PAGES
        self._session = session or requests.Session()


    # ---------- Public ----------
    def fetch_products(self) -> List[Dict[str, Any]]:
        """拉取全部商品（含 variants / tags / image / images）"""
        products: List[Dict[str, Any]] = []
        url: Optional[str] = self._url("products.json")
        params: Optional[dict] = {"limit": self.page_limit}

        for page in range(1, self.max_pages + 1):
            resp = self._request("GET", url, params=params, op_name="products.list")
            data = self._as_json(resp, op_name="products.list")
            batch = data.get("products")
            if not isinstance(batch, list):
                raise ShopifyPayloadError("products.json response missing 'products' list")
            products.extend(batch)

            # 下一页的 URL 已带 page_info/limit，不能再拼其它参数
            url = (resp.links or {}).get("next", {}).get("url")
            params = None
            if not url:
                break
        else:
            logger.warning("shopify.rest.page_cap shop=%s pages=%s products=%s",
                           self.shop, self.max_pages, len(products))

        logger.info("shopify.rest.products_fetched shop=%s count=%s", self.shop, len(products))
        return products


    def fetch_metafields(self, product_remote_id: str | int) -> List[Dict[str, Any]]:
        path = f"products/{product_remote_id}/metafields.json"
        resp = self._request("GET", self._url(path), op_name="metafields.list")
        data = self._as_json(resp, op_name="metafields.list")
        return list(data.get("metafields") or [])


    def update_product(self, product_remote_id: str | int, fields: Dict[str, Any]) -> Dict[str, Any]:
        # 只发送出现的字段，None 视为未设置
        body = {"product": {k: v for k, v in fields.items() if v is not None}}
        resp = self._request("PUT", self._url(f"products/{product_remote_id}.json"),
                             json=body, op_name="product.update")
        return self._as_json(resp, op_name="product.update")


    def update_metafield(
        self,
        product_remote_id: str | int,
        metafield_remote_id: str | int,
        fields: Dict[str, Any],
    ) -> Dict[str, Any]:
        body = {"metafield": {k: v for k, v in fields.items() if v is not None}}
        path = f"products/{product_remote_id}/metafields/{metafield_remote_id}.json"
        resp = self._request("PUT", self._url(path), json=body, op_name="metafield.update")
        return self._as_json(resp, op_name="metafield.update")


    def create_metafield(self, product_remote_id: str | int, fields: Dict[str, Any]) -> Dict[str, Any]:
        """新建 metafield，返回 Shopify 分配了 id 的 metafield 对象"""
        body = {"metafield": {k: v for k, v in fields.items() if v is not None}}
        path = f"products/{product_remote_id}/metafields.json"
        resp = self._request("POST", self._url(path), json=body, op_name="metafield.create")
        data = self._as_json(resp, op_name="metafield.create")
        metafield = data.get("metafield")
        if not isinstance(metafield, dict):
            raise ShopifyPayloadError("metafield create response missing 'metafield'")
        return metafield


    def close(self) -> None:
        self._session.close()


    # ---------- Internals ----------
    def _url(self, path: str) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}/{path.lstrip('/')}"


    def _headers(self) -> dict:
        return {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }


    def _request(self, method: str, url: str, *, op_name: str, **kwargs) -> requests.Response:
        start = time.perf_counter()
        try:
            resp = self._session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except RequestException as e:
            latency_ms = int((time.perf_counter() - start) * 1000)
            logger.warning("shopify.rest.request_exception op=%s shop=%s latency_ms=%s err=%s",
                           op_name, self.shop, latency_ms, type(e).__name__)
            raise ShopifyConnectionError(f"Shopify request failed ({op_name}): {e}") from e

        latency_ms = int((time.perf_counter() - start) * 1000)
        if not 200 <= resp.status_code < 300:
            logger.warning("shopify.rest.http_error op=%s shop=%s status=%s latency_ms=%s token=%s",
                           op_name, self.shop, resp.status_code, latency_ms, mask_token(self.access_token))
            raise ShopifyHTTPError(method, url.split("/admin/api/", 1)[-1], resp.status_code, resp.text)

        logger.info("shopify.rest.ok op=%s shop=%s status=%s latency_ms=%s",
                    op_name, self.shop, resp.status_code, latency_ms)
        return resp


    def _as_json(self, resp: requests.Response, *, op_name: str) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            text = (resp.text or "")[:300]
            raise ShopifyPayloadError(f"non-JSON response ({op_name}, status={resp.status_code}): {text}") from e
        if not isinstance(data, dict):
            raise ShopifyPayloadError(f"unexpected JSON payload ({op_name}): {type(data).__name__}")
        return data
