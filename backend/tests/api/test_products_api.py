from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from storehub.db.model.product import Product, Variant
from storehub.integrations.shopify import ShopifyHTTPError
from storehub.repository import product_repo
from storehub.services.product_sync.importer import import_all


@pytest.fixture
def imported(db, store, fake_client, remote_product):
    """店铺里导入两个商品：1 号较旧，2 号较新"""
    fake_client.products = [
        remote_product(1, "Old chair", price="10.00", tags="wood", variant_ids=[11, 12]),
        remote_product(2, "New lamp", price="25.50", tags="light, sale"),
    ]
    fake_client.metafields = {"1": [
        {"id": 501, "namespace": "custom", "key": "material", "value": "oak", "type": "single_line_text_field"},
    ]}
    import_all(db, store, fake_client)
    older = product_repo.get_by_remote_id(db, store.id, "1")
    older.created_at = datetime.now(timezone.utc) - timedelta(hours=1)
    db.commit()
    fake_client.calls.clear()
    return {p.remote_id: p for p in product_repo.list_for_stores(db, [store.id])}


def test_list_products_newest_first_with_children(api, imported):
    resp = api.get("/api/v1/products")

    assert resp.status_code == 200
    items = resp.json()
    assert [p["title"] for p in items] == ["New lamp", "Old chair"]

    chair = items[1]
    assert chair["remoteId"] == "1"
    assert chair["price"] == 10.0
    assert chair["store"] == {"name": "Demo", "platform": "SHOPIFY"}
    assert [v["remoteId"] for v in chair["variants"]] == ["11", "12"]
    assert chair["tags"] == ["wood"]
    assert chair["metafields"][0]["remoteId"] == "501"
    assert chair["metafields"][0]["value"] == "oak"


def test_list_products_scoped_to_store(api, user, make_store, imported, fake_client, remote_product, db):
    second = make_store(user, name="Second")
    fake_client.products = [remote_product(9, "Only here")]
    import_all(db, second, fake_client)

    resp = api.get("/api/v1/products", params={"storeId": str(second.id)})

    assert resp.status_code == 200
    assert [p["title"] for p in resp.json()] == ["Only here"]
    assert len(api.get("/api/v1/products").json()) == 3


def test_list_products_for_other_users_store_is_404(api, other_user, make_store):
    theirs = make_store(other_user)

    resp = api.get("/api/v1/products", params={"storeId": str(theirs.id)})

    assert resp.status_code == 404


def test_other_users_products_are_not_listed(client_for, other_user, imported):
    resp = client_for(other_user).get("/api/v1/products")

    assert resp.status_code == 200
    assert resp.json() == []


def test_get_product(api, imported):
    lamp = imported["2"]

    resp = api.get(f"/api/v1/products/{lamp.id}")

    assert resp.status_code == 200
    assert resp.json()["tags"] == ["light", "sale"]
    assert resp.json()["price"] == 25.5


# 未登录的 PUT：401，且本地和远端都没有任何修改
def test_update_requires_auth(anon_client, imported, session_factory, fake_client):
    chair = imported["1"]

    resp = anon_client.put(f"/api/v1/products/{chair.id}", json={"title": "Hacked"})

    assert resp.status_code == 401
    with session_factory() as s:
        assert s.get(Product, chair.id).title == "Old chair"
    assert fake_client.calls == []


def test_update_missing_product_is_404(api):
    resp = api.put(f"/api/v1/products/{uuid.uuid4()}", json={"title": "X"})

    assert resp.status_code == 404
    assert resp.json() == {"error": "Product not found"}


# 商品存在但店铺不是自己的 → 401
def test_update_other_users_product_is_401(client_for, other_user, imported, fake_client):
    resp = client_for(other_user).put(f"/api/v1/products/{imported['1'].id}", json={"title": "Mine now"})

    assert resp.status_code == 401
    assert fake_client.calls == []


def test_update_with_invalid_body_is_400(api, imported, fake_client):
    resp = api.put(f"/api/v1/products/{imported['1'].id}", json={"price": -1, "tags": "not-a-list"})

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid data"
    assert {tuple(d["path"]) for d in body["details"]} >= {("price",), ("tags",)}
    assert fake_client.calls == []


# 改价 19.99：所有变体同步，响应里是更新后的商品
def test_update_price_propagates_to_variants(api, imported, fake_client, session_factory):
    chair = imported["1"]

    resp = api.put(f"/api/v1/products/{chair.id}", json={"price": 19.99, "title": "Chair v2"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Chair v2"
    assert body["price"] == 19.99
    assert [v["price"] for v in body["variants"]] == [19.99, 19.99]

    with session_factory() as s:
        prices = s.scalars(select(Variant.price).where(Variant.product_id == chair.id)).all()
    assert [float(p) for p in prices] == [19.99, 19.99]

    (_, remote_id, fields), = fake_client.calls_for("update_product")
    assert remote_id == "1"
    assert fields["title"] == "Chair v2"
    assert [v["price"] for v in fields["variants"]] == ["19.99", "19.99"]


# 新 metafield（没有 id）：本地保存，不调用任何 metafield 更新
def test_update_with_new_metafield_is_local_only(api, imported, fake_client):
    chair = imported["1"]
    payload = {"metafields": [
        {"namespace": "custom", "key": "color", "value": "red", "type": "single_line_text_field"},
    ]}

    resp = api.put(f"/api/v1/products/{chair.id}", json=payload)

    assert resp.status_code == 200
    assert [(m["key"], m["remoteId"]) for m in resp.json()["metafields"]] == [("color", None)]
    assert fake_client.calls_for("update_metafield") == []
    assert fake_client.calls_for("create_metafield") == []


# metafield.id（数字或字符串）是 Shopify 的 metafield id
def test_update_existing_metafield_by_remote_id(api, imported, fake_client):
    chair = imported["1"]
    payload = {"metafields": [
        {"id": 501, "namespace": "custom", "key": "material", "value": "pine", "type": "single_line_text_field"},
    ]}

    resp = api.put(f"/api/v1/products/{chair.id}", json=payload)

    assert resp.status_code == 200
    assert resp.json()["metafields"][0]["value"] == "pine"
    (_, _, metafield_id, fields), = fake_client.calls_for("update_metafield")
    assert metafield_id == "501"
    assert fields["value"] == "pine"


def test_update_remote_failure_is_500_and_keeps_local_edit(api, imported, fake_client, session_factory):
    chair = imported["1"]
    fake_client.fail_on["update_product"] = ShopifyHTTPError("PUT", "products/1.json", 422, "bad")

    resp = api.put(f"/api/v1/products/{chair.id}", json={"title": "Diverged"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to update product"
    with session_factory() as s:
        assert s.get(Product, chair.id).title == "Diverged"


def test_delete_product(api, imported, session_factory):
    chair = imported["1"]

    resp = api.delete(f"/api/v1/products/{chair.id}")

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    with session_factory() as s:
        assert s.get(Product, chair.id) is None
        assert s.scalar(select(func.count()).select_from(Variant).where(Variant.product_id == chair.id)) == 0


# 超出价格列范围 / 过长标题：400，不写库也不推送
@pytest.mark.parametrize("payload, path", [
    ({"price": 1e30}, ("price",)),
    ({"price": 100000000}, ("price",)),
    ({"title": "x" * 513}, ("title",)),
])
def test_update_out_of_range_values_are_400(api, imported, fake_client, session_factory, payload, path):
    chair = imported["1"]

    resp = api.put(f"/api/v1/products/{chair.id}", json=payload)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid data"
    assert [tuple(d["path"]) for d in resp.json()["details"]] == [path]
    assert fake_client.calls == []
    with session_factory() as s:
        product = s.get(Product, chair.id)
        assert product.title == "Old chair"
        assert float(product.price) == 10.0


def test_update_price_at_upper_bound_is_accepted(api, imported):
    resp = api.put(f"/api/v1/products/{imported['1'].id}", json={"price": 99999999.99})

    assert resp.status_code == 200
    assert resp.json()["price"] == 99999999.99
