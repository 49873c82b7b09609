from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from storehub.db.model.product import Metafield, Product, ProductTag, Variant
from storehub.repository import store_repo
from storehub.services.product_sync.importer import import_all


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


# 店铺按创建时间倒序，并带上商品数
def test_list_with_product_counts(db, user, make_store, fake_client, remote_product):
    older = make_store(user, name="Older")
    newer = make_store(user, name="Newer")
    older.created_at = datetime.now(timezone.utc) - timedelta(days=1)
    db.commit()

    fake_client.products = [remote_product(1), remote_product(2)]
    import_all(db, older, fake_client)

    rows = store_repo.list_with_product_counts(db, user.id)

    assert [(s.name, n) for s, n in rows] == [("Newer", 0), ("Older", 2)]
    assert store_repo.count_products(db, older.id) == 2
    assert store_repo.count_products(db, newer.id) == 0


def test_get_owned_hides_other_users_stores(db, user, other_user, make_store):
    mine = make_store(user)
    theirs = make_store(other_user, name="Theirs")

    assert store_repo.get_owned(db, mine.id, user.id) is mine
    assert store_repo.get_owned(db, theirs.id, user.id) is None
    assert store_repo.owned_store_ids(db, user.id) == [mine.id]
    assert store_repo.list_with_product_counts(db, other_user.id)[0][0].name == "Theirs"


# 删除店铺 → 商品及变体/标签/metafield 全部删除
def test_delete_store_cascades(db, store, fake_client, remote_product):
    fake_client.products = [remote_product(1, tags="a, b", variant_ids=[11, 12]), remote_product(2, tags="c")]
    fake_client.metafields = {"1": [{"id": 9, "namespace": "n", "key": "k", "value": "v", "type": "t"}]}
    import_all(db, store, fake_client)
    assert _count(db, Product) == 2

    store_repo.delete(db, store)

    assert _count(db, Product) == 0
    assert _count(db, Variant) == 0
    assert _count(db, ProductTag) == 0
    assert _count(db, Metafield) == 0
