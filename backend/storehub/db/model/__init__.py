# 聚合导入所有模型，供 Alembic 发现

from .user import User
from .store import Store, StorePlatform
from .product import (
    Product,
    Variant,
    ProductTag,
    Metafield,
)

__all__ = [
    "User",
    # store
    "Store", "StorePlatform",
    # product
    "Product", "Variant", "ProductTag", "Metafield",
]
