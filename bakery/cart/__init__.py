"""Cart package: models, snapshot storage, store and add-to-cart flow."""
from .models import CartLineItem, LineItemIdentity
from .service import CartStore
from .storage import MemorySnapshotStorage, RedisSnapshotStorage, SnapshotStorage
from .flow import add_product, change_quantity

__all__ = [
    "CartLineItem",
    "LineItemIdentity",
    "CartStore",
    "MemorySnapshotStorage",
    "RedisSnapshotStorage",
    "SnapshotStorage",
    "add_product",
    "change_quantity",
]
