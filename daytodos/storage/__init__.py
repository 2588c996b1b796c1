"""Embedded ordered key/value storage."""
from .buckets import Bucket, BucketError, BucketStore, Item, prefix_successor
from .connection import close_db, get_session_factory, init_db
from .models import Base, BucketItem

__all__ = [
    "Base",
    "Bucket",
    "BucketError",
    "BucketItem",
    "BucketStore",
    "Item",
    "close_db",
    "get_session_factory",
    "init_db",
    "prefix_successor",
]
