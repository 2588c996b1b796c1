"""
Ordered key/value buckets on top of an embedded SQLite file.

A bucket is a named keyspace. Keys and values are raw bytes and keys sort
bytewise, which is what makes prefix and range scans meaningful: callers
encode whatever ordering they need into the key itself.

Every operation runs in its own transaction, so a scan always sees a
consistent snapshot of the bucket.
"""
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Union

import structlog
from sqlalchemy import delete, distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from daytodos.monitoring.metrics import metrics
from daytodos.storage.connection import get_session_factory
from daytodos.storage.models import BucketItem

logger = structlog.get_logger(__name__)

KeyLike = Union[bytes, str]

# Bulk deletes never touch objects loaded in the session.
_BULK_DELETE = {"synchronize_session": False}


class BucketError(Exception):
    """Raised when a bucket operation is invalid or the store fails."""

    pass


@dataclass(frozen=True)
class Item:
    """A key/value pair read from a bucket."""

    key: bytes
    value: bytes


def _as_bytes(value: KeyLike) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def prefix_successor(prefix: bytes) -> Optional[bytes]:
    """
    Smallest key greater than every key starting with ``prefix``.

    Returns None when no such bound exists (empty or all-0xff prefix).

    Example:
        >>> prefix_successor(b"1/")
        b'10'
        >>> prefix_successor(b"a\\xff")
        b'b'
    """
    trimmed = prefix.rstrip(b"\xff")
    if not trimmed:
        return None
    return trimmed[:-1] + bytes([trimmed[-1] + 1])


class Bucket:
    """
    A named keyspace inside a :class:`BucketStore`.

    Scans return items in ascending key order.
    """

    def __init__(
        self,
        name: str,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        self.name = name
        self._session_factory = session_factory

    def __repr__(self) -> str:
        return f"Bucket({self.name!r})"

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Run one operation in a transaction, timing it and wrapping store errors."""
        factory = self._session_factory or get_session_factory()
        start_time = time.perf_counter()
        try:
            async with factory() as session, session.begin():
                yield session
        except SQLAlchemyError as e:
            logger.error(
                "bucket_operation_failed",
                bucket=self.name,
                operation=operation,
                error=str(e),
            )
            raise BucketError(f"{operation} on bucket {self.name!r} failed: {e}") from e
        finally:
            metrics.record_storage_operation(operation, time.perf_counter() - start_time)

    async def put(self, key: KeyLike, value: KeyLike) -> None:
        """Insert ``value`` under ``key``, replacing any previous value."""
        key = _as_bytes(key)
        if not key:
            raise BucketError("Key must not be empty")

        async with self._transaction("put") as session:
            await session.merge(BucketItem(bucket=self.name, key=key, value=_as_bytes(value)))

        logger.debug("bucket_put", bucket=self.name, key=key)

    async def get(self, key: KeyLike) -> Optional[bytes]:
        """Return the value stored under ``key``, or None."""
        key = _as_bytes(key)
        async with self._transaction("get") as session:
            result = await session.execute(
                select(BucketItem.value).where(
                    BucketItem.bucket == self.name, BucketItem.key == key
                )
            )
            return result.scalar_one_or_none()

    async def delete(self, key: KeyLike) -> bool:
        """Remove ``key``. Returns True if an item was removed."""
        key = _as_bytes(key)
        async with self._transaction("delete") as session:
            result = await session.execute(
                delete(BucketItem).where(
                    BucketItem.bucket == self.name, BucketItem.key == key
                ),
                execution_options=_BULK_DELETE,
            )
            return result.rowcount > 0

    async def items(self) -> List[Item]:
        """Return every item in the bucket."""
        return await self._scan("items", None, None)

    async def prefix_items(self, prefix: KeyLike) -> List[Item]:
        """Return the items whose key starts with ``prefix``."""
        prefix = _as_bytes(prefix)
        return await self._scan("prefix_items", prefix or None, prefix_successor(prefix))

    async def range_items(self, min_key: KeyLike, max_key: KeyLike) -> List[Item]:
        """Return the items with ``min_key <= key < max_key``."""
        min_key, max_key = _as_bytes(min_key), _as_bytes(max_key)
        if min_key >= max_key:
            return []
        return await self._scan("range_items", min_key, max_key)

    async def prefix_delete(self, prefix: KeyLike) -> int:
        """Remove every item whose key starts with ``prefix``. Returns the count."""
        prefix = _as_bytes(prefix)
        if not prefix:
            raise BucketError("Prefix must not be empty")

        stmt = delete(BucketItem).where(
            BucketItem.bucket == self.name, BucketItem.key >= prefix
        )
        upper = prefix_successor(prefix)
        if upper is not None:
            stmt = stmt.where(BucketItem.key < upper)

        async with self._transaction("prefix_delete") as session:
            result = await session.execute(stmt, execution_options=_BULK_DELETE)
            return result.rowcount

    async def count(self) -> int:
        async with self._transaction("count") as session:
            result = await session.execute(
                select(func.count()).select_from(BucketItem).where(BucketItem.bucket == self.name)
            )
            return result.scalar_one()

    async def _scan(
        self, operation: str, lower: Optional[bytes], upper: Optional[bytes]
    ) -> List[Item]:
        stmt = select(BucketItem.key, BucketItem.value).where(BucketItem.bucket == self.name)
        if lower is not None:
            stmt = stmt.where(BucketItem.key >= lower)
        if upper is not None:
            stmt = stmt.where(BucketItem.key < upper)
        stmt = stmt.order_by(BucketItem.key)

        async with self._transaction(operation) as session:
            result = await session.execute(stmt)
            return [Item(key=row.key, value=row.value) for row in result]


class BucketStore:
    """
    Entry point to the buckets kept in one SQLite database.

    Args:
        session_factory: Optional session factory. When omitted the global
            factory from :mod:`daytodos.storage.connection` is used, looked up
            on every operation so settings changes take effect after
            ``close_db()``.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory

    def bucket(self, name: str) -> Bucket:
        """Create or open the bucket called ``name``."""
        if not name:
            raise BucketError("Bucket name must not be empty")
        return Bucket(name, self._session_factory)

    async def names(self) -> List[str]:
        """Names of the buckets currently holding items."""
        factory = self._session_factory or get_session_factory()
        try:
            async with factory() as session:
                result = await session.execute(
                    select(distinct(BucketItem.bucket)).order_by(BucketItem.bucket)
                )
                return list(result.scalars())
        except SQLAlchemyError as e:
            raise BucketError(f"Listing buckets failed: {e}") from e

    async def drop(self, name: str) -> int:
        """Delete every item in bucket ``name``. Returns the count removed."""
        bucket = self.bucket(name)
        async with bucket._transaction("drop") as session:
            result = await session.execute(
                delete(BucketItem).where(BucketItem.bucket == name),
                execution_options=_BULK_DELETE,
            )
            removed = result.rowcount

        logger.info("bucket_dropped", bucket=name, items=removed)
        return removed
