"""SQLAlchemy models backing the bucket store."""
from sqlalchemy import LargeBinary, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class BucketItem(Base):
    """
    One key/value pair inside a named bucket.

    The composite primary key keeps items unique per bucket and gives SQLite
    an index to walk for ordered scans. Keys are BLOBs, which SQLite compares
    bytewise.
    """

    __tablename__ = "bucket_items"

    bucket: Mapped[str] = mapped_column(String(255), primary_key=True)
    key: Mapped[bytes] = mapped_column(LargeBinary, primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    def __repr__(self) -> str:
        return f"<BucketItem(bucket={self.bucket!r}, key={self.key!r})>"
