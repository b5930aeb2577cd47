"""
Key/value table holding storage metadata such as the schema version.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class StorageMeta(Base):
    """A single metadata entry."""
    __tablename__ = "storage_meta"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<StorageMeta({self.key}={self.value})>"
