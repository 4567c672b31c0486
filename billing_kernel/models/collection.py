"""
Module: billing_kernel.models.collection
Responsibility: ORM persistence for whole entity collections.  Each row
    holds one collection ("customers", "products", "invoices", "payments")
    encoded as JSON text, mirroring the key-value persistence the entity
    store contract expects.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One row per collection name (primary key).
    - The payload is replaced wholesale; there are no partial updates.

Failure modes:
    - A payload that does not decode as a JSON list is reported by the
      store as a corrupt collection, never raised.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import Base


class StoredCollection(Base):
    """One entity collection serialized as JSON text."""

    __tablename__ = "stored_collections"

    name: Mapped[str] = mapped_column(String(32), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<StoredCollection {self.name} ({len(self.payload)} chars)>"
