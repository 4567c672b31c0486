"""
Module: billing_kernel.db.base
Responsibility: Declarative base for the SQLAlchemy models backing the
    entity store.
Architecture position: Kernel > DB.  Lowest-level import target for models.
    MUST NOT import from models/, domain/, or outer layers.

Invariants enforced:
    - Timestamps are timezone-aware (DateTime(timezone=True)).
    - Decimal maps to Numeric(18, 2) should a model ever hold an amount
      column directly.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import DateTime, Numeric
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all billing models.

    Guarantees:
        - datetime maps to DateTime(timezone=True).
        - Decimal maps to Numeric(18, 2).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(18, 2),
        datetime: DateTime(timezone=True),
    }
