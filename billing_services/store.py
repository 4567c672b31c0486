"""
Entity store -- whole-collection persistence behind an injected interface.

Responsibility:
    Loads and replaces the four entity collections ("customers",
    "products", "invoices", "payments") as lists of plain records.  The
    services depend only on ``EntityStore``; the medium behind it is
    chosen at wiring time.

Architecture position:
    Services -- imperative shell.  Owns all collection I/O.

Invariants enforced:
    - Collections are read in full and replaced in full (no partial
      updates, no foreign-key cascade).
    - An absent collection reads as an empty list.
    - A corrupt collection (text that does not decode to a JSON list) or an
      unreadable store also reads as an empty list, but is reported with
      status CORRUPT or UNAVAILABLE and logged at error level, distinct
      from "legitimately empty".

Failure modes:
    - UnknownCollectionError for a name outside ``CollectionName``.
    - ``save_collection`` returns False (and logs) when the write fails;
      it never raises for storage errors.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from billing_kernel.db.engine import session_scope
from billing_kernel.exceptions import UnknownCollectionError
from billing_kernel.logging_config import get_logger
from billing_kernel.models.collection import StoredCollection

logger = get_logger("services.store")


class CollectionName(str, Enum):
    """The fixed set of entity collections."""

    CUSTOMERS = "customers"
    PRODUCTS = "products"
    INVOICES = "invoices"
    PAYMENTS = "payments"


class LoadStatus(str, Enum):
    """How a collection read went."""

    OK = "ok"
    ABSENT = "absent"
    CORRUPT = "corrupt"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CollectionSnapshot:
    """Records read from one collection plus how the read went."""

    name: CollectionName
    status: LoadStatus
    records: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_corrupt(self) -> bool:
        return self.status == LoadStatus.CORRUPT

    @property
    def is_degraded(self) -> bool:
        """True when the empty result stands in for data that could not be read."""
        return self.status in (LoadStatus.CORRUPT, LoadStatus.UNAVAILABLE)


def _collection(name: str | CollectionName) -> CollectionName:
    try:
        return CollectionName(name)
    except ValueError:
        raise UnknownCollectionError(str(name)) from None


def encode_records(records: Sequence[dict[str, Any]]) -> str:
    """Serialize records as JSON text."""
    return json.dumps(list(records), default=str)


def decode_records(name: CollectionName, text: str | None) -> CollectionSnapshot:
    """
    Parse stored text into a CollectionSnapshot.

    Postconditions:
        - ``text is None`` -> ABSENT, no records.
        - Undecodable JSON, or JSON that is not a list of objects -> CORRUPT,
          no records.
        - Otherwise OK with the decoded records.
    """
    if text is None:
        logger.debug("collection_absent", extra={"collection": name.value})
        return CollectionSnapshot(name=name, status=LoadStatus.ABSENT)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("collection_corrupt", extra={
            "collection": name.value,
            "reason": "invalid_json",
            "detail": str(exc),
        })
        return CollectionSnapshot(name=name, status=LoadStatus.CORRUPT)

    if not isinstance(payload, list) or not all(isinstance(r, dict) for r in payload):
        logger.error("collection_corrupt", extra={
            "collection": name.value,
            "reason": "not_a_record_list",
            "payload_type": type(payload).__name__,
        })
        return CollectionSnapshot(name=name, status=LoadStatus.CORRUPT)

    return CollectionSnapshot(name=name, status=LoadStatus.OK, records=payload)


class EntityStore(ABC):
    """
    Whole-collection persistence contract.

    Contract:
        ``read_collection`` never raises for missing or corrupt data, and
        ``save_collection`` reports failure by returning False.
    """

    @abstractmethod
    def _read_text(self, name: CollectionName) -> str | None:
        """Stored text for a collection, or None when absent."""
        ...

    @abstractmethod
    def _write_text(self, name: CollectionName, text: str) -> None:
        """Replace the stored text of a collection."""
        ...

    def read_collection(self, name: str | CollectionName) -> CollectionSnapshot:
        collection = _collection(name)
        try:
            text = self._read_text(collection)
        except (OSError, SQLAlchemyError):
            logger.error(
                "collection_unavailable",
                extra={"collection": collection.value},
                exc_info=True,
            )
            return CollectionSnapshot(name=collection, status=LoadStatus.UNAVAILABLE)
        return decode_records(collection, text)

    def load_collection(self, name: str | CollectionName) -> list[dict[str, Any]]:
        return self.read_collection(name).records

    def save_collection(
        self,
        name: str | CollectionName,
        records: Sequence[dict[str, Any]],
    ) -> bool:
        collection = _collection(name)
        try:
            self._write_text(collection, encode_records(records))
        except (OSError, SQLAlchemyError, TypeError, ValueError):
            logger.error(
                "collection_save_failed",
                extra={"collection": collection.value, "record_count": len(records)},
                exc_info=True,
            )
            return False
        logger.debug("collection_saved", extra={
            "collection": collection.value,
            "record_count": len(records),
        })
        return True


class InMemoryEntityStore(EntityStore):
    """
    Entity store holding each collection's JSON text in a dict.

    Mirrors browser-local key/value persistence: values are text, so a
    corrupt entry can be planted with ``put_text`` and is detected on read.
    """

    def __init__(self, initial: dict[str, Sequence[dict[str, Any]]] | None = None):
        self._texts: dict[CollectionName, str] = {}
        for name, records in (initial or {}).items():
            self._texts[_collection(name)] = encode_records(records)

    def put_text(self, name: str | CollectionName, text: str) -> None:
        """Store raw text for a collection, bypassing encoding."""
        self._texts[_collection(name)] = text

    def _read_text(self, name: CollectionName) -> str | None:
        return self._texts.get(name)

    def _write_text(self, name: CollectionName, text: str) -> None:
        self._texts[name] = text


class SqlEntityStore(EntityStore):
    """
    Entity store backed by the ``stored_collections`` table.

    Contract:
        Each save replaces one row inside its own transaction
        (``session_scope``: commit on success, rollback on failure).
        Concurrent writers are last-writer-wins.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory

    def _read_text(self, name: CollectionName) -> str | None:
        with session_scope(self._session_factory) as session:
            row = session.get(StoredCollection, name.value)
            return row.payload if row is not None else None

    def _write_text(self, name: CollectionName, text: str) -> None:
        with session_scope(self._session_factory) as session:
            row = session.get(StoredCollection, name.value)
            if row is None:
                session.add(StoredCollection(name=name.value, payload=text))
            else:
                row.payload = text
