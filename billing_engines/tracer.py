"""
billing_engines.tracer -- Engine invocation tracer emitting BILLING_ENGINE_TRACE.

Responsibility:
    Provide a lightweight decorator (``@traced_engine``) that wraps pure
    engine invocations with structured trace logging.  The trace captures
    engine_name, engine_version, input_fingerprint (deterministic SHA-256
    hash of selected keyword inputs), and duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits a log record only; does not introduce I/O into engines.

Invariants enforced:
    - Fingerprints are deterministic: ``_canonicalize`` renders values
      stably, dict keys are sorted, and the hash is SHA-256 truncated to
      16 hex chars.
    - The decorator never mutates inputs or the result.

Failure modes:
    - fingerprint_fields missing from the call's kwargs are recorded as
      "null".

Usage:
    from billing_engines.tracer import traced_engine

    @traced_engine("ledger", "1.0", fingerprint_fields=("date_range",))
    def query_ledger(invoices, payments, date_range, customer_id=None):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import time
from collections.abc import Callable
from dataclasses import asdict, is_dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from billing_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")


def _canonicalize(value: Any) -> str:
    """Produce a stable string representation of a value for fingerprinting.

    Postconditions:
        Returns a deterministic string for None, numbers, Decimal, str, date,
        Enum, dataclasses (field order), dict (sorted keys) and list/tuple
        (order-preserved).  Unknown types fall back to ``str(value)``.
    """
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (int, float, Decimal, str)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return _canonicalize(asdict(value))
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    """Compute a deterministic SHA-256 fingerprint of selected input fields.

    Returns a 16-character hex prefix.  Missing fields are recorded as "null".
    """
    parts: list[str] = []
    for field in fingerprint_fields:
        parts.append(f"{field}={_canonicalize(kwargs.get(field))}")
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits BILLING_ENGINE_TRACE for pure engine invocations.

    Args:
        engine_name: Engine identifier (e.g., "ledger").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Keyword argument names to include in
            the input fingerprint hash.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                fp = compute_input_fingerprint(fingerprint_fields, kwargs)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "BILLING_ENGINE_TRACE",
                extra={
                    "trace_type": "BILLING_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
