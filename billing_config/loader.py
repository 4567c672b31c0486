"""
Configuration Loader (``billing_config.loader``).

Responsibility
--------------
Loads YAML files, merges a user file over the packaged defaults section
by section, and parses the result into ``billing_config.schema``
dataclasses.  Runtime callers go through
``billing_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Unknown policies and log levels are rejected, never defaulted.
* ``compute_checksum`` is deterministic for identical merged mappings.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* A section that is not a mapping, an unknown delete policy or an
  unknown log level  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from billing_kernel.domain.policies import DeletePolicy
from billing_config.schema import (
    BillingConfig,
    CompanyProfile,
    DisplaySettings,
    LoggingSettings,
    PolicySettings,
    StoreSettings,
)

SECTIONS = ("company", "store", "policies", "display", "logging")

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section {name!r} must be a mapping")
    return value


def merge_sections(
    defaults: dict[str, Any],
    overrides: dict[str, Any],
) -> dict[str, Any]:
    """
    Overlay ``overrides`` on ``defaults`` one section at a time.

    Keys inside a section replace the default key; keys the override does
    not mention keep their default.  Top-level keys outside ``SECTIONS``
    are rejected.
    """
    unknown = sorted(set(overrides) - set(SECTIONS))
    if unknown:
        raise ValueError(f"Unknown config sections: {', '.join(unknown)}")
    return {
        name: {**_section(defaults, name), **_section(overrides, name)}
        for name in SECTIONS
    }


def parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"{key} must be true or false, got {value!r}")


def parse_delete_policy(value: Any, key: str) -> DeletePolicy:
    try:
        return DeletePolicy(str(value).lower())
    except ValueError:
        allowed = ", ".join(p.value for p in DeletePolicy)
        raise ValueError(f"{key} must be one of {allowed}, got {value!r}") from None


def parse_log_level(value: Any) -> str:
    level = str(value).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"logging.level must be one of {sorted(_LOG_LEVELS)}, got {value!r}")
    return level


def parse_company(data: dict[str, Any]) -> CompanyProfile:
    """Parse a CompanyProfile from a dict."""
    return CompanyProfile(
        name=str(data.get("name", "")),
        address=str(data.get("address", "")),
        phone=str(data.get("phone", "")),
        email=str(data.get("email", "")),
    )


def parse_store(data: dict[str, Any]) -> StoreSettings:
    url = data.get("database_url")
    if not url:
        raise ValueError("store.database_url is required")
    return StoreSettings(
        database_url=str(url),
        echo=parse_bool(data.get("echo", False), "store.echo"),
    )


def parse_policies(data: dict[str, Any]) -> PolicySettings:
    return PolicySettings(
        require_customer_on_invoice=parse_bool(
            data.get("require_customer_on_invoice", False),
            "policies.require_customer_on_invoice",
        ),
        customer_delete_policy=parse_delete_policy(
            data.get("customer_delete_policy", DeletePolicy.ORPHAN.value),
            "policies.customer_delete_policy",
        ),
        invoice_delete_policy=parse_delete_policy(
            data.get("invoice_delete_policy", DeletePolicy.ORPHAN.value),
            "policies.invoice_delete_policy",
        ),
    )


def parse_config(data: dict[str, Any]) -> BillingConfig:
    """
    Parse a merged configuration mapping into a BillingConfig.

    Preconditions:
        - ``data`` holds every section (see ``merge_sections``).
    Raises:
        ValueError: on any invalid value.
    """
    return BillingConfig(
        company=parse_company(_section(data, "company")),
        store=parse_store(_section(data, "store")),
        policies=parse_policies(_section(data, "policies")),
        display=DisplaySettings(
            currency_symbol=str(_section(data, "display").get("currency_symbol", "")),
        ),
        logging=LoggingSettings(
            level=parse_log_level(_section(data, "logging").get("level", "INFO")),
        ),
        checksum=compute_checksum(data),
    )


def log_level_number(config: BillingConfig) -> int:
    """The ``logging`` module constant for the configured level."""
    return logging.getLevelName(config.logging.level)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
