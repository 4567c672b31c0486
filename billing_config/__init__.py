"""
billing_config -- single public entrypoint for billing configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Scripts and the services wiring read
    settings from the returned ``BillingConfig`` and never open YAML
    files themselves.

Architecture position:
    Configuration -- sits above ``billing_kernel`` and beside
    ``billing_services``.  The kernel and engines MUST NEVER import from
    ``billing_config``.

Failure modes:
    - ``FileNotFoundError`` -- the given config file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ValueError`` -- unknown section, policy or log level.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``BILLING_CONFIG_TRACE`` log entry carrying the merged configuration's
    checksum, so a report can be tied to the settings that produced it.
"""

from __future__ import annotations

from pathlib import Path

from billing_kernel.logging_config import get_logger
from billing_config.loader import load_yaml_file, merge_sections, parse_config
from billing_config.schema import BillingConfig

_logger = get_logger("config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> BillingConfig:
    """
    Load the packaged defaults, overlay ``path`` if given, and parse.

    Args:
        path: Optional user YAML file.  None means defaults only.

    Returns:
        BillingConfig -- frozen and validated.
    """
    defaults = load_yaml_file(DEFAULTS_PATH)
    overrides = load_yaml_file(Path(path)) if path is not None else {}
    config = parse_config(merge_sections(defaults, overrides))

    _logger.info(
        "BILLING_CONFIG_TRACE",
        extra={
            "trace_type": "BILLING_CONFIG_TRACE",
            "config_path": str(path) if path is not None else None,
            "checksum": config.checksum,
            "database_url": config.store.database_url,
            "customer_delete_policy": config.policies.customer_delete_policy.value,
            "invoice_delete_policy": config.policies.invoice_delete_policy.value,
        },
    )
    return config


__all__ = ["BillingConfig", "get_active_config"]
