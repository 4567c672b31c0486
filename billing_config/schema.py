"""
BillingConfig schema.

Typed, frozen view of the YAML configuration.  The loader parses the
merged YAML mapping into these types; services and scripts only ever see
a ``BillingConfig``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from billing_kernel.domain.policies import DeletePolicy

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompanyProfile:
    """Letterhead printed on invoices and reports."""

    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""


@dataclass(frozen=True)
class StoreSettings:
    """Where the entity collections live."""

    database_url: str = "sqlite:///billing.db"
    echo: bool = False


@dataclass(frozen=True)
class PolicySettings:
    require_customer_on_invoice: bool = False
    customer_delete_policy: DeletePolicy = DeletePolicy.ORPHAN
    invoice_delete_policy: DeletePolicy = DeletePolicy.ORPHAN


@dataclass(frozen=True)
class DisplaySettings:
    currency_symbol: str = "₹"


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BillingConfig:
    """The complete, validated configuration."""

    company: CompanyProfile = field(default_factory=CompanyProfile)
    store: StoreSettings = field(default_factory=StoreSettings)
    policies: PolicySettings = field(default_factory=PolicySettings)
    display: DisplaySettings = field(default_factory=DisplaySettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    checksum: str = ""
