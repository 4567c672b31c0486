"""
Billing Kernel

Value types, entities and infrastructure for the billing ledger:
- Decimal-only money arithmetic with parse-or-zero coercion
- Frozen entity records with snapshot-on-write customer details
- Injectable clock and time-based id generation
- Structured JSON logging and typed exceptions
"""

__version__ = "0.1.0"
