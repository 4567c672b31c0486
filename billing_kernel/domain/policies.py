"""
Policies -- explicit choices for behaviour the stored data cannot enforce.

Deleting a customer or an invoice does not touch the payments (or
invoices) that reference it. Rather than leaving that implicit, every
delete runs under a ``DeletePolicy``.
"""

from enum import Enum


class DeletePolicy(str, Enum):
    """What to do when a deleted record still has dependents.

    ORPHAN: delete anyway and leave dependents pointing at a missing id.
        Snapshot-bearing invoices keep rendering; payments keep counting
        toward totals.
    BLOCK: refuse the delete with ``HasDependentsError``.
    """

    ORPHAN = "orphan"
    BLOCK = "block"
