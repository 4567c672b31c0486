"""ORM models for the billing kernel."""

from billing_kernel.models.collection import StoredCollection

__all__ = ["StoredCollection"]
