# Overview: Ledger error taxonomy shared by services, routes and the CLI.

from __future__ import annotations


class LedgerError(Exception):
    """Base class for every error the ledger reports to callers."""

    status_code = 500
    code = "internal_error"

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code}


class ValidationError(LedgerError, ValueError):
    """400-level input problem. Raised before any transaction opens."""

    status_code = 400
    code = "invalid_argument"


class NotFoundError(LedgerError, LookupError):
    """404-level: referenced product does not exist."""

    status_code = 404
    code = "not_found"


class InsufficientStockError(LedgerError):
    """409-level: withdrawal exceeds what the product's batches hold."""

    status_code = 409
    code = "insufficient_stock"

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Exceeds available stock: requested {requested}, available {available}"
        )

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["requested"] = self.requested
        payload["available"] = self.available
        return payload


class StorageFailureError(LedgerError):
    """
    500-level: commit/rollback failure or constraint violation.

    The message stays opaque; the underlying exception is chained as __cause__.
    """

    status_code = 500
    code = "storage_failure"

    def __init__(self, message: str = "Storage failure, no changes were applied"):
        super().__init__(message)


class ConflictError(LedgerError):
    """409-level conflict: duplicate product name, or stock changed by a concurrent writer."""

    status_code = 409
    code = "conflict"
