# backend/portfolio_ledger/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent ledger and analysis errors and contain NO HTTP
knowledge. The HTTP layer (main.py handlers, CRUD routers) maps them to
status codes and response envelopes.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── InvalidDateRangeError
    ├── NotFoundError
    │   ├── AssetNotFoundError
    │   ├── AssetTypeNotFoundError
    │   ├── TransactionNotFoundError
    │   ├── PriceRecordNotFoundError
    │   └── SettlementAccountNotFoundError
    ├── BusinessRuleError
    │   ├── InsufficientHoldingError
    │   ├── InsufficientFundsError
    │   └── PriceNotFoundError
    ├── ReferentialConflictError
    │   └── DuplicateResourceError
    └── StorageError

Business-rule and referential errors are raised inside the transaction
engine's atomic scope; the engine rolls the session back before they
propagate.
"""

from datetime import date
from decimal import Decimal


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input is malformed or missing.

    Used for checks Pydantic cannot express at the request boundary
    (query-string dates, cross-field rules, engine preconditions).

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidDateRangeError(ValidationError):
    """Raised when start_date is later than end_date."""

    def __init__(self, start_date: date, end_date: date) -> None:
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Start date {start_date.isoformat()} cannot be later than "
            f"end date {end_date.isoformat()}",
            field="start_date",
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Asset", "Transaction")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class AssetNotFoundError(NotFoundError):
    def __init__(self, asset_id: int) -> None:
        self.asset_id = asset_id
        super().__init__(
            f"Asset with id {asset_id} not found",
            resource_type="Asset",
            resource_id=asset_id,
        )


class AssetTypeNotFoundError(NotFoundError):
    def __init__(self, asset_type_id: int) -> None:
        self.asset_type_id = asset_type_id
        super().__init__(
            f"Asset type with id {asset_type_id} not found",
            resource_type="AssetType",
            resource_id=asset_type_id,
        )


class TransactionNotFoundError(NotFoundError):
    def __init__(self, transaction_id: int) -> None:
        self.transaction_id = transaction_id
        super().__init__(
            f"Transaction with id {transaction_id} not found",
            resource_type="Transaction",
            resource_id=transaction_id,
        )


class PriceRecordNotFoundError(NotFoundError):
    def __init__(self, price_id: int) -> None:
        self.price_id = price_id
        super().__init__(
            f"Price record with id {price_id} not found",
            resource_type="PriceDaily",
            resource_id=price_id,
        )


class SettlementAccountNotFoundError(NotFoundError):
    """Raised when no asset is flagged as the cash settlement account."""

    def __init__(self) -> None:
        super().__init__(
            "No settlement (cash) account is configured",
            resource_type="Asset",
        )


# =============================================================================
# BUSINESS RULE ERRORS
# =============================================================================


class BusinessRuleError(ServiceError):
    """Base exception for requests that are well-formed but not allowed."""


class InsufficientHoldingError(BusinessRuleError):
    """
    Raised when an OUT entry would take an asset's holding below zero.

    Attributes:
        asset_id: Asset being debited
        available: Holding before the entry
        requested: Quantity requested
    """

    def __init__(self, asset_id: int, available: Decimal, requested: Decimal) -> None:
        self.asset_id = asset_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient asset quantity for asset {asset_id}: "
            f"available {available}, requested {requested}"
        )


class InsufficientFundsError(BusinessRuleError):
    """
    Raised when the settlement account cannot cover a purchase.

    Attributes:
        available: Cash balance
        required: Total cost of the purchase
    """

    def __init__(self, available: Decimal, required: Decimal) -> None:
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient funds: available {available}, required {required}"
        )


class PriceNotFoundError(BusinessRuleError):
    """Raised when buy/sell finds no price row for the exact trade date."""

    def __init__(self, asset_id: int, price_date: date) -> None:
        self.asset_id = asset_id
        self.price_date = price_date
        super().__init__(
            f"No price found for asset {asset_id} on {price_date.isoformat()}"
        )


# =============================================================================
# CONFLICT ERRORS
# =============================================================================


class ReferentialConflictError(ServiceError):
    """
    Raised when a write is blocked by dependent rows or ledger consistency.

    Attributes:
        resource_type: Type of the resource being modified
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class DuplicateResourceError(ReferentialConflictError):
    """Raised when a unique business key (name, code) is already taken."""

    def __init__(self, resource_type: str, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(
            f"{resource_type} with {field} '{value}' already exists",
            resource_type=resource_type,
        )


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StorageError(ServiceError):
    """
    Raised when the underlying database read/write fails.

    The message is intentionally generic; the original exception is chained
    (``raise ... from exc``) and logged server-side.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"A storage error occurred while trying to {operation}")


__all__ = [
    "ServiceError",
    "ValidationError",
    "InvalidDateRangeError",
    "NotFoundError",
    "AssetNotFoundError",
    "AssetTypeNotFoundError",
    "TransactionNotFoundError",
    "PriceRecordNotFoundError",
    "SettlementAccountNotFoundError",
    "BusinessRuleError",
    "InsufficientHoldingError",
    "InsufficientFundsError",
    "PriceNotFoundError",
    "ReferentialConflictError",
    "DuplicateResourceError",
    "StorageError",
]
