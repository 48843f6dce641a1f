"""
Ledger Error Taxonomy

Raised inside the accounting engine and converted to an
OperationOutcome at its boundary. Storage failures use StorageError
from the storage interface.
"""

from decimal import Decimal
from typing import Any

from stockbook.engine.messages import insufficient_stock, item_not_found


class LedgerError(Exception):
    """Base exception for ledger rule violations."""

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)


class ParseError(LedgerError):
    """Command text did not match any known syntax."""
    pass


class LedgerValidationError(LedgerError):
    """A quantity, price, amount or name was not acceptable."""
    pass


class BusinessRuleError(LedgerError):
    """The request is well-formed but the books do not allow it."""
    pass


class InsufficientStockError(BusinessRuleError):
    def __init__(self, item: str, available: Decimal):
        super().__init__(
            insufficient_stock(available),
            item=item,
            available=available,
        )


class ItemNotFoundError(BusinessRuleError):
    def __init__(self, item: str):
        super().__init__(item_not_found(item), item=item)
