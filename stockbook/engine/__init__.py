"""Accounting engine package."""

from stockbook.engine.accounting import (
    AccountingEngine,
    parse_positive,
    weighted_average_cost,
)
from stockbook.engine.errors import (
    BusinessRuleError,
    InsufficientStockError,
    ItemNotFoundError,
    LedgerError,
    LedgerValidationError,
    ParseError,
)
from stockbook.engine.locks import KeyedLock

__all__ = [
    "AccountingEngine",
    "BusinessRuleError",
    "InsufficientStockError",
    "ItemNotFoundError",
    "KeyedLock",
    "LedgerError",
    "LedgerValidationError",
    "ParseError",
    "parse_positive",
    "weighted_average_cost",
]
