"""
Data Models Package

This package contains all Pydantic models used in Stockbook.
All data flowing through the system must conform to these schemas.
"""

from stockbook.models.ledger import (
    ErrorKind,
    ExpenseRecord,
    InventoryItem,
    OperationOutcome,
    PurchaseRecord,
    SaleRecord,
    Summary,
)
from stockbook.models.commands import (
    BuyCommand,
    Command,
    CommandType,
    ExpenseCommand,
    HelpCommand,
    ParseFailure,
    ProfitCommand,
    SellCommand,
    StockCommand,
)
from stockbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from stockbook.models.requests import ExpenseRequest, TradeRequest

__all__ = [
    # Ledger models
    "ErrorKind",
    "ExpenseRecord",
    "InventoryItem",
    "OperationOutcome",
    "PurchaseRecord",
    "SaleRecord",
    "Summary",
    # Commands
    "BuyCommand",
    "Command",
    "CommandType",
    "ExpenseCommand",
    "HelpCommand",
    "ParseFailure",
    "ProfitCommand",
    "SellCommand",
    "StockCommand",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # API bodies
    "ExpenseRequest",
    "TradeRequest",
]
