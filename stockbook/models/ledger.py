"""
Core Ledger Models for Stockbook

These models define the schemas for everything the accounting engine
reads from and writes to storage:
1. Inventory holdings (one row per stock-keeping unit)
2. Append-only transaction records (sales, purchases, expenses)
3. The single running Summary of cash, profit and capital
4. The Outcome returned by every engine operation

DESIGN DECISION: Money and quantities are Decimal, never float.
Sheets stores them as text and we parse them back exactly.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    """Collision-resistant record id, unique under concurrent appends."""
    return str(uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class ErrorKind(str, Enum):
    """
    Failure categories surfaced in an Outcome.

    UNEXPECTED covers storage outages and anything else the engine
    did not anticipate; callers should suggest trying again.
    """
    PARSE = "parse_error"
    VALIDATION = "validation_error"
    BUSINESS_RULE = "business_rule_error"
    UNEXPECTED = "unexpected_error"


# =============================================================================
# STATE
# =============================================================================

class InventoryItem(BaseModel):
    """Current holdings of one stock-keeping unit."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique, case-sensitive item name")
    quantity: Decimal = Field(default=Decimal("0"), ge=0)
    average_cost: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Weighted average acquisition cost per unit"
    )

    @property
    def value(self) -> Decimal:
        """Stock value at average cost."""
        return self.quantity * self.average_cost


class Summary(BaseModel):
    """
    The single process-wide running total.

    Cash may go negative (no overdraft check).
    Capital only ever grows: it is money committed to purchased stock.
    """
    model_config = ConfigDict(frozen=True)

    cash: Decimal = Decimal("0")
    total_profit: Decimal = Decimal("0")
    capital: Decimal = Decimal("0")


# =============================================================================
# APPEND-ONLY RECORDS
# =============================================================================

class SaleRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_record_id)
    timestamp: datetime = Field(default_factory=utc_now)
    item: str
    quantity: Decimal
    sell_price: Decimal
    profit: Decimal


class PurchaseRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_record_id)
    timestamp: datetime = Field(default_factory=utc_now)
    item: str
    quantity: Decimal
    buy_price: Decimal


class ExpenseRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_record_id)
    timestamp: datetime = Field(default_factory=utc_now)
    title: str
    amount: Decimal


# =============================================================================
# OUTCOME
# =============================================================================

class OperationOutcome(BaseModel):
    """
    Structured result of every engine operation.

    `message` is ready for a chat reply; `data` carries the same
    figures for programmatic callers.
    """

    success: bool
    message: str
    error: Optional[ErrorKind] = None
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **data: Any) -> "OperationOutcome":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error: ErrorKind, message: str, **data: Any) -> "OperationOutcome":
        return cls(success=False, message=message, error=error, data=data)

    @property
    def is_unexpected(self) -> bool:
        return self.error == ErrorKind.UNEXPECTED
