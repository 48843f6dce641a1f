"""
Abstract Storage Interface

The accounting engine talks to storage only through these classes.
Google Sheets backs production; an in-memory backend backs the tests.

Methods are plain reads and writes. Every business rule lives in the
accounting engine.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from stockbook.models.audit import AuditEvent
from stockbook.models.ledger import (
    ExpenseRecord,
    InventoryItem,
    PurchaseRecord,
    SaleRecord,
    Summary,
)


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any method may raise StorageError when the backend is unreachable
    or returns something we cannot interpret.
    """

    @abstractmethod
    async def get_inventory_item(self, name: str) -> Optional[InventoryItem]:
        """
        Look up one inventory item by exact name.

        Returns:
            The item if found, None otherwise
        """
        pass

    @abstractmethod
    async def set_inventory_item(
        self,
        name: str,
        quantity: Decimal,
        average_cost: Decimal,
    ) -> InventoryItem:
        """
        Create or overwrite the inventory row for `name`.

        Returns:
            The stored item
        """
        pass

    @abstractmethod
    async def append_sale(
        self,
        item: str,
        quantity: Decimal,
        price: Decimal,
        profit: Decimal,
    ) -> SaleRecord:
        """Append a sale record. The storage assigns id and timestamp."""
        pass

    @abstractmethod
    async def append_purchase(
        self,
        item: str,
        quantity: Decimal,
        price: Decimal,
    ) -> PurchaseRecord:
        """Append a purchase record. The storage assigns id and timestamp."""
        pass

    @abstractmethod
    async def append_expense(self, title: str, amount: Decimal) -> ExpenseRecord:
        """Append an expense record. The storage assigns id and timestamp."""
        pass

    @abstractmethod
    async def get_summary(self) -> Summary:
        """
        Read the running summary.

        Returns:
            The summary, all zeros if it was never written
        """
        pass

    @abstractmethod
    async def set_summary(
        self,
        cash: Decimal,
        total_profit: Decimal,
        capital: Decimal,
    ) -> Summary:
        """Overwrite the running summary."""
        pass

    @abstractmethod
    async def list_inventory(self) -> list[InventoryItem]:
        """List every inventory item in storage order."""
        pass

    @abstractmethod
    async def list_sales(self) -> list[SaleRecord]:
        """List every sale record in storage order."""
        pass


class AuditStorageInterface(ABC):
    """Append-only sink for audit events."""

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """Returns True when the event was stored."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
