"""
In-Memory Storage Implementation

Used by the test-suite and as a fallback when Google Sheets is not
configured. Nothing survives a restart.
"""

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
from stockbook.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Dict- and list-backed ledger storage."""

    def __init__(self):
        # dicts keep insertion order, matching a sheet's row order
        self.inventory: dict[str, InventoryItem] = {}
        self.sales: list[SaleRecord] = []
        self.purchases: list[PurchaseRecord] = []
        self.expenses: list[ExpenseRecord] = []
        self.summary: Optional[Summary] = None

    async def get_inventory_item(self, name: str) -> Optional[InventoryItem]:
        return self.inventory.get(name)

    async def set_inventory_item(
        self,
        name: str,
        quantity: Decimal,
        average_cost: Decimal,
    ) -> InventoryItem:
        item = InventoryItem(name=name, quantity=quantity, average_cost=average_cost)
        self.inventory[name] = item
        return item

    async def append_sale(
        self,
        item: str,
        quantity: Decimal,
        price: Decimal,
        profit: Decimal,
    ) -> SaleRecord:
        record = SaleRecord(item=item, quantity=quantity, sell_price=price, profit=profit)
        self.sales.append(record)
        return record

    async def append_purchase(
        self,
        item: str,
        quantity: Decimal,
        price: Decimal,
    ) -> PurchaseRecord:
        record = PurchaseRecord(item=item, quantity=quantity, buy_price=price)
        self.purchases.append(record)
        return record

    async def append_expense(self, title: str, amount: Decimal) -> ExpenseRecord:
        record = ExpenseRecord(title=title, amount=amount)
        self.expenses.append(record)
        return record

    async def get_summary(self) -> Summary:
        return self.summary or Summary()

    async def set_summary(
        self,
        cash: Decimal,
        total_profit: Decimal,
        capital: Decimal,
    ) -> Summary:
        self.summary = Summary(cash=cash, total_profit=total_profit, capital=capital)
        return self.summary

    async def list_inventory(self) -> list[InventoryItem]:
        return list(self.inventory.values())

    async def list_sales(self) -> list[SaleRecord]:
        return list(self.sales)


class InMemoryAuditStorage(AuditStorageInterface):
    """Keeps audit events in a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True
