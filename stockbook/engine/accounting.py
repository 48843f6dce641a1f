"""
Accounting Engine

DESIGN DECISION: The engine is the ONLY writer of inventory and summary.
Every operation follows the same shape:
1. Validate numeric input (no state change on failure)
2. Check business rules against current state
3. Append the transaction record
4. Update inventory, then the summary

Rule violations and storage failures are converted to an
OperationOutcome at the engine boundary; nothing raises to the caller.

CONCURRENCY: storage has no transactions, so read-check-write of an
inventory row runs under a per-item lock and read-modify-write of the
summary under a single summary lock. Locks are always taken in the order
item -> summary.

PARTIAL FAILURE: a storage error between steps 3 and 4 is NOT rolled
back. The sheets are append-only and a human can reconcile them.
"""

import asyncio
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Union

import structlog

from stockbook.config import AppSettings, get_settings
from stockbook.engine import messages
from stockbook.engine.errors import (
    BusinessRuleError,
    InsufficientStockError,
    ItemNotFoundError,
    LedgerValidationError,
    ParseError,
)
from stockbook.engine.locks import KeyedLock
from stockbook.models.commands import Command, CommandType, ParseFailure
from stockbook.models.ledger import ErrorKind, OperationOutcome, utc_now
from stockbook.services.storage import LedgerStorageInterface, StorageError


logger = structlog.get_logger(__name__)

NumericInput = Union[str, int, float, Decimal, None]

ZERO = Decimal("0")


def parse_positive(value: NumericInput) -> Optional[Decimal]:
    """
    Parse a user-supplied number.

    Returns None for anything non-numeric, non-finite, zero or negative.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not number.is_finite() or number <= 0:
        return None
    return number


def weighted_average_cost(
    current_qty: Decimal,
    current_avg: Decimal,
    qty: Decimal,
    price: Decimal,
) -> Decimal:
    """Blend a purchase into the running average unit cost."""
    average = (current_qty * current_avg + qty * price) / (current_qty + qty)
    # Division yields forms like 2E+1; keep whole averages in plain notation
    if average == average.to_integral_value():
        return average.quantize(Decimal(1))
    return average


class AccountingEngine:
    """
    Executes ledger operations against a storage backend.

    Args:
        storage: Where inventory, records and the summary live
        settings: App settings (currency, reference time zone)
        clock: Returns the current aware datetime; injectable for tests
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        settings: Optional[AppSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._storage = storage
        self._settings = settings or get_settings().app
        self._clock = clock or utc_now
        self._item_locks = KeyedLock()
        self._summary_lock = asyncio.Lock()

    @property
    def currency(self) -> str:
        return self._settings.currency

    # -------------------------------------------------------------------------
    # Boundary
    # -------------------------------------------------------------------------

    async def _run(self, operation: str, func: Callable, *args: Any) -> OperationOutcome:
        """Run one operation, converting every failure into an outcome."""
        try:
            return await func(*args)
        except ParseError as e:
            return OperationOutcome.fail(ErrorKind.PARSE, e.message)
        except LedgerValidationError as e:
            return OperationOutcome.fail(ErrorKind.VALIDATION, e.message, **e.details)
        except BusinessRuleError as e:
            return OperationOutcome.fail(ErrorKind.BUSINESS_RULE, e.message, **e.details)
        except StorageError as e:
            logger.error("storage_error", operation=operation, error=str(e))
            return OperationOutcome.fail(ErrorKind.UNEXPECTED, messages.TRY_AGAIN)
        except Exception:
            logger.exception("operation_crashed", operation=operation)
            return OperationOutcome.fail(ErrorKind.UNEXPECTED, messages.TRY_AGAIN)

    async def execute(self, command: Union[Command, ParseFailure]) -> OperationOutcome:
        """Dispatch a parsed command to its operation."""
        if isinstance(command, ParseFailure):
            return await self._run("parse", self._reject, command.message)

        if command.type == CommandType.SELL:
            return await self.sell(command.item, command.qty, command.price)
        elif command.type == CommandType.BUY:
            return await self.buy(command.item, command.qty, command.price)
        elif command.type == CommandType.EXPENSE:
            return await self.expense(command.title, command.amount)
        elif command.type == CommandType.STOCK:
            return await self.stock(command.item)
        elif command.type == CommandType.PROFIT:
            return await self.profit()
        else:
            return OperationOutcome.ok(messages.HELP_TEXT)

    async def _reject(self, message: str) -> OperationOutcome:
        raise ParseError(message)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def sell(self, item: str, qty: NumericInput, price: NumericInput) -> OperationOutcome:
        return await self._run("sell", self._sell, item, qty, price)

    async def _sell(self, item: str, qty: NumericInput, price: NumericInput) -> OperationOutcome:
        qty_num, price_num = self._validate_trade(qty, price)

        async with self._item_locks.acquire(item):
            stock = await self._storage.get_inventory_item(item)
            if stock is None or stock.quantity < qty_num:
                raise InsufficientStockError(item, stock.quantity if stock else ZERO)

            profit = (price_num - stock.average_cost) * qty_num
            revenue = price_num * qty_num
            remaining = stock.quantity - qty_num

            await self._storage.append_sale(item, qty_num, price_num, profit)
            await self._storage.set_inventory_item(item, remaining, stock.average_cost)

            async with self._summary_lock:
                summary = await self._storage.get_summary()
                await self._storage.set_summary(
                    summary.cash + revenue,
                    summary.total_profit + profit,
                    summary.capital,
                )

        logger.info("sale_recorded", item=item, quantity=str(qty_num), profit=str(profit))
        return OperationOutcome.ok(
            messages.sale_recorded(
                item, qty_num, price_num, revenue, profit, remaining, self.currency
            ),
            item=item,
            quantity=qty_num,
            price=price_num,
            revenue=revenue,
            profit=profit,
            remaining=remaining,
        )

    async def buy(self, item: str, qty: NumericInput, price: NumericInput) -> OperationOutcome:
        return await self._run("buy", self._buy, item, qty, price)

    async def _buy(self, item: str, qty: NumericInput, price: NumericInput) -> OperationOutcome:
        qty_num, price_num = self._validate_trade(qty, price)

        async with self._item_locks.acquire(item):
            stock = await self._storage.get_inventory_item(item)
            current_qty = stock.quantity if stock else ZERO
            current_avg = stock.average_cost if stock else ZERO

            new_qty = current_qty + qty_num
            new_avg = weighted_average_cost(current_qty, current_avg, qty_num, price_num)
            spent = qty_num * price_num

            await self._storage.append_purchase(item, qty_num, price_num)
            await self._storage.set_inventory_item(item, new_qty, new_avg)

            async with self._summary_lock:
                summary = await self._storage.get_summary()
                await self._storage.set_summary(
                    summary.cash - spent,
                    summary.total_profit,
                    summary.capital + spent,
                )

        logger.info("purchase_recorded", item=item, quantity=str(qty_num), average_cost=str(new_avg))
        return OperationOutcome.ok(
            messages.purchase_recorded(
                item, qty_num, price_num, spent, new_qty, new_avg, self.currency
            ),
            item=item,
            quantity=qty_num,
            price=price_num,
            spent=spent,
            new_quantity=new_qty,
            average_cost=new_avg,
        )

    async def expense(self, title: str, amount: NumericInput) -> OperationOutcome:
        return await self._run("expense", self._expense, title, amount)

    async def _expense(self, title: str, amount: NumericInput) -> OperationOutcome:
        amount_num = parse_positive(amount)
        if amount_num is None:
            raise LedgerValidationError(messages.INVALID_AMOUNT)
        # Blank titles are accepted as-is
        title = title or ""

        await self._storage.append_expense(title, amount_num)

        async with self._summary_lock:
            summary = await self._storage.get_summary()
            await self._storage.set_summary(
                summary.cash - amount_num,
                summary.total_profit - amount_num,
                summary.capital,
            )
        # Taken from the pre-update snapshot; the lock makes it equal the new cash
        remaining_cash = summary.cash - amount_num

        logger.info("expense_recorded", title=title, amount=str(amount_num))
        return OperationOutcome.ok(
            messages.expense_recorded(title, amount_num, remaining_cash, self.currency),
            title=title,
            amount=amount_num,
            remaining_cash=remaining_cash,
        )

    def _validate_trade(
        self,
        qty: NumericInput,
        price: NumericInput,
    ) -> tuple[Decimal, Decimal]:
        qty_num = parse_positive(qty)
        price_num = parse_positive(price)
        if qty_num is None or price_num is None:
            raise LedgerValidationError(messages.INVALID_QTY_PRICE)
        return qty_num, price_num

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def stock(self, item: Optional[str] = None) -> OperationOutcome:
        return await self._run("stock", self._stock, item)

    async def _stock(self, item: Optional[str]) -> OperationOutcome:
        if not item:
            items = await self._storage.list_inventory()
            if not items:
                return OperationOutcome.ok(messages.NO_INVENTORY, items=[])
            return OperationOutcome.ok(
                messages.inventory_listing(items, self.currency),
                items=[i.model_dump() for i in items],
            )

        stock = await self._storage.get_inventory_item(item)
        if stock is None:
            raise ItemNotFoundError(item)
        return OperationOutcome.ok(
            messages.item_details(stock, self.currency),
            item=stock.name,
            quantity=stock.quantity,
            average_cost=stock.average_cost,
            value=stock.value,
        )

    async def profit(self) -> OperationOutcome:
        return await self._run("profit", self._profit)

    async def _profit(self) -> OperationOutcome:
        sales = await self._storage.list_sales()

        now = self._clock().astimezone(self._settings.tzinfo)
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        month_start = today_start.replace(day=1)

        # Sale-level profit only; expenses show up in the summary total
        today_profit = sum((s.profit for s in sales if s.timestamp >= today_start), ZERO)
        month_profit = sum((s.profit for s in sales if s.timestamp >= month_start), ZERO)

        summary = await self._storage.get_summary()

        return OperationOutcome.ok(
            messages.profit_report(
                today_profit,
                month_profit,
                summary.total_profit,
                summary.cash,
                self.currency,
            ),
            today=today_profit,
            month=month_profit,
            total_profit=summary.total_profit,
            cash=summary.cash,
        )

    async def summary(self) -> OperationOutcome:
        """Current running totals, for the REST API."""
        return await self._run("summary", self._summary)

    async def _summary(self) -> OperationOutcome:
        summary = await self._storage.get_summary()
        return OperationOutcome.ok(
            messages.summary_report(summary, self.currency),
            **summary.model_dump(),
        )

    async def inventory(self) -> OperationOutcome:
        """Raw inventory list, for the REST API."""
        return await self._run("inventory", self._inventory)

    async def _inventory(self) -> OperationOutcome:
        items = await self._storage.list_inventory()
        return OperationOutcome.ok(
            messages.inventory_listing(items, self.currency) if items else messages.NO_INVENTORY,
            items=[i.model_dump() for i in items],
        )
