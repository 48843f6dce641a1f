"""
Reply texts for chat users.

Quantities drop their decimals when whole; money always shows two
decimals followed by the currency label.
"""

from decimal import Decimal
from typing import Iterable

from stockbook.models.ledger import InventoryItem, Summary

INVALID_QTY_PRICE = "Enter valid positive numbers for quantity and price"
INVALID_AMOUNT = "Enter a valid positive amount"
NO_INVENTORY = "No inventory yet"
TRY_AGAIN = "Something went wrong. Please try again."

HELP_TEXT = (
    "📋 Available commands:\n"
    "\n"
    "• sell | item | quantity | price\n"
    "• buy | item | quantity | price\n"
    "• expense | title | amount\n"
    "• stock | item (leave item out to list everything)\n"
    "• profit\n"
    "\n"
    "Example:\n"
    "sell | tshirt | 5 | 80"
)


def fmt_qty(quantity: Decimal) -> str:
    if quantity == quantity.to_integral_value():
        return str(int(quantity))
    return format(quantity.normalize(), "f")


def fmt_money(amount: Decimal, currency: str) -> str:
    return f"{amount:.2f} {currency}"


def insufficient_stock(available: Decimal) -> str:
    return f"Insufficient stock. Available: {fmt_qty(available)}"


def item_not_found(item: str) -> str:
    return f'Item "{item}" not found'


def sale_recorded(
    item: str,
    quantity: Decimal,
    price: Decimal,
    revenue: Decimal,
    profit: Decimal,
    remaining: Decimal,
    currency: str,
) -> str:
    return (
        "✅ Sale recorded\n"
        f"{item}: {fmt_qty(quantity)} × {fmt_money(price, currency)}\n"
        f"Revenue: {fmt_money(revenue, currency)}\n"
        f"Profit: {fmt_money(profit, currency)}\n"
        f"Remaining stock: {fmt_qty(remaining)}"
    )


def purchase_recorded(
    item: str,
    quantity: Decimal,
    price: Decimal,
    spent: Decimal,
    new_quantity: Decimal,
    average_cost: Decimal,
    currency: str,
) -> str:
    return (
        "✅ Purchase recorded\n"
        f"{item}: {fmt_qty(quantity)} × {fmt_money(price, currency)}\n"
        f"Total: {fmt_money(spent, currency)}\n"
        f"New stock: {fmt_qty(new_quantity)}\n"
        f"Average cost: {fmt_money(average_cost, currency)}"
    )


def expense_recorded(
    title: str,
    amount: Decimal,
    remaining_cash: Decimal,
    currency: str,
) -> str:
    return (
        "✅ Expense recorded\n"
        f"{title}: {fmt_money(amount, currency)}\n"
        f"Remaining cash: {fmt_money(remaining_cash, currency)}"
    )


def inventory_listing(items: Iterable[InventoryItem], currency: str) -> str:
    lines = [
        f"{i.name}: {fmt_qty(i.quantity)} ({fmt_money(i.average_cost, currency)})"
        for i in items
    ]
    return "📦 Inventory:\n\n" + "\n".join(lines)


def item_details(item: InventoryItem, currency: str) -> str:
    return (
        f"📦 {item.name}\n"
        f"Quantity: {fmt_qty(item.quantity)}\n"
        f"Average cost: {fmt_money(item.average_cost, currency)}\n"
        f"Value: {fmt_money(item.value, currency)}"
    )


def profit_report(
    today: Decimal,
    month: Decimal,
    total: Decimal,
    cash: Decimal,
    currency: str,
) -> str:
    return (
        "💰 Profit\n"
        "\n"
        f"Today: {fmt_money(today, currency)}\n"
        f"This month: {fmt_money(month, currency)}\n"
        f"Total: {fmt_money(total, currency)}\n"
        "\n"
        f"💵 Cash: {fmt_money(cash, currency)}"
    )


def summary_report(summary: Summary, currency: str) -> str:
    return (
        "📊 Summary\n"
        f"Cash: {fmt_money(summary.cash, currency)}\n"
        f"Total profit: {fmt_money(summary.total_profit, currency)}\n"
        f"Capital: {fmt_money(summary.capital, currency)}"
    )
