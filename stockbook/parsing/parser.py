"""
Command Parser

Turns one line of chat text into a typed command.

Syntax: ``keyword | arg1 | arg2 | ...``. The keyword is case-insensitive
and every segment is whitespace-trimmed.

The parser is pure and total: any input maps to a command model or a
ParseFailure, it never raises.
"""

from typing import Optional, Union

from stockbook.models.commands import (
    BuyCommand,
    Command,
    ExpenseCommand,
    HelpCommand,
    ParseFailure,
    ProfitCommand,
    SellCommand,
    StockCommand,
)

DELIMITER = "|"

# Arabic alias for Arabic-speaking shop owners
HELP_KEYWORDS = frozenset({"help", "مساعدة"})

SELL_USAGE = "Wrong format. Use: sell | item | quantity | price"
BUY_USAGE = "Wrong format. Use: buy | item | quantity | price"
EXPENSE_USAGE = "Wrong format. Use: expense | title | amount"
UNKNOWN_COMMAND = "Unknown command. Use: sell, buy, expense, stock, profit, help"


def split_fields(text: Optional[str]) -> list[str]:
    """Split raw text on the delimiter and trim every segment."""
    return [part.strip() for part in (text or "").strip().split(DELIMITER)]


def parse_command(text: Optional[str]) -> Union[Command, ParseFailure]:
    """
    Parse raw text into a command.

    Args:
        text: The message body. None is treated as empty text.

    Returns:
        A command model, or ParseFailure with a message for the user.
    """
    parts = split_fields(text)
    keyword = parts[0].lower()

    if keyword == "sell":
        if len(parts) != 4:
            return ParseFailure(message=SELL_USAGE)
        return SellCommand(item=parts[1], qty=parts[2], price=parts[3])

    if keyword == "buy":
        if len(parts) != 4:
            return ParseFailure(message=BUY_USAGE)
        return BuyCommand(item=parts[1], qty=parts[2], price=parts[3])

    if keyword == "expense":
        if len(parts) != 3:
            return ParseFailure(message=EXPENSE_USAGE)
        return ExpenseCommand(title=parts[1], amount=parts[2])

    if keyword == "stock":
        item = parts[1] if len(parts) > 1 and parts[1] else None
        return StockCommand(item=item)

    if keyword == "profit":
        return ProfitCommand()

    if keyword in HELP_KEYWORDS:
        return HelpCommand()

    return ParseFailure(message=UNKNOWN_COMMAND)
