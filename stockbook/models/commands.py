"""
Command Models

Typed instructions produced by the command parser.

Every field is a raw string: numeric parsing and validation belong to the
accounting engine, so a REST caller and a chat user hit exactly the same
rules.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CommandType(str, Enum):
    SELL = "sell"
    BUY = "buy"
    EXPENSE = "expense"
    STOCK = "stock"
    PROFIT = "profit"
    HELP = "help"


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True)


class SellCommand(_Command):
    type: Literal[CommandType.SELL] = CommandType.SELL
    item: str
    qty: str
    price: str


class BuyCommand(_Command):
    type: Literal[CommandType.BUY] = CommandType.BUY
    item: str
    qty: str
    price: str


class ExpenseCommand(_Command):
    type: Literal[CommandType.EXPENSE] = CommandType.EXPENSE
    title: str
    amount: str


class StockCommand(_Command):
    """`item` is None when the whole inventory is requested."""
    type: Literal[CommandType.STOCK] = CommandType.STOCK
    item: Optional[str] = None


class ProfitCommand(_Command):
    type: Literal[CommandType.PROFIT] = CommandType.PROFIT


class HelpCommand(_Command):
    type: Literal[CommandType.HELP] = CommandType.HELP


Command = Annotated[
    Union[
        SellCommand,
        BuyCommand,
        ExpenseCommand,
        StockCommand,
        ProfitCommand,
        HelpCommand,
    ],
    Field(discriminator="type"),
]


class ParseFailure(BaseModel):
    """Malformed command text; `message` is shown to the user verbatim."""
    model_config = ConfigDict(frozen=True)

    message: str
