"""
Request bodies for the REST API.

Every field may be missing or null; the engine then answers with its
usual validation message instead of a framework 422.
"""

from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

# Numbers may arrive as JSON numbers or strings; the engine validates both.
NumericInput = Optional[Union[Decimal, str]]


class TradeRequest(BaseModel):
    """Body of POST /api/sell and POST /api/buy."""

    item: str = Field(default="", description="Item name (case-sensitive)")
    qty: NumericInput = None
    price: NumericInput = None

    @field_validator('item', mode='before')
    @classmethod
    def null_item_is_blank(cls, v: Optional[str]) -> str:
        return "" if v is None else v


class ExpenseRequest(BaseModel):
    """Body of POST /api/expense."""

    title: str = ""
    amount: NumericInput = None

    @field_validator('title', mode='before')
    @classmethod
    def null_title_is_blank(cls, v: Optional[str]) -> str:
        return "" if v is None else v
