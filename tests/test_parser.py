"""Tests for the chat command parser."""

import pytest

from stockbook.models.commands import (
    BuyCommand,
    CommandType,
    ExpenseCommand,
    HelpCommand,
    ParseFailure,
    ProfitCommand,
    SellCommand,
    StockCommand,
)
from stockbook.parsing import parse_command, split_fields
from stockbook.parsing.parser import (
    BUY_USAGE,
    EXPENSE_USAGE,
    SELL_USAGE,
    UNKNOWN_COMMAND,
)


class TestTradeCommands:
    """sell / buy need exactly item, quantity and price."""

    def test_sell_parses_fields_as_strings(self):
        command = parse_command("sell | tshirt | 5 | 80")
        assert command == SellCommand(item="tshirt", qty="5", price="80")
        assert command.type == CommandType.SELL

    def test_buy_parses_fields_as_strings(self):
        command = parse_command("buy|pen|5|2.5")
        assert command == BuyCommand(item="pen", qty="5", price="2.5")

    def test_keyword_is_case_insensitive_and_trimmed(self):
        command = parse_command("   SeLL  |  Red Shirt  | 2 |  10  ")
        assert isinstance(command, SellCommand)
        assert command.item == "Red Shirt"
        assert command.price == "10"

    def test_item_name_keeps_its_case(self):
        command = parse_command("buy | TShirt | 1 | 1")
        assert command.item == "TShirt"

    def test_sell_with_missing_fields_is_rejected(self):
        result = parse_command("sell | onlyitem")
        assert result == ParseFailure(message=SELL_USAGE)

    def test_sell_with_extra_fields_is_rejected(self):
        result = parse_command("sell | a | 1 | 2 | 3")
        assert isinstance(result, ParseFailure)

    def test_buy_with_wrong_arity_is_rejected(self):
        assert parse_command("buy | pen | 5") == ParseFailure(message=BUY_USAGE)

    def test_numbers_are_not_validated_here(self):
        command = parse_command("sell | pen | lots | free")
        assert command == SellCommand(item="pen", qty="lots", price="free")


class TestExpenseCommand:

    def test_expense_parses(self):
        assert parse_command("expense | rent | 200") == ExpenseCommand(
            title="rent", amount="200"
        )

    def test_expense_keeps_blank_title(self):
        assert parse_command("expense |  | 50") == ExpenseCommand(title="", amount="50")

    def test_expense_wrong_arity(self):
        assert parse_command("expense | rent") == ParseFailure(message=EXPENSE_USAGE)
        assert parse_command("expense | rent | 1 | 2") == ParseFailure(message=EXPENSE_USAGE)


class TestReadCommands:

    def test_stock_without_item_lists_all(self):
        assert parse_command("stock") == StockCommand(item=None)

    def test_stock_with_blank_item_lists_all(self):
        assert parse_command("stock | ") == StockCommand(item=None)

    def test_stock_with_item(self):
        assert parse_command("stock | pen") == StockCommand(item="pen")

    def test_stock_ignores_extra_fields(self):
        assert parse_command("stock | pen | extra") == StockCommand(item="pen")

    def test_profit(self):
        assert parse_command("PROFIT") == ProfitCommand()

    def test_profit_does_not_check_arity(self):
        assert parse_command("profit | whatever") == ProfitCommand()

    @pytest.mark.parametrize("text", ["help", "Help", "مساعدة", " help | me "])
    def test_help_and_alias(self, text):
        assert parse_command(text) == HelpCommand()


class TestParserIsTotal:

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "|", "refund | pen | 1", "hello there", "||||", None],
    )
    def test_unknown_input_never_raises(self, text):
        result = parse_command(text)
        assert result == ParseFailure(message=UNKNOWN_COMMAND)

    def test_split_fields_trims_segments(self):
        assert split_fields(" a | b |c ") == ["a", "b", "c"]
