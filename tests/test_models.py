"""
Tests for Stockbook models

Test strategy:
1. Unit tests for individual components (models, parser, engine)
2. Integration tests for flows (with in-memory storage)
3. No real API calls in tests (use fakes)
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from stockbook.config import AppSettings, validate_all_settings
from stockbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from stockbook.models.ledger import (
    ErrorKind,
    InventoryItem,
    OperationOutcome,
    SaleRecord,
    Summary,
)
from stockbook.models.requests import ExpenseRequest, TradeRequest


class TestLedgerModels:
    """Tests for ledger state and record models."""

    def test_inventory_item_value(self):
        """Value is quantity times average cost."""
        item = InventoryItem(name="pen", quantity=Decimal("4"), average_cost=Decimal("2.5"))
        assert item.value == Decimal("10")

    def test_inventory_item_rejects_negative_quantity(self):
        """Quantity can never go below zero."""
        with pytest.raises(ValueError):
            InventoryItem(name="pen", quantity=Decimal("-1"), average_cost=Decimal("1"))

    def test_inventory_item_is_immutable(self):
        item = InventoryItem(name="pen")
        with pytest.raises(ValidationError):
            item.quantity = Decimal("5")

    def test_summary_defaults_to_zero(self):
        summary = Summary()
        assert summary.cash == summary.total_profit == summary.capital == Decimal("0")

    def test_summary_allows_negative_cash(self):
        assert Summary(cash=Decimal("-50")).cash == Decimal("-50")

    def test_record_ids_are_unique(self):
        """Ids come from uuid4, not the clock."""
        ids = {
            SaleRecord(item="a", quantity=1, sell_price=1, profit=0).id
            for _ in range(50)
        }
        assert len(ids) == 50

    def test_record_timestamp_is_timezone_aware(self):
        record = SaleRecord(item="a", quantity=1, sell_price=1, profit=0)
        assert record.timestamp.tzinfo is not None


class TestOperationOutcome:

    def test_ok(self):
        outcome = OperationOutcome.ok("done", revenue=Decimal("320"))
        assert outcome.success is True
        assert outcome.error is None
        assert outcome.data == {"revenue": Decimal("320")}

    def test_fail(self):
        outcome = OperationOutcome.fail(ErrorKind.BUSINESS_RULE, "no", available=Decimal("0"))
        assert outcome.success is False
        assert outcome.error == ErrorKind.BUSINESS_RULE
        assert not outcome.is_unexpected

    def test_json_dump(self):
        """Decimals serialize as exact strings."""
        outcome = OperationOutcome.fail(ErrorKind.VALIDATION, "bad", qty=Decimal("2.50"))
        dumped = outcome.model_dump(mode="json")
        assert dumped["error"] == "validation_error"
        assert dumped["data"]["qty"] == "2.50"


class TestRequestModels:

    def test_trade_request_accepts_numbers_and_strings(self):
        body = TradeRequest(item="pen", qty=5, price="2.5")
        assert body.qty == Decimal("5")
        assert body.price == "2.5"

    def test_trade_request_keeps_garbage_for_the_engine(self):
        body = TradeRequest(item="pen", qty="lots", price="free")
        assert body.qty == "lots"

    def test_expense_title_defaults_to_blank(self):
        assert ExpenseRequest(amount=5).title == ""

    def test_missing_and_null_fields_reach_the_engine(self):
        body = TradeRequest.model_validate({"item": None, "price": None})
        assert body.item == ""
        assert body.qty is None
        assert body.price is None
        assert ExpenseRequest.model_validate({"title": None}).amount is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.COMMAND_RECEIVED,
            description="Command received",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.SALE_RECORDED,
            description="Sale recorded",
            details={"item": "pen", "profit": "3"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "sale_recorded"
        assert log_dict["details"]["item"] == "pen"

    def test_audit_event_to_sheets_row(self):
        event = AuditEventBuilder.sale_recorded(
            {"item": "pen", "quantity": Decimal("2")}, "whatsapp:+2010", uuid4()
        )
        row = event.to_sheets_row()
        assert len(row) == 9
        assert row[2] == "sale_recorded"
        assert row[5] == "whatsapp:+2010"
        assert '"quantity": "2"' in row[7]

    def test_builder_storage_error_is_error_severity(self):
        event = AuditEventBuilder.storage_error("sell", "timeout", None, uuid4())
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "timeout"

    def test_builder_command_rejected_is_warning(self):
        event = AuditEventBuilder.command_rejected("sell | x", "Wrong format", None, uuid4())
        assert event.event_type == AuditEventType.COMMAND_REJECTED
        assert event.severity == AuditSeverity.WARNING


class TestAppSettings:

    def test_log_level_is_normalized(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"

    def test_unknown_timezone_is_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(timezone="Mars/Olympus")

    def test_tzinfo(self):
        assert AppSettings(timezone="UTC").tzinfo.key == "UTC"


class TestServiceReport:
    """validate_all_settings backs the startup log and GET /health."""

    def test_twilio_reported_when_configured(self, monkeypatch):
        monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
        monkeypatch.setenv("TWILIO_AUTH_TOKEN", "secret")

        assert validate_all_settings()["twilio"] is True

    def test_twilio_reported_missing(self, monkeypatch):
        monkeypatch.delenv("TWILIO_ACCOUNT_SID", raising=False)
        monkeypatch.delenv("TWILIO_AUTH_TOKEN", raising=False)

        report = validate_all_settings()

        assert report["twilio"] is False
        assert "twilio_error" in report
        assert report["app"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
