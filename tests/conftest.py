"""
Shared fixtures.

Every test gets its own in-memory books; nothing touches Google Sheets
or the network.
"""

from datetime import datetime, timezone

import pytest

from stockbook.audit import AuditLogger
from stockbook.config import AppSettings
from stockbook.engine import AccountingEngine
from stockbook.orchestrator import CommandFlow
from stockbook.services.storage import InMemoryAuditStorage, InMemoryLedgerStorage


FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def app_settings() -> AppSettings:
    return AppSettings(currency="EGP", timezone="UTC")


@pytest.fixture()
def storage() -> InMemoryLedgerStorage:
    return InMemoryLedgerStorage()


@pytest.fixture()
def engine(storage, app_settings) -> AccountingEngine:
    return AccountingEngine(storage, settings=app_settings, clock=lambda: FIXED_NOW)


@pytest.fixture()
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture()
def command_flow(engine, audit_storage) -> CommandFlow:
    return CommandFlow(engine, audit_logger=AuditLogger(audit_storage))
