"""
Main Orchestrator for Stockbook

This module ties together all the components and defines the
end-to-end chat flow:
text → parse → execute on the books → reply text

DESIGN DECISION: The orchestrator owns no state of its own.
Storage, engine and audit logger are passed in, so tests can
assemble an isolated set of components with in-memory storage.
"""

from typing import Optional
from uuid import UUID

import structlog

from stockbook.audit import AuditLogger, create_correlation_id
from stockbook.config import AppSettings, get_settings
from stockbook.engine import AccountingEngine
from stockbook.models.commands import ParseFailure
from stockbook.models.ledger import OperationOutcome
from stockbook.parsing import parse_command
from stockbook.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
)


logger = structlog.get_logger(__name__)


class CommandFlow:
    """
    Orchestrates one chat command.

    Flow:
    1. Audit the raw text
    2. Parse → typed command (or a formatting error)
    3. Execute on the accounting engine
    4. Audit the outcome
    5. Return the reply text
    """

    def __init__(
        self,
        engine: AccountingEngine,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._engine = engine
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def engine(self) -> AccountingEngine:
        return self._engine

    async def handle_message(
        self,
        text: Optional[str],
        sender: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[str, OperationOutcome]:
        """
        Handle one inbound chat message.

        Returns:
            (reply_text, outcome)
        """
        correlation_id = correlation_id or create_correlation_id()
        text = text or ""

        await self._audit_logger.log_command_received(text, sender, correlation_id)

        command = parse_command(text)
        if isinstance(command, ParseFailure):
            await self._audit_logger.log_command_rejected(
                text, command.message, sender, correlation_id
            )
            outcome = await self._engine.execute(command)
            return outcome.message, outcome

        outcome = await self._engine.execute(command)
        await self._audit_logger.log_operation(
            operation=command.type.value,
            success=outcome.success,
            error_kind=outcome.error.value if outcome.error else None,
            message=outcome.message,
            data=outcome.data,
            actor=sender,
            correlation_id=correlation_id,
        )
        return outcome.message, outcome


def create_app_components(
    use_storage: bool = True,
    settings: Optional[AppSettings] = None,
) -> tuple[CommandFlow, LedgerStorageInterface, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run on in-memory storage.
        settings: App settings; defaults to the environment.

    Returns:
        (command_flow, ledger_storage, sheets_client)
    """
    settings = settings or get_settings().app
    sheets_client = None
    audit_logger = None
    ledger_storage: LedgerStorageInterface

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            sheets_client.initialize()
            ledger_storage = GoogleSheetsLedgerStorage(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            ledger_storage = InMemoryLedgerStorage()
            audit_logger = AuditLogger()  # Local-only logging
    else:
        ledger_storage = InMemoryLedgerStorage()
        audit_logger = AuditLogger()  # Local-only logging

    engine = AccountingEngine(ledger_storage, settings=settings)
    command_flow = CommandFlow(engine, audit_logger=audit_logger)

    return command_flow, ledger_storage, sheets_client
