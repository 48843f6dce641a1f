"""
Audit Logger

Every chat line that reaches the books leaves a trail: who sent it,
what it was parsed into, and what it changed. Events of one message
share a correlation id.

configure_logging() also lives here because the audit trail is the
main consumer of the JSON log stream.

A failing audit sheet is logged and otherwise ignored.
"""

import logging
import sys
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from stockbook.models.audit import AuditEvent, AuditEventBuilder
from stockbook.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog (JSON to stdout) on top of stdlib logging.

    Call once at process start.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Writes audit events to the local structlog stream and, when a
    storage backend is given, to the audit_log worksheet.
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        self._storage = storage
        self._logger = structlog.get_logger("stockbook.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Emit one event.

        Returns False only when a configured storage rejected the write.
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_command_received(
        self,
        text: str,
        actor: Optional[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.command_received(text, actor, correlation_id))

    async def log_command_rejected(
        self,
        text: str,
        reason: str,
        actor: Optional[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.command_rejected(text, reason, actor, correlation_id))

    async def log_operation(
        self,
        operation: str,
        success: bool,
        error_kind: Optional[str],
        message: str,
        data: dict[str, Any],
        actor: Optional[str],
        correlation_id: UUID,
    ) -> None:
        """Log the result of one engine operation."""
        if not success:
            if error_kind == "unexpected_error":
                event = AuditEventBuilder.storage_error(
                    operation=operation,
                    error_message=message,
                    actor=actor,
                    correlation_id=correlation_id,
                )
            else:
                event = AuditEventBuilder.operation_failed(
                    operation=operation,
                    error_kind=error_kind or "unknown",
                    message=message,
                    actor=actor,
                    correlation_id=correlation_id,
                )
        elif operation == "sell":
            event = AuditEventBuilder.sale_recorded(data, actor, correlation_id)
        elif operation == "buy":
            event = AuditEventBuilder.purchase_recorded(data, actor, correlation_id)
        elif operation == "expense":
            event = AuditEventBuilder.expense_recorded(data, actor, correlation_id)
        else:
            # Reads are not audited
            return

        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of each inbound command.
    """
    return uuid4()
