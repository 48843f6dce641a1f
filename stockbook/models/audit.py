"""
Audit Models for Stockbook

One AuditEvent per notable step of a chat command: received,
rejected, recorded, failed. Events are only ever appended; the audit
sheet is how an owner reconciles the Summary against the record sheets.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from stockbook.models.ledger import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Inbound
    COMMAND_RECEIVED = "command_received"
    COMMAND_REJECTED = "command_rejected"

    # Ledger mutations
    SALE_RECORDED = "sale_recorded"
    PURCHASE_RECORDED = "purchase_recorded"
    EXPENSE_RECORDED = "expense_recorded"

    # Failures
    OPERATION_FAILED = "operation_failed"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """One entry of the audit trail."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Correlation - ties every event of one command together
    correlation_id: Optional[UUID] = None

    # Who sent it (WhatsApp number, "api", ...)
    actor: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Keyword arguments for a structlog call."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "actor": self.actor,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Row for the audit_log worksheet. Columns:
        [event_id, timestamp, event_type, severity, correlation_id,
         actor, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            str(self.correlation_id) if self.correlation_id else "",
            self.actor or "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Factory methods, one per ledger event type.

    Usage:
        event = AuditEventBuilder.command_received("sell | pen | 1 | 5", actor, cid)
        event = AuditEventBuilder.sale_recorded(details, actor, cid)
    """

    @staticmethod
    def command_received(
        text: str,
        actor: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_RECEIVED,
            correlation_id=correlation_id,
            actor=actor,
            description=f"Command received: {text[:200]}",
            details={"text": text},
        )

    @staticmethod
    def command_rejected(
        text: str,
        reason: str,
        actor: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            actor=actor,
            description="Command could not be parsed",
            details={"text": text, "reason": reason},
        )

    @staticmethod
    def sale_recorded(
        details: dict[str, Any],
        actor: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SALE_RECORDED,
            correlation_id=correlation_id,
            actor=actor,
            description=f"Sale recorded: {details.get('item')} x {details.get('quantity')}",
            details=details,
        )

    @staticmethod
    def purchase_recorded(
        details: dict[str, Any],
        actor: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PURCHASE_RECORDED,
            correlation_id=correlation_id,
            actor=actor,
            description=f"Purchase recorded: {details.get('item')} x {details.get('quantity')}",
            details=details,
        )

    @staticmethod
    def expense_recorded(
        details: dict[str, Any],
        actor: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_RECORDED,
            correlation_id=correlation_id,
            actor=actor,
            description=f"Expense recorded: {details.get('title')}",
            details=details,
        )

    @staticmethod
    def operation_failed(
        operation: str,
        error_kind: str,
        message: str,
        actor: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            actor=actor,
            description=f"{operation} refused: {error_kind}",
            details={"operation": operation, "error": error_kind},
            error_message=message,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        actor: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            actor=actor,
            description=f"Storage failure during {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
