"""
Google Sheets backend for the books

One worksheet per table, header in row 1. The shop owner reads and
exports the books straight from the spreadsheet.

Sheets has no transactions; the accounting engine serializes its own
writes. Lookups scan all rows and filter in Python, which is fine at
the size of a small shop.

Values are written RAW as text and parsed back as Decimal.
Only connection setup and reads are retried; appends are not, so a
flaky network can never produce duplicate rows.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from stockbook.config import GoogleSheetsSettings, get_settings
from stockbook.models.audit import AuditEvent
from stockbook.models.ledger import (
    ExpenseRecord,
    InventoryItem,
    PurchaseRecord,
    SaleRecord,
    Summary,
)
from stockbook.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    LedgerStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


# Column layout per worksheet
INVENTORY_COLUMNS = ["item", "qty", "avg_cost"]
SALES_COLUMNS = ["id", "date", "item", "qty", "sell_price", "profit"]
PURCHASES_COLUMNS = ["id", "date", "item", "qty", "buy_price"]
EXPENSES_COLUMNS = ["id", "date", "title", "amount"]
SUMMARY_COLUMNS = ["cash", "total_profit", "capital"]
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "correlation_id",
    "actor",
    "description",
    "details_json",
    "error_message",
]

# kind -> (settings attribute holding the title, header row)
SHEET_LAYOUT = {
    "inventory": ("inventory_sheet_name", INVENTORY_COLUMNS),
    "sales": ("sales_sheet_name", SALES_COLUMNS),
    "purchases": ("purchases_sheet_name", PURCHASES_COLUMNS),
    "expenses": ("expenses_sheet_name", EXPENSES_COLUMNS),
    "summary": ("summary_sheet_name", SUMMARY_COLUMNS),
    "audit": ("audit_sheet_name", AUDIT_COLUMNS),
}

READ_RETRY = dict(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


def _safe_get(row: list, index: int, default: str = "") -> str:
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


def _to_decimal(raw: str) -> Decimal:
    """Parse a cell; blank cells count as zero."""
    raw = (raw or "").strip()
    if not raw:
        return Decimal("0")
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"Not a number: {raw!r}")
    if not value.is_finite():
        raise ValueError(f"Not a finite number: {raw!r}")
    return value


def _to_datetime(raw: str) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    raw = raw.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class GoogleSheetsClient:
    """
    Service-account connection to one spreadsheet.

    Missing worksheets are created with their header row on first use;
    worksheet handles are cached for the life of the client.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[str, gspread.Worksheet] = {}
        self._settings = settings or get_settings().google_sheets

    @retry(**READ_RETRY)
    def connect(self) -> gspread.Client:
        """Authorize with the service-account key file."""
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Open the spreadsheet named by GOOGLE_SHEETS_SPREADSHEET_ID."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, kind: str) -> gspread.Worksheet:
        """Get or create the worksheet for `kind` (see SHEET_LAYOUT)."""
        if kind in self._worksheets:
            return self._worksheets[kind]

        attr, headers = SHEET_LAYOUT[kind]
        title = getattr(self._settings, attr)
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(headers),
            )
            sheet.append_row(headers)
            logger.info("worksheet_created", title=title)

        if kind == "summary" and len(sheet.get_all_values()) < 2:
            sheet.append_row(["0", "0", "0"], value_input_option="RAW")

        self._worksheets[kind] = sheet
        return sheet

    def initialize(self) -> None:
        """Create every ledger worksheet up front."""
        for kind in SHEET_LAYOUT:
            self.get_worksheet(kind)


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    One worksheet per table; row 1 is always the header row.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @retry(**READ_RETRY)
    async def _read_rows(self, kind: str) -> list[list[str]]:
        """All data rows of a worksheet (header excluded)."""
        return self._client.get_worksheet(kind).get_all_values()[1:]

    def _append(self, kind: str, row: list) -> None:
        self._client.get_worksheet(kind).append_row(row, value_input_option="RAW")

    def _row_to_item(self, row: list) -> InventoryItem:
        return InventoryItem(
            name=_safe_get(row, 0),
            quantity=_to_decimal(_safe_get(row, 1)),
            average_cost=_to_decimal(_safe_get(row, 2)),
        )

    def _row_to_sale(self, row: list) -> SaleRecord:
        return SaleRecord(
            id=_safe_get(row, 0),
            timestamp=_to_datetime(_safe_get(row, 1)),
            item=_safe_get(row, 2),
            quantity=_to_decimal(_safe_get(row, 3)),
            sell_price=_to_decimal(_safe_get(row, 4)),
            profit=_to_decimal(_safe_get(row, 5)),
        )

    async def get_inventory_item(self, name: str) -> Optional[InventoryItem]:
        try:
            for row in await self._read_rows("inventory"):
                if row and row[0] == name:
                    return self._row_to_item(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to read inventory item {name!r}: {e}")

    async def set_inventory_item(
        self,
        name: str,
        quantity: Decimal,
        average_cost: Decimal,
    ) -> InventoryItem:
        item = InventoryItem(name=name, quantity=quantity, average_cost=average_cost)
        values = [name, str(quantity), str(average_cost)]
        try:
            sheet = self._client.get_worksheet("inventory")
            all_rows = sheet.get_all_values()

            # Start from 2 (row 1 is header)
            for idx, row in enumerate(all_rows[1:], start=2):
                if row and row[0] == name:
                    sheet.update(range_name=f"A{idx}:C{idx}", values=[values])
                    return item

            sheet.append_row(values, value_input_option="RAW")
            return item
        except Exception as e:
            raise StorageError(f"Failed to write inventory item {name!r}: {e}")

    async def append_sale(
        self,
        item: str,
        quantity: Decimal,
        price: Decimal,
        profit: Decimal,
    ) -> SaleRecord:
        record = SaleRecord(item=item, quantity=quantity, sell_price=price, profit=profit)
        try:
            self._append("sales", [
                str(record.id),
                record.timestamp.isoformat(),
                record.item,
                str(record.quantity),
                str(record.sell_price),
                str(record.profit),
            ])
            return record
        except Exception as e:
            raise StorageError(f"Failed to save sale: {e}")

    async def append_purchase(
        self,
        item: str,
        quantity: Decimal,
        price: Decimal,
    ) -> PurchaseRecord:
        record = PurchaseRecord(item=item, quantity=quantity, buy_price=price)
        try:
            self._append("purchases", [
                str(record.id),
                record.timestamp.isoformat(),
                record.item,
                str(record.quantity),
                str(record.buy_price),
            ])
            return record
        except Exception as e:
            raise StorageError(f"Failed to save purchase: {e}")

    async def append_expense(self, title: str, amount: Decimal) -> ExpenseRecord:
        record = ExpenseRecord(title=title, amount=amount)
        try:
            self._append("expenses", [
                str(record.id),
                record.timestamp.isoformat(),
                record.title,
                str(record.amount),
            ])
            return record
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")

    async def get_summary(self) -> Summary:
        try:
            rows = await self._read_rows("summary")
            if not rows:
                return Summary()
            row = rows[0]
            return Summary(
                cash=_to_decimal(_safe_get(row, 0)),
                total_profit=_to_decimal(_safe_get(row, 1)),
                capital=_to_decimal(_safe_get(row, 2)),
            )
        except Exception as e:
            raise StorageError(f"Failed to read summary: {e}")

    async def set_summary(
        self,
        cash: Decimal,
        total_profit: Decimal,
        capital: Decimal,
    ) -> Summary:
        try:
            sheet = self._client.get_worksheet("summary")
            sheet.update(
                range_name="A2:C2",
                values=[[str(cash), str(total_profit), str(capital)]],
            )
            return Summary(cash=cash, total_profit=total_profit, capital=capital)
        except Exception as e:
            raise StorageError(f"Failed to write summary: {e}")

    async def list_inventory(self) -> list[InventoryItem]:
        try:
            rows = await self._read_rows("inventory")
        except Exception as e:
            raise StorageError(f"Failed to list inventory: {e}")

        items = []
        for row in rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                items.append(self._row_to_item(row))
            except ValueError as e:
                logger.warning("malformed_inventory_row", row=row, error=str(e))
        return items

    async def list_sales(self) -> list[SaleRecord]:
        try:
            rows = await self._read_rows("sales")
        except Exception as e:
            raise StorageError(f"Failed to list sales: {e}")

        sales = []
        for row in rows:
            if not row or not row[0]:
                continue
            try:
                sales.append(self._row_to_sale(row))
            except ValueError as e:
                logger.warning("malformed_sale_row", row=row, error=str(e))
        return sales


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """Appends audit events to the audit_log worksheet."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            sheet = self._client.get_worksheet("audit")
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Audit failures never surface to the chat user
            logger.warning("audit_write_failed", error=str(e), event_id=str(event.event_id))
            return False
