"""
HTTP tests: the WhatsApp webhook and the JSON API.

The app's command flow dependency is overridden with one that runs on
in-memory storage.
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.main import app, get_command_flow
from stockbook.config import AppSettings
from stockbook.engine import AccountingEngine
from stockbook.orchestrator import CommandFlow
from stockbook.services.storage import InMemoryLedgerStorage

pytestmark = pytest.mark.asyncio


class DownStorage(InMemoryLedgerStorage):
    async def get_summary(self):
        raise RuntimeError("sheets unavailable")


def build_flow(storage) -> CommandFlow:
    engine = AccountingEngine(
        storage,
        settings=AppSettings(currency="EGP", timezone="UTC"),
        clock=lambda: datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc),
    )
    return CommandFlow(engine)


@pytest.fixture()
def storage() -> InMemoryLedgerStorage:
    return InMemoryLedgerStorage()


@pytest_asyncio.fixture()
async def client(storage):
    flow = build_flow(storage)
    app.dependency_overrides[get_command_flow] = lambda: flow
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


class TestWebhook:

    async def test_replies_with_twiml(self, client):
        response = await client.post(
            "/webhook/whatsapp",
            data={"Body": "buy | tshirt | 10 | 50", "From": "whatsapp:+201000000000"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")
        assert "<Response><Message>" in response.text
        assert "Purchase recorded" in response.text

    async def test_format_error_is_still_a_reply(self, client):
        response = await client.post("/webhook/whatsapp", data={"Body": "sell | pen"})

        assert response.status_code == 200
        assert "sell | item | quantity | price" in response.text

    async def test_missing_body_gets_unknown_command(self, client):
        response = await client.post("/webhook/whatsapp", data={"From": "whatsapp:+201000000000"})

        assert response.status_code == 200
        assert "Unknown command" in response.text

    async def test_chat_changes_are_visible_over_rest(self, client):
        await client.post("/webhook/whatsapp", data={"Body": "buy | pen | 4 | 2.5"})

        response = await client.get("/api/stock", params={"item": "pen"})

        assert response.json()["data"]["quantity"] == "4"


class TestRestApi:

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "twilio" in response.json()["services"]

    async def test_buy_then_sell(self, client):
        buy = await client.post("/api/buy", json={"item": "tshirt", "qty": 10, "price": 50})
        sell = await client.post("/api/sell", json={"item": "tshirt", "qty": "4", "price": "80"})

        assert buy.json()["data"]["average_cost"] == "50"
        body = sell.json()
        assert body["success"] is True
        assert body["error"] is None
        assert body["data"]["revenue"] == "320"
        assert body["data"]["profit"] == "120"
        assert body["data"]["remaining"] == "6"

    async def test_business_rule_failure_is_200(self, client):
        response = await client.post("/api/sell", json={"item": "shoes", "qty": 1, "price": 100})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "business_rule_error"
        assert body["data"]["available"] == "0"

    async def test_validation_failure_is_200(self, client, storage):
        response = await client.post("/api/buy", json={"item": "pen", "qty": "lots", "price": 1})

        assert response.status_code == 200
        assert response.json()["error"] == "validation_error"
        assert storage.purchases == []

    async def test_expense_and_summary(self, client):
        await client.post("/api/expense", json={"title": "rent", "amount": 200})

        response = await client.get("/api/summary")

        data = response.json()["data"]
        assert data == {"cash": "-200", "total_profit": "-200", "capital": "0"}

    async def test_inventory_and_profit(self, client):
        await client.post("/api/buy", json={"item": "pen", "qty": 10, "price": 1})
        await client.post("/api/sell", json={"item": "pen", "qty": 5, "price": 3})

        inventory = (await client.get("/api/inventory")).json()["data"]["items"]
        profit = (await client.get("/api/profit")).json()["data"]

        assert inventory == [{"name": "pen", "quantity": "5", "average_cost": "1"}]
        assert profit["today"] == "10"
        assert profit["total_profit"] == "10"

    async def test_stock_without_item_lists_everything(self, client):
        response = await client.get("/api/stock")

        assert response.json()["message"] == "No inventory yet"

    async def test_missing_amount_gets_the_validation_message(self, client, storage):
        response = await client.post("/api/expense", json={"title": "rent"})

        assert response.status_code == 200
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Enter a valid positive amount"
        assert storage.expenses == []

    async def test_null_trade_fields_get_the_validation_message(self, client):
        response = await client.post("/api/sell", json={"item": None, "qty": None, "price": 5})

        assert response.status_code == 200
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Enter valid positive numbers for quantity and price"

    async def test_non_object_body_is_422(self, client):
        response = await client.post("/api/buy", json=["pen", 1, 5])

        assert response.status_code == 422

    async def test_unexpected_failure_is_500(self):
        app.dependency_overrides[get_command_flow] = lambda: build_flow(DownStorage())
        try:
            async with AsyncClient(
                transport=ASGITransport(app=app),
                base_url="http://test",
            ) as ac:
                response = await ac.get("/api/summary")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["error"] == "unexpected_error"
        assert response.json()["message"] == "Something went wrong. Please try again."
