"""
HTTP Front-end for Stockbook

Two doors into the same books:
1. POST /webhook/whatsapp - Twilio delivers one chat line, we answer in TwiML
2. /api/*                 - JSON endpoints for scripts and dashboards

Both go through the accounting engine and return its outcome as-is.
Business and validation failures are HTTP 200 with success=false;
only unexpected (storage) failures are HTTP 500.

Run with: uvicorn app.main:app --port 3000
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import Annotated, Any, Optional

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Form, Query
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from twilio.twiml.messaging_response import MessagingResponse

from stockbook import __version__
from stockbook.audit import configure_logging
from stockbook.config import get_settings, validate_all_settings
from stockbook.engine import AccountingEngine
from stockbook.models.ledger import OperationOutcome
from stockbook.models.requests import ExpenseRequest, TradeRequest
from stockbook.orchestrator import CommandFlow, create_app_components


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: configure logging and report which services are configured."""
    configure_logging(get_settings().app.log_level)
    status = validate_all_settings()
    logger.info("startup", version=__version__, services=status)
    yield


app = FastAPI(
    title="Stockbook",
    version=__version__,
    lifespan=lifespan,
)


@lru_cache()
def get_components() -> CommandFlow:
    """Get or create application components (cached)."""
    command_flow, _, _ = create_app_components(use_storage=True)
    return command_flow


def get_command_flow() -> CommandFlow:
    return get_components()


def get_engine(
    command_flow: Annotated[CommandFlow, Depends(get_command_flow)],
) -> AccountingEngine:
    return command_flow.engine


def outcome_response(outcome: OperationOutcome) -> JSONResponse:
    return JSONResponse(
        status_code=500 if outcome.is_unexpected else 200,
        content=outcome.model_dump(mode="json"),
    )


# =============================================================================
# WhatsApp webhook
# =============================================================================

@app.post("/webhook/whatsapp")
async def whatsapp_webhook(
    command_flow: Annotated[CommandFlow, Depends(get_command_flow)],
    body: Annotated[str, Form(alias="Body")] = "",
    sender: Annotated[Optional[str], Form(alias="From")] = None,
) -> Response:
    logger.info("message_received", sender=sender, body=body)
    try:
        reply, _ = await command_flow.handle_message(body, sender=sender)
    except Exception:
        logger.exception("webhook_failed", sender=sender)
        return PlainTextResponse("Internal Server Error", status_code=500)

    logger.info("reply_sent", sender=sender, reply=reply)
    twiml = MessagingResponse()
    twiml.message(reply)
    return Response(content=str(twiml), media_type="text/xml")


# =============================================================================
# REST API
# =============================================================================

@app.get("/health")
async def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": validate_all_settings(),
    }


@app.get("/api/summary")
async def get_summary(
    engine: Annotated[AccountingEngine, Depends(get_engine)],
) -> JSONResponse:
    return outcome_response(await engine.summary())


@app.get("/api/inventory")
async def get_inventory(
    engine: Annotated[AccountingEngine, Depends(get_engine)],
) -> JSONResponse:
    return outcome_response(await engine.inventory())


@app.get("/api/stock")
async def get_stock(
    engine: Annotated[AccountingEngine, Depends(get_engine)],
    item: Optional[str] = Query(None, description="Item name; omit to list all"),
) -> JSONResponse:
    return outcome_response(await engine.stock(item))


@app.get("/api/profit")
async def get_profit(
    engine: Annotated[AccountingEngine, Depends(get_engine)],
) -> JSONResponse:
    return outcome_response(await engine.profit())


@app.post("/api/sell")
async def sell(
    body: TradeRequest,
    engine: Annotated[AccountingEngine, Depends(get_engine)],
) -> JSONResponse:
    return outcome_response(await engine.sell(body.item, body.qty, body.price))


@app.post("/api/buy")
async def buy(
    body: TradeRequest,
    engine: Annotated[AccountingEngine, Depends(get_engine)],
) -> JSONResponse:
    return outcome_response(await engine.buy(body.item, body.qty, body.price))


@app.post("/api/expense")
async def expense(
    body: ExpenseRequest,
    engine: Annotated[AccountingEngine, Depends(get_engine)],
) -> JSONResponse:
    return outcome_response(await engine.expense(body.title, body.amount))


if __name__ == "__main__":
    app_settings = get_settings().app
    uvicorn.run(app, host=app_settings.host, port=app_settings.port)
