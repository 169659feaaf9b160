"""FastAPI application that relays journal entries to Gemini for feedback."""
from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from journal_relay.config import get_settings
from journal_relay.logging_config import configure_logging
from journal_relay.relay import JournalRelay, MissingJournalEntry, RelayError, UpstreamFailure
from journal_relay.utils import client_identifier

configure_logging()
LOGGER = logging.getLogger(__name__)

settings = get_settings()
relay = JournalRelay.from_settings(settings)


@asynccontextmanager
async def lifespan(_: FastAPI):
    LOGGER.info("Server running on http://localhost:%s", settings.port)
    yield
    relay.close()


app = FastAPI(title="Journal Feedback Relay", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def render_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers
    )


def get_relay() -> JournalRelay:
    """Provide the process-wide journal relay."""

    return relay


async def _journal_entry(request: Request):
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail=MissingJournalEntry.message)
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail=MissingJournalEntry.message)
    return payload.get("journalEntry")


@app.post("/gemini")
async def gemini_feedback(
    request: Request, journal_relay: JournalRelay = Depends(get_relay)
) -> dict:
    """Return supportive feedback for a journal entry."""

    journal_entry = await _journal_entry(request)
    client_ip = client_identifier(
        request.client.host if request.client else None,
        request.headers.get("x-forwarded-for"),
        trust_proxy=settings.trust_proxy,
    )

    try:
        text = await run_in_threadpool(journal_relay.reply, client_ip, journal_entry)
    except RelayError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Unhandled relay failure", extra={"client_ip": client_ip})
        raise HTTPException(status_code=500, detail=UpstreamFailure.message) from exc

    return {"reply": text}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
