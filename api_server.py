#!/usr/bin/env python3
"""
Outreach Window Planner — Signals API
======================================
Serves ONLY simulated, delayed/aggregated or public-calendar data. It never
provides real-time enforcement data, individual locations or predictive
enforcement models. Every response carries the provenance disclaimer.

Run: uvicorn api_server:app --reload

GET /api/signals
    start     ISO 8601 (default: now)
    end       ISO 8601 (default: start + 7 days)
    scenario  'on' | 'off' (default: off)
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from compute_windows import RangeError, build_signals_response
from planner_config import DATA_DIR
from signal_catalog import to_timestamp


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    print(f"INFO: Outreach Window Planner API ready (data dir: {DATA_DIR})")
    yield


app = FastAPI(
    title="Outreach Window Planner API",
    version="0.1.0",
    lifespan=lifespan,
)


def _error(message, status_code=400):
    return JSONResponse({"error": message}, status_code=status_code)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/api/signals")
def get_signals(
    start: Optional[str] = None,
    end: Optional[str] = None,
    scenario: str = "off",
):
    """Signals, overlaps and computed windows for the requested range."""
    try:
        start_ts = to_timestamp(start) if start else None
        end_ts = to_timestamp(end) if end else None
    except ValueError:
        return _error("Invalid date format. Use ISO 8601 format.")

    try:
        return build_signals_response(start_ts, end_ts, include_scenario=scenario == "on")
    except RangeError as e:
        return _error(str(e))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_server:app", host="127.0.0.1", port=8000)
