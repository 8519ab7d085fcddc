"""FastAPI application serving the per-category harm summary.

Read-only view over the ``harm_by_category`` table written by the Kedro
``reporting`` pipeline, so dashboards can query the same numbers the
charts were drawn from.

Run locally (after ``kedro run``):
    uvicorn stormharm.api:app --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import pandas as pd
from fastapi import FastAPI, HTTPException, Query

from stormharm import __version__
from stormharm.event_types import EventCategory

logger = logging.getLogger(__name__)

# ── Configuration ────────────────────────────────────────────────
# Relative to the project root (where uvicorn is launched).
SUMMARY_PATH = Path(
    os.environ.get(
        "STORMHARM_SUMMARY_PATH", "data/08_reporting/harm_by_category.parquet"
    )
)

# Populated at startup, read at request time.
_state: dict = {}


# ── Helpers ──────────────────────────────────────────────────────
def _row_to_dict(row: pd.Series) -> dict:
    return {
        "event_type": row["event.type"],
        "events": int(row["events"]),
        "fatalities": int(row["health.fatalities"]),
        "injuries": int(row["health.injuries"]),
        "property_damage_dollars": round(float(row["economic.property.damage"]), 2),
        "crop_damage_dollars": round(float(row["economic.crop.damage"]), 2),
    }


def _ranked(by: str, top_n: int) -> list[dict]:
    summary: pd.DataFrame = _state["summary"]
    top = summary.sort_values([by, "event.type"], ascending=[False, True]).head(top_n)
    return [_row_to_dict(row) for _, row in top.iterrows()]


# ── Lifespan (startup / shutdown) ────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the category summary into memory once at startup."""
    logger.info("Loading category summary from %s", SUMMARY_PATH)
    summary = pd.read_parquet(SUMMARY_PATH)
    _state["summary"] = summary
    _state["by_category"] = summary.set_index("event.type", drop=False)

    logger.info("API ready: %d categories", len(summary))

    yield

    logger.info("Shutting down API")


# ── App ──────────────────────────────────────────────────────────
app = FastAPI(
    title="Storm Harm",
    description=(
        "Fatalities, injuries and property/crop damage from US storm events, "
        "summed per normalized event category."
    ),
    version=__version__,
    lifespan=lifespan,
)


# ── Endpoints ────────────────────────────────────────────────────
@app.get("/health")
async def health_check():
    """Liveness probe."""
    return {"status": "healthy"}


@app.get("/harm/population")
async def population_harm(
    top_n: int = Query(default=10, ge=1, le=len(EventCategory)),
):
    """Categories ranked by fatalities + injuries."""
    return {"ranking": _ranked("health.total", top_n)}


@app.get("/harm/economic")
async def economic_harm(
    top_n: int = Query(default=10, ge=1, le=len(EventCategory)),
):
    """Categories ranked by property + crop damage in dollars."""
    return {"ranking": _ranked("economic.total", top_n)}


@app.get("/categories/{category}")
async def category_detail(category: str):
    """Totals for one category, e.g. ``/categories/tornado``."""
    by_category: pd.DataFrame = _state["by_category"]
    key = category.strip().lower()

    if key not in by_category.index:
        raise HTTPException(
            status_code=404,
            detail=(
                f"Category '{category}' not found. "
                f"Valid categories: {[c.value for c in EventCategory]}"
            ),
        )

    return _row_to_dict(by_category.loc[key])
