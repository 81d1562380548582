# resilience_radar/routes/model.py: model score + forecast over the shared engine
from __future__ import annotations

from typing import List, Optional
import math

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["model"])


@router.get(
    "/v1/model/score",
    summary="Model Score",
    operation_id="model_score_get",
    description=(
        "Live resilience score for one country: four pillars (social, economic,\n"
        "institutional, infrastructure) with per-indicator coverage, and their mean.\n"
        "Cached for a few hours; pass fresh=true to recompute."
    ),
)
def model_score(
    request: Request,
    country: str = Query("USA", description="ISO alpha-3 code, e.g. KEN"),
    fresh: bool = Query(False, description="Bypass cache if true"),
) -> JSONResponse:
    engine = request.app.state.engine
    payload = engine.model_score(country, fresh=fresh)
    if payload is None:
        return JSONResponse(status_code=404, content={"error": "Country not found"})
    return JSONResponse(content=payload)


@router.get(
    "/v1/forecast",
    summary="Forecast",
    operation_id="forecast_get",
    description="Forecast a yearly 0-100 score series with 80%/95% bands.",
)
def forecast(
    request: Request,
    values: List[float] = Query(..., description="Historical values, oldest first"),
    horizon: int = Query(6, ge=1, le=30),
    last_year: Optional[int] = Query(None, description="Year of the last historical value"),
    target: Optional[float] = Query(None, ge=0, le=100, description="Mean-reversion target"),
) -> JSONResponse:
    if not all(math.isfinite(v) for v in values):
        return JSONResponse(status_code=422, content={"error": "values must be finite numbers"})
    engine = request.app.state.engine
    kwargs = {"mean_reversion_target": target}
    if last_year is not None:
        kwargs["last_year"] = last_year
    return JSONResponse(content=engine.forecast(values, horizon, **kwargs))
