# resilience_radar/main.py
from __future__ import annotations

from typing import Optional
import logging
from fastapi import FastAPI
from fastapi.routing import APIRoute

from resilience_radar.providers.gdelt_provider import GdeltClient
from resilience_radar.providers.wb_provider import WorldBankClient
from resilience_radar.routes import model
from resilience_radar.services.engine import ResilienceEngine
from resilience_radar.services.indicator_service import IndicatorResolver

logger = logging.getLogger("resilience-radar")
logging.basicConfig(level=logging.INFO)


# --- keep operation_id stable (avoid FastAPI auto-dedupe renaming) ----------
def _fixed_unique_id(route: APIRoute) -> str:
    return route.operation_id or f"{route.name}_{route.path}".strip("/").replace("/", "_")


def build_engine() -> ResilienceEngine:
    resolver = IndicatorResolver(series=WorldBankClient(), events=GdeltClient())
    return ResilienceEngine(resolver)


def create_app(engine: Optional[ResilienceEngine] = None) -> FastAPI:
    app = FastAPI(
        title="Resilience Radar API",
        description="Country resilience scores and forecasts",
        version="2025.11.0",
        generate_unique_id_function=_fixed_unique_id,
    )
    # one engine (and one cache) per process
    app.state.engine = engine or build_engine()
    app.include_router(model.router)
    logger.info("[init] model router mounted")

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    return app


app = create_app()
