"""Optional FastAPI status service for a running xfernotify daemon.

Install with `pip install xfernotify[server]` to enable.
This keeps the daemon itself dependency-light.
"""
from __future__ import annotations

import threading
from typing import Dict, Optional

try:  # pragma: no cover - optional dependency
    from fastapi import FastAPI
    from pydantic import BaseModel
except Exception as exc:  # noqa: BLE001
    raise RuntimeError(
        "FastAPI not installed. Install with `pip install xfernotify[server]` to use the status service."  # noqa: E501
    ) from exc

from . import __version__
from .config import SINK_TYPES, AppConfig
from .metrics import Counters


class StatsResponse(BaseModel):
    uptime_seconds: float
    lines_read: int
    records_parsed: int
    lines_invalid: int
    pipe_reopens: int
    deliveries: Dict[str, int]
    skips: Dict[str, int]
    failures: Dict[str, int]


class OutputsResponse(BaseModel):
    pipe: str
    instances: Dict[str, int]


def build_app(counters: Optional[Counters] = None, config: Optional[AppConfig] = None) -> FastAPI:
    counters = counters or Counters()
    app = FastAPI(title="xfernotify status", version=__version__)

    @app.get("/healthz")
    def health() -> dict[str, str]:  # pragma: no cover - trivial
        return {"status": "ok"}

    @app.get("/stats", response_model=StatsResponse)
    def stats() -> StatsResponse:
        return StatsResponse(**counters.snapshot())

    @app.get("/outputs", response_model=OutputsResponse)
    def outputs() -> OutputsResponse:
        cfg = config or AppConfig()
        # Only counts are exposed; instance options may hold access tokens.
        return OutputsResponse(
            pipe=cfg.pipe,
            instances={name: len(cfg.outputs.get(name, ())) for name in SINK_TYPES},
        )

    return app


def serve_in_background(app: FastAPI, host: str, port: int) -> threading.Thread:  # pragma: no cover - integration feature
    import uvicorn

    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, name="xfernotify-status", daemon=True)
    thread.start()
    return thread


__all__ = ["build_app", "serve_in_background"]
