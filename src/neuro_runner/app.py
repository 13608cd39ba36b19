from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import SERVICE_NAME, RunnerConfig
from .errors import RunnerError, error_for_failure
from .forwarder import ChatForwarder
from .logging_utils import JsonlLogger

logger = logging.getLogger(__name__)

HEALTH_PAYLOAD = {"status": "ok", "service": SERVICE_NAME, "mode": "inference"}


def create_app(cfg: RunnerConfig | None = None) -> FastAPI:
    """Build the runner application around an explicit configuration."""
    cfg = cfg or RunnerConfig.load()
    request_log = (
        JsonlLogger(cfg.request_log_path, cfg.max_log_bytes)
        if cfg.request_log_path
        else None
    )
    forwarder = ChatForwarder(cfg, request_log)

    app = FastAPI(title="NeuroSwarm Runner", version=__version__)
    app.state.cfg = cfg
    app.state.forwarder = forwarder

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup():
        logger.info(
            "[runner] NeuroSwarm Runner (AI Bridge) listening on port %s", cfg.port
        )
        logger.info("[runner] Connected to AI Engine at %s", cfg.ollama_url)

    @app.on_event("shutdown")
    async def _shutdown():
        await forwarder.aclose()

    @app.get("/health")
    async def health():
        return dict(HEALTH_PAYLOAD)

    @app.post("/chat")
    async def chat(req: Request):
        try:
            payload = await req.json()
            result = await forwarder.handle_chat(payload)
        except RunnerError as exc:
            return JSONResponse(status_code=exc.status_code, content=exc.detail)
        except ValueError as exc:
            logger.error("[runner] Unreadable request body: %s", exc)
            err = error_for_failure(exc)
            return JSONResponse(status_code=err.status_code, content=err.detail)
        return JSONResponse(content=result)

    return app
