"""
FastAPI application: the GenePattern status callback plus the analysis and
server endpoints.

Run with `uvicorn flowgate.api.main:app`. Set FLOWGATE_INIT_DB=true to
create missing tables at startup.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowgate.api.routers import analyses, servers, task_status
from flowgate.config import get_config
from flowgate.logging_utils import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    if os.getenv("FLOWGATE_INIT_DB", "false").lower() == "true":
        from flowgate.database.base import init_db

        init_db()
    yield


def create_app() -> FastAPI:
    cfg = get_config()

    application = FastAPI(
        title="FlowGate Analysis API",
        description="Job status callbacks, remote job results and report downloads",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    # GenePattern calls back on this exact path
    application.include_router(task_status.router, prefix="/taskStatus", tags=["Task Status"])
    application.include_router(analyses.router, prefix="/api/v1/analyses", tags=["Analyses"])
    application.include_router(servers.router, prefix="/api/v1/servers", tags=["Servers"])

    @application.get("/health", tags=["Health"])
    def health() -> dict:
        return {"status": "ok", "polling_enabled": cfg.polling.enabled}

    logger.debug("API created with CORS origins %s", cfg.server.cors_origins)
    return application


app = create_app()
