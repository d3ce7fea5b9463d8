from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from backend.settings import APP_NAME, APP_VERSION
from backend.settings_store import load_settings
from webapp.routers import graph as graph_router

log = logging.getLogger("chainscope.server")


def create_app() -> FastAPI:
    settings = load_settings()

    app = FastAPI(title=f"{APP_NAME} Web", version=APP_VERSION)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins or []),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )
    app.include_router(graph_router.router)

    @app.get("/", include_in_schema=False)
    def home() -> Any:
        return RedirectResponse(url="/docs")

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({
            "status": "online",
            "app": APP_NAME,
            "version": APP_VERSION,
            "analysis_backend": load_settings().api_base_url,
        })

    log.info("%s %s ready (analysis backend: %s)", APP_NAME, APP_VERSION, settings.api_base_url)
    return app


app = create_app()
