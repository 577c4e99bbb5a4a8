#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - FastAPI Application
HTTP surface over per-user application sessions

Version: 1.0.0
Date: 2026-10-19
"""

import time
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sahaayak import __version__
from sahaayak.api import chat, community, journeys, wellness
from sahaayak.api.dependencies import SessionRegistry
from sahaayak.api.schemas import HealthCheck
from sahaayak.core.database import KeyedRecordStore, create_record_store
from sahaayak.core.models import ValidationError
from sahaayak.core.oracle import TextOracle, create_oracle
from sahaayak.core.session import TurnInProgressError

logger = logging.getLogger(__name__)

def create_app(store: Optional[KeyedRecordStore] = None, oracle: Optional[TextOracle] = None,
               app_config=None) -> FastAPI:
    """Application factory; builds the store and oracle from configuration when not given"""
    if app_config is None:
        from sahaayak.config import config as app_config

    if store is None:
        app_config.ensure_directories()
        store = create_record_store(app_config.database)
    if oracle is None:
        oracle = create_oracle(app_config.ai)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Starting Sahaayak API...")
        app.state.started_at = time.time()
        await store.start()
        logger.info(f"🤖 Oracle available: {oracle.available}")
        logger.info("✅ Sahaayak API ready")

        yield

        logger.info("🛑 Stopping Sahaayak API...")
        try:
            await store.shutdown()
            logger.info("✅ Resources released")
        except Exception as e:
            logger.error(f"❌ Error during shutdown: {e}")

    app = FastAPI(
        title="Sahaayak",
        description="Conversational safety and persona orchestration engine",
        version=__version__,
        docs_url="/api/docs" if app_config.server.debug_mode or app_config.is_development() else None,
        redoc_url=None,
        lifespan=lifespan
    )
    app.state.registry = SessionRegistry(store, oracle, app_config)
    app.state.started_at = time.time()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    features = app_config.get_feature_status()
    app.include_router(chat.router)
    app.include_router(wellness.router)
    if features.get('journeys', True):
        app.include_router(journeys.router)
    if features.get('community', True):
        app.include_router(community.router)

    # ===== SERVICE ROUTES =====

    @app.get("/health", response_model=HealthCheck)
    async def health_check():
        """Store and oracle health"""
        store_health = store.get_health_status()
        healthy = store_health.get('status') == 'healthy'
        return HealthCheck(
            status="healthy" if healthy else "degraded",
            service="sahaayak",
            version=__version__,
            timestamp=time.time(),
            data={
                'store': store_health,
                'oracle': oracle.get_health_status(),
                'features': features,
                'active_sessions': app.state.registry.active_sessions,
                'uptime_seconds': time.time() - app.state.started_at
            }
        )

    @app.get("/api/stats")
    async def get_stats():
        return app.state.registry.get_stats()

    # ===== ERROR HANDLERS =====

    @app.exception_handler(TurnInProgressError)
    async def turn_in_progress_handler(request: Request, exc: TurnInProgressError):
        return JSONResponse(status_code=409, content={"detail": str(exc), "status_code": 409})

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc), "status_code": 422})

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "status_code": exc.status_code}
        )

    return app

def run_server(host: Optional[str] = None, port: Optional[int] = None, app_config=None) -> None:
    """Serve the API with uvicorn"""
    import uvicorn

    if app_config is None:
        from sahaayak.config import config as app_config

    host = host or app_config.server.host
    port = port or app_config.server.port
    logger.info(f"🌐 Serving Sahaayak on http://{host}:{port}")
    uvicorn.run(create_app(app_config=app_config), host=host, port=port, log_config=None)

__all__ = ['create_app', 'run_server']
