"""
Sessionflow - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the session handler factory
3. Runs the API with session middleware and out-of-band garbage collection

All session logic is in the modules, following black box principles.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI

from sessionflow.config.provider import ConfigProvider, EnvConfigProvider
from sessionflow.modules.api import (
    FlashRequest,
    SessionResponse,
    SetValuesRequest,
    TempRequest,
)
from sessionflow.modules.handlers import HandlerFactory
from sessionflow.modules.middleware import SessionMiddleware, get_session
from sessionflow.modules.session import Clock, SessionError, SessionManager

logger = logging.getLogger(__name__)


async def run_gc_loop(factory: HandlerFactory, interval: int) -> None:
    """Purge idle session records every interval seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await factory.gc()
        except SessionError as e:
            logger.error(f"Session gc pass failed: {e}")


def snapshot(session: SessionManager) -> SessionResponse:
    return SessionResponse(
        data=session.get(),
        flash_keys=list(session.get_flash_keys()),
        temp_keys=list(session.get_temp_keys()),
        regenerated=session.did_regenerate,
        persistent=session.is_available,
    )


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    clock: Optional[Clock] = None,
    run_gc: bool = True,
) -> FastAPI:
    """
    Build the Sessionflow API.

    Args:
        config_provider: Configuration source (environment by default)
        clock: Time source for sessions and gc
        run_gc: Start the background gc loop in the lifespan
    """
    config_provider = config_provider or EnvConfigProvider()
    session_config = config_provider.get_session_config()
    factory = HandlerFactory(session_config, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Sessionflow API...")
        await factory.connect()

        gc_task = None
        if run_gc and session_config.gc_interval > 0:
            gc_task = asyncio.create_task(run_gc_loop(factory, session_config.gc_interval))

        logger.info("Sessionflow API started successfully")
        yield

        logger.info("Shutting down Sessionflow API...")
        if gc_task:
            gc_task.cancel()
            try:
                await gc_task
            except asyncio.CancelledError:
                pass
        await factory.disconnect()
        logger.info("Sessionflow API shutdown complete")

    app = FastAPI(
        title="Sessionflow API",
        description="Server-side sessions with flash and temp data",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.handler_factory = factory
    app.middleware("http")(
        SessionMiddleware(
            factory,
            session_config,
            clock=clock,
            skip_paths={"/health": ["GET"]},
        )
    )

    @app.get("/health")
    async def health():
        return {"status": "healthy", "driver": factory.driver}

    @app.get("/session", response_model=SessionResponse)
    async def read_session(session: SessionManager = Depends(get_session)):
        return snapshot(session)

    @app.put("/session", response_model=SessionResponse)
    async def write_session(body: SetValuesRequest, session: SessionManager = Depends(get_session)):
        session.set(body.values)
        return snapshot(session)

    @app.post("/session/flash", response_model=SessionResponse)
    async def write_flash(body: FlashRequest, session: SessionManager = Depends(get_session)):
        session.set_flashdata(body.values)
        return snapshot(session)

    @app.post("/session/temp", response_model=SessionResponse)
    async def write_temp(body: TempRequest, session: SessionManager = Depends(get_session)):
        session.set(body.values)
        session.mark_as_tempdata(list(body.values), ttl=body.ttl)
        return snapshot(session)

    @app.delete("/session", status_code=204)
    async def destroy_session(session: SessionManager = Depends(get_session)):
        await session.destroy()

    return app

