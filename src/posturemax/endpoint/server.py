"""FastAPI local control endpoint.

Lets other processes on the same machine drive a running instance:
an external key daemon forwards chords to ``/hotkey``, scripts post
commands to ``/commands``. Every request goes through the command bus,
so the endpoint is just another command source.

    GET  /health    -> {"status": "ok", ...}
    GET  /state     -> SessionSnapshot
    GET  /report    -> SessionReport of the last completed session
    POST /commands  <- {"type": "set-transparency", "level": "transparent"}
    POST /hotkey    <- {"chord": "CommandOrControl+Shift+M"}
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import Body, FastAPI, HTTPException
from pydantic import BaseModel, Field

from posturemax import __version__
from posturemax.bus.channel import CommandBus
from posturemax.bus.messages import Ack, GetState
from posturemax.domain.models import SessionReport, SessionSnapshot
from posturemax.hotkeys.dispatcher import InProcessHotkeyBackend
from posturemax.session.orchestrator import SessionOrchestrator

logger = logging.getLogger(__name__)


class HotkeyRequest(BaseModel):
    chord: str = Field(description="Key chord, e.g. 'CommandOrControl+Shift+M'")


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = __version__
    session_state: str = "idle"
    orchestrator_running: bool = False


def create_app(
    bus: CommandBus,
    orchestrator: SessionOrchestrator,
    hotkeys: InProcessHotkeyBackend | None = None,
    run_orchestrator: bool = False,
) -> FastAPI:
    """Create the control endpoint application.

    Args:
        bus: Command bus shared with the orchestrator.
        orchestrator: The running orchestrator (read-only access for
            health and report).
        hotkeys: Backend that ``/hotkey`` presses; the route answers 404
            when None.
        run_orchestrator: Start the orchestrator's command loop in the
            app lifespan. Used when the endpoint is the whole process.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        task = None
        if run_orchestrator:
            task = asyncio.create_task(orchestrator.run())
        logger.info("Control endpoint started")
        yield
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Control endpoint stopped")

    app = FastAPI(
        title="posturemax control endpoint",
        description="Local command endpoint for the posturemax session shell",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health_check() -> HealthResponse:
        return HealthResponse(
            session_state=orchestrator.state.value,
            orchestrator_running=orchestrator.is_running,
        )

    @app.get("/state")
    async def get_state() -> SessionSnapshot:
        ack = await bus.invoke(GetState())
        if ack.snapshot is None:
            raise HTTPException(status_code=503, detail=ack.error or "state unavailable")
        return ack.snapshot

    @app.get("/report")
    async def get_report() -> SessionReport:
        report = orchestrator.last_report
        if report is None:
            raise HTTPException(status_code=404, detail="No completed session")
        return report

    @app.post("/commands")
    async def post_command(payload: dict[str, Any] = Body(...)) -> Ack:
        ack = await bus.invoke_raw(payload)
        if not ack.success:
            raise HTTPException(status_code=422, detail=ack.error)
        return ack

    @app.post("/hotkey")
    async def post_hotkey(request: HotkeyRequest) -> dict[str, str]:
        if hotkeys is None or not hotkeys.press(request.chord):
            raise HTTPException(status_code=404, detail=f"No hotkey bound to {request.chord}")
        return {"status": "ok", "chord": request.chord}

    return app
