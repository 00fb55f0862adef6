"""FastAPI application for the algorithm workbench.

Provides REST endpoints for commands and state, and a WebSocket that
plays the active run at the configured speed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import Body, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from algosim.visual.bridge import WorkbenchBridge

logger = logging.getLogger(__name__)


def create_app(bridge: WorkbenchBridge) -> FastAPI:
    """Create the FastAPI application wired to the given bridge."""
    app = FastAPI(title="Algorithm Workbench")

    @app.exception_handler(ValueError)
    async def rejected(request: Request, exc: ValueError) -> JSONResponse:
        # TopologyError is a ValueError: bad edits and bad run parameters
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": str(exc)}, status_code=400)

    # --- REST endpoints ---

    @app.get("/api/state")
    def get_state() -> JSONResponse:
        return JSONResponse(bridge.get_state())

    @app.get("/api/trace")
    def get_trace(since: int = 0) -> JSONResponse:
        return JSONResponse(bridge.get_trace(since))

    @app.get("/api/logs")
    def get_logs(last_n: int = 100) -> JSONResponse:
        return JSONResponse(bridge.get_logs(last_n))

    @app.get("/api/outcome")
    def get_outcome() -> JSONResponse:
        return JSONResponse(bridge.outcome())

    @app.post("/api/run/{kind}")
    def post_run(kind: str, params: dict[str, Any] | None = Body(default=None)) -> JSONResponse:
        result = bridge.run(kind, params)
        status = 200 if result["started"] else 409
        return JSONResponse(result, status_code=status)

    @app.post("/api/step")
    def post_step(count: int = 1) -> JSONResponse:
        return JSONResponse(bridge.step(count))

    @app.post("/api/reset")
    def post_reset() -> JSONResponse:
        return JSONResponse(bridge.reset())

    @app.post("/api/speed")
    def post_speed(delay_ms: float = Body(..., embed=True)) -> JSONResponse:
        return JSONResponse(bridge.set_speed(delay_ms))

    @app.post("/api/edit")
    def post_edit(payload: dict[str, Any] = Body(...)) -> JSONResponse:
        result = bridge.edit(payload)
        status = 200 if result["applied"] else 409
        return JSONResponse(result, status_code=status)

    # --- WebSocket for play mode ---

    @app.websocket("/api/ws")
    async def websocket_endpoint(ws: WebSocket) -> None:
        await ws.accept()
        play_task: asyncio.Task | None = None
        stop_event = asyncio.Event()

        async def play_loop() -> None:
            """Step the active run and push each update, honouring the delay."""
            while not stop_event.is_set():
                result = await asyncio.to_thread(bridge.step, 1)
                try:
                    await ws.send_json({"type": "state_update", **result})
                except Exception:
                    break
                if not result["state"]["is_running"]:
                    await ws.send_json({"type": "run_complete", "outcome": bridge.outcome()})
                    break
                await asyncio.sleep(result["delay_s"])

        async def stop_playing() -> None:
            if play_task and not play_task.done():
                stop_event.set()
                await play_task

        try:
            while True:
                raw = await ws.receive_text()
                msg = json.loads(raw)
                action = msg.get("action")

                if action == "play":
                    await stop_playing()
                    stop_event.clear()
                    if msg.get("kind"):
                        try:
                            bridge.run(msg["kind"], msg.get("params"))
                        except ValueError as exc:
                            await ws.send_json({"type": "error", "error": str(exc)})
                            continue
                    play_task = asyncio.create_task(play_loop())

                elif action == "pause":
                    await stop_playing()
                    await ws.send_json({"type": "state_update", "state": bridge.get_state()})

                elif action == "step":
                    await stop_playing()
                    result = await asyncio.to_thread(bridge.step, msg.get("count", 1))
                    await ws.send_json({"type": "state_update", **result})

                elif action == "speed":
                    state = bridge.set_speed(msg.get("delay_ms", 1000))
                    await ws.send_json({"type": "state_update", "state": state})

                elif action == "reset":
                    await stop_playing()
                    state = await asyncio.to_thread(bridge.reset)
                    await ws.send_json({"type": "state_update", "state": state})

        except WebSocketDisconnect:
            if play_task and not play_task.done():
                stop_event.set()

    return app
