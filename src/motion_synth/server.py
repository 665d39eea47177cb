"""WebSocket bridge for remote motion sensors.

A client (typically a phone) streams motion samples over ``/ws``; the
server runs them through a RecognitionEngine and answers with the haptic
effects the client should render. Each connection gets its own engine, so
cooldowns and flip state never leak between devices.

Messages from the client:
    {"type": "sample", "acceleration": [x, y, z], "rotation_rate": [x, y, z],
     "attitude": {"pitch": p, "roll": r, "yaw": y}}
    {"type": "ping"}

Messages to the client:
    {"type": "connected", "mappings": [...]}
    {"type": "haptic", "gesture": {...}, "effect": {...}, "played": true}
    {"type": "pong", "server_time": ...}
    {"type": "error", "message": "..."}

Usage:
    motion-synth serve --config mappings.yml
    # or
    uvicorn motion_synth.server:app --host 0.0.0.0 --port 8766
"""

from __future__ import annotations

import json
import logging
import time
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ValidationError

from motion_synth import __version__
from motion_synth.config import EngineConfig
from motion_synth.engine import RecognitionEngine
from motion_synth.errors import EngineUnavailable
from motion_synth.haptics import QueuedHapticPlayer
from motion_synth.metrics import MetricsCollector
from motion_synth.motion import Attitude, MotionSample

logger = logging.getLogger("motion_synth.server")

app = FastAPI(title="motion-synth", version=__version__)


class AttitudePayload(BaseModel):
    pitch: float = 0.0
    roll: float = 0.0
    yaw: float = 0.0


class SamplePayload(BaseModel):
    acceleration: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation_rate: tuple[float, float, float] = (0.0, 0.0, 0.0)
    attitude: AttitudePayload = AttitudePayload()

    def to_sample(self) -> MotionSample:
        return MotionSample(
            acceleration=self.acceleration,
            rotation_rate=self.rotation_rate,
            attitude=Attitude(**self.attitude.model_dump()),
        )


# --- State ---

class ServerState:
    def __init__(self):
        self.config: EngineConfig = EngineConfig.with_defaults()
        self.metrics = MetricsCollector()
        self.engines: set[RecognitionEngine] = set()
        self.total_samples = 0
        self.total_haptics = 0
        self.last_haptic: Optional[dict] = None

    def create_engine(self) -> tuple[RecognitionEngine, QueuedHapticPlayer]:
        player = QueuedHapticPlayer()
        engine = RecognitionEngine.from_config(self.config, player, metrics=self.metrics)
        return engine, player


state = ServerState()


# --- API endpoints ---

@app.get("/api/status")
async def api_status():
    return {
        "version": __version__,
        "clients": len(state.engines),
        "mappings": len(state.config.mappings),
        "total_samples": state.total_samples,
        "total_haptics": state.total_haptics,
        "last_haptic": state.last_haptic,
    }


@app.get("/api/mappings")
async def api_mappings():
    return state.config.to_dict()


@app.get("/metrics")
async def metrics():
    state.metrics.set_connections(len(state.engines))
    return PlainTextResponse(
        state.metrics.render(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


# --- WebSocket: samples in, haptics out ---

@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    engine, player = state.create_engine()

    try:
        engine.start()
    except EngineUnavailable as e:
        await ws.send_json({"type": "error", "message": str(e)})
        await ws.close()
        return

    state.engines.add(engine)
    logger.info("Client connected (%d total)", len(state.engines))

    try:
        await ws.send_json({
            "type": "connected",
            "mappings": [m.to_dict() for m in engine.mappings],
        })

        while True:
            msg = await ws.receive_text()
            try:
                data = json.loads(msg)
            except json.JSONDecodeError:
                await ws.send_json({"type": "error", "message": "invalid JSON"})
                continue

            kind = data.get("type") if isinstance(data, dict) else None
            if kind == "ping":
                await ws.send_json({"type": "pong", "server_time": time.time()})
            elif kind == "sample":
                await _handle_sample(ws, engine, player, data)
            else:
                await ws.send_json({"type": "error", "message": f"unknown message type {kind!r}"})
    except WebSocketDisconnect:
        pass
    finally:
        engine.stop()
        state.engines.discard(engine)
        logger.info("Client disconnected (%d total)", len(state.engines))


async def _handle_sample(
    ws: WebSocket,
    engine: RecognitionEngine,
    player: QueuedHapticPlayer,
    data: dict,
):
    try:
        sample = SamplePayload.model_validate(data).to_sample()
    except ValidationError as e:
        await ws.send_json({"type": "error", "message": f"invalid sample: {e.errors()[0]['msg']}"})
        return

    state.total_samples += 1
    event = engine.on_sample(sample)
    if event is None:
        return

    if event.error is not None:
        await ws.send_json({"type": "haptic", **event.to_dict(), "error": str(event.error)})
        return

    for effect in player.drain():
        message = {
            "type": "haptic",
            "gesture": event.gesture.to_dict(),
            "effect": effect.to_dict(),
            "timestamp": event.timestamp,
            "played": True,
        }
        state.total_haptics += 1
        state.last_haptic = message
        await ws.send_json(message)
