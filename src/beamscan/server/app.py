"""FastAPI server with REST API and WebSocket frame streaming.

Provides:
- WebSocket /ws/frames: Stream Frame objects at ~30 FPS
- WebSocket /ws/control: Receive pointer/activate/layout/viewed/reset commands
- REST API for session state, the collection and user actions
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from dataclasses import asdict
from enum import Enum
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel, Field

from beamscan.config import SimulationConfig, get_simulation_config
from beamscan.corpora.policies import policy_to_dict
from beamscan.corpora.policy_board import create_session, grid_layout
from beamscan.engine.signals import CueRecorder
from beamscan.engine.simulation import activate_target, mark_viewed, reset_session, tick_session
from beamscan.model.geometry import Position
from beamscan.projection.projector import Frame, project

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from beamscan.model.session import Session

logger = logging.getLogger(__name__)


class SimulationState:
    """Thread-safe simulation state manager.

    Owns one session and a background thread ticking it. Every REST and
    WebSocket handler goes through this object, which serializes access to
    the session with a lock.
    """

    def __init__(self, config: SimulationConfig | None = None) -> None:
        """Initialize simulation state with a fresh policy board session."""
        self._config = config or get_simulation_config()
        self._recorder = CueRecorder()
        self._session = create_session(self._config, sinks=[self._recorder])
        self._running = False
        self._paused = False
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def session(self) -> Session:
        """Get current session (thread-safe)."""
        with self._lock:
            return self._session

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        with self._lock:
            self._paused = value

    @property
    def running(self) -> bool:
        return self._running

    def tick(self) -> None:
        """Execute one simulation tick (thread-safe)."""
        with self._lock:
            tick_session(self._session)

    def snapshot(self) -> Frame:
        """Project the session, attaching cues raised since the last snapshot."""
        with self._lock:
            cues = [cue.value for cue in self._recorder.drain()]
            return project(self._session, cues=cues)

    def summary(self) -> dict[str, Any]:
        """Session counters read in one critical section, so they agree with each other."""
        with self._lock:
            session = self._session
            return {
                "tick": session.tick,
                "paused": self._paused,
                "particle_count": len(session.particles),
                "collected_count": len(session.collected),
                "in_range": sorted(session.in_range),
                "explored": session.stats.explored,
                "filtered": session.stats.filtered,
            }

    def collected_cards(self) -> list[dict[str, Any]]:
        """Collected particles in arrival order, copied under the lock."""
        with self._lock:
            return [
                {
                    "id": p.id,
                    "label": p.label,
                    "viewed": p.viewed,
                    "payload": policy_to_dict(p.payload) if p.payload is not None else None,
                }
                for p in self._session.collected
            ]

    def set_pointer(self, x: float, y: float) -> None:
        with self._lock:
            self._session.pointer = Position(x, y)

    def set_layout(self, centers: dict[int, Position]) -> None:
        """Replace the target centers reported by the renderer."""
        with self._lock:
            self._session.layout = dict(centers)

    def set_viewport(self, width: float, height: float) -> None:
        """Resize the viewport and fall back to the default grid layout.

        Raises:
            pydantic.ValidationError: If the size is not positive; the session is left unchanged.
        """
        with self._lock:
            config = SimulationConfig.model_validate(
                {**self._session.config.model_dump(), "viewport_width": width, "viewport_height": height}
            )
            self._session.config = config
            self._session.layout = grid_layout(config)

    def activate(self, index: int) -> int:
        """Fire on a target; returns the number of particles spawned."""
        with self._lock:
            return len(activate_target(self._session, index))

    def mark_viewed(self, particle_id: str) -> bool:
        with self._lock:
            return mark_viewed(self._session, particle_id)

    def reset(self) -> None:
        """Clear particles, collection and counters."""
        with self._lock:
            reset_session(self._session)
            self._recorder.drain()

    def start(self) -> None:
        """Start the background simulation thread."""
        if self._running:
            return
        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._simulation_loop, daemon=True)
        self._thread.start()
        logger.info("Simulation thread started at %.0f Hz", self._config.tick_rate)

    def stop(self) -> None:
        """Stop the background simulation thread.

        In-flight particles are discarded with the thread, not flushed.
        """
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
        logger.info("Simulation thread stopped")

    def _simulation_loop(self) -> None:
        interval = 1.0 / self._config.tick_rate
        while self._running and not self._stop_event.is_set():
            if not self.paused:
                self.tick()
            self._stop_event.wait(timeout=interval)


# Global simulation state
_sim_state: SimulationState | None = None


def get_sim_state() -> SimulationState:
    """Get or create the global simulation state."""
    global _sim_state
    if _sim_state is None:
        _sim_state = SimulationState()
    return _sim_state


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager: start/stop simulation thread."""
    sim = get_sim_state()
    sim.start()
    yield
    sim.stop()


app = FastAPI(
    title="BeamScan",
    description="Interactive beam scanning and particle collection simulation",
    version="0.1.0",
    lifespan=lifespan,
)


# Pydantic models for REST requests and responses


class SessionStateResponse(BaseModel):
    """Response model for the session summary."""

    tick: int = Field(description="Current session tick")
    paused: bool = Field(description="Whether the simulation is paused")
    particle_count: int = Field(description="Number of live particles")
    collected_count: int = Field(description="Number of collected particles")
    in_range: list[int] = Field(description="Target indices inside the beam")
    explored: int = Field(description="Particles spawned since the last reset")
    filtered: int = Field(description="Non-rejected particles spawned since the last reset")


class CollectedCardResponse(BaseModel):
    """Response model for a collected particle."""

    id: str = Field(description="Particle ID")
    label: str = Field(description="Label of the target it came from")
    viewed: bool = Field(description="Whether the detail view was opened")
    payload: dict[str, Any] | None = Field(default=None, description="Policy record")


class PointerRequest(BaseModel):
    """Request model for a pointer update."""

    x: float = Field(description="Pointer x in screen space")
    y: float = Field(default=0.0, description="Pointer y in screen space")


class ActivateRequest(BaseModel):
    """Request model for firing on a target."""

    index: int = Field(ge=0, description="Target slot index")


class ActivateResponse(BaseModel):
    """Response model for an activation."""

    accepted: bool = Field(description="False when the target was not in range")
    spawned: int = Field(description="Number of particles spawned")


class ControlCommandResponse(BaseModel):
    """Response for control commands."""

    success: bool = Field(description="Whether command succeeded")
    message: str = Field(description="Status message")


# REST endpoints


@app.get("/api/session", response_model=SessionStateResponse, tags=["session"])
async def get_session() -> SessionStateResponse:
    """Get current session summary."""
    return SessionStateResponse(**get_sim_state().summary())


@app.get("/api/collected", response_model=list[CollectedCardResponse], tags=["collection"])
async def get_collected() -> list[CollectedCardResponse]:
    """Get all collected particles in arrival order."""
    return [CollectedCardResponse(**card) for card in get_sim_state().collected_cards()]


@app.post(
    "/api/collected/{particle_id}/viewed",
    response_model=ControlCommandResponse,
    tags=["collection"],
)
async def set_viewed(particle_id: str) -> ControlCommandResponse:
    """Mark a collected particle as viewed."""
    if not get_sim_state().mark_viewed(particle_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Collected particle '{particle_id}' not found",
        )
    return ControlCommandResponse(success=True, message=f"Marked {particle_id} as viewed")


@app.post("/api/pointer", response_model=ControlCommandResponse, tags=["input"])
async def set_pointer(request: PointerRequest) -> ControlCommandResponse:
    """Update the pointer position the craft follows."""
    get_sim_state().set_pointer(request.x, request.y)
    return ControlCommandResponse(success=True, message="Pointer updated")


@app.post("/api/activate", response_model=ActivateResponse, tags=["input"])
async def activate(request: ActivateRequest) -> ActivateResponse:
    """Fire on a target. A target outside the beam is a miss, not an error."""
    spawned = get_sim_state().activate(request.index)
    return ActivateResponse(accepted=spawned > 0, spawned=spawned)


@app.post("/api/session/reset", response_model=ControlCommandResponse, tags=["session"])
async def reset() -> ControlCommandResponse:
    """Clear particles, the collection and counters."""
    get_sim_state().reset()
    return ControlCommandResponse(success=True, message="Session reset")


@app.post("/api/session/pause", response_model=ControlCommandResponse, tags=["session"])
async def pause_simulation() -> ControlCommandResponse:
    """Pause the simulation."""
    get_sim_state().paused = True
    return ControlCommandResponse(success=True, message="Simulation paused")


@app.post("/api/session/play", response_model=ControlCommandResponse, tags=["session"])
async def play_simulation() -> ControlCommandResponse:
    """Resume the simulation."""
    get_sim_state().paused = False
    return ControlCommandResponse(success=True, message="Simulation playing")


# WebSocket connections management


class ConnectionManager:
    """Manage WebSocket connections for frame streaming."""

    def __init__(self) -> None:
        """Initialize connection manager."""
        self.frame_connections: list[WebSocket] = []
        self.control_connections: list[WebSocket] = []

    async def connect_frames(self, websocket: WebSocket) -> None:
        """Accept a frames WebSocket connection."""
        await websocket.accept()
        self.frame_connections.append(websocket)
        logger.info("Frame client connected, total: %d", len(self.frame_connections))

    async def connect_control(self, websocket: WebSocket) -> None:
        """Accept a control WebSocket connection."""
        await websocket.accept()
        self.control_connections.append(websocket)
        logger.info("Control client connected, total: %d", len(self.control_connections))

    def disconnect_frames(self, websocket: WebSocket) -> None:
        """Remove a frames WebSocket connection."""
        if websocket in self.frame_connections:
            self.frame_connections.remove(websocket)
        logger.info("Frame client disconnected, remaining: %d", len(self.frame_connections))

    def disconnect_control(self, websocket: WebSocket) -> None:
        """Remove a control WebSocket connection."""
        if websocket in self.control_connections:
            self.control_connections.remove(websocket)
        logger.info("Control client disconnected, remaining: %d", len(self.control_connections))


manager = ConnectionManager()


def _frame_to_dict(frame: Frame) -> dict[str, Any]:
    """Convert a Frame dataclass to a JSON-serializable dict."""
    return {
        "tick": frame.tick,
        "craft": asdict(frame.craft),
        "targets": [asdict(t) for t in frame.targets],
        "particles": [asdict(p) for p in frame.particles],
        "conveyance_target": list(frame.conveyance_target) if frame.conveyance_target else None,
        "cards": [asdict(c) for c in frame.cards],
        "stats": dict(frame.stats),
        "cues": list(frame.cues),
    }


@app.websocket("/ws/frames")
async def websocket_frames(websocket: WebSocket) -> None:
    """WebSocket endpoint for streaming frames at ~30 FPS."""
    await manager.connect_frames(websocket)
    sim = get_sim_state()

    try:
        interval = 1.0 / 30.0
        while True:
            start = asyncio.get_event_loop().time()
            await websocket.send_json(_frame_to_dict(sim.snapshot()))
            elapsed = asyncio.get_event_loop().time() - start
            await asyncio.sleep(max(0.0, interval - elapsed))

    except WebSocketDisconnect:
        manager.disconnect_frames(websocket)
    except Exception as e:
        logger.error("Frame streaming error: %s", str(e))
        manager.disconnect_frames(websocket)


class ControlCommand(Enum):
    """Valid control commands."""

    POINTER = "pointer"
    ACTIVATE = "activate"
    LAYOUT = "layout"
    VIEWPORT = "viewport"
    VIEWED = "viewed"
    RESET = "reset"
    PLAY = "play"
    PAUSE = "pause"


def handle_control(sim: SimulationState, data: dict[str, Any]) -> dict[str, Any]:
    """Apply one control command and build its response.

    Accepts commands:
    - {"type": "pointer", "x": 640, "y": 300}
    - {"type": "activate", "index": 7}
    - {"type": "layout", "centers": {"0": [120, 280], ...}}
    - {"type": "viewport", "width": 1280, "height": 800}
    - {"type": "viewed", "id": "<particle id>"}
    - {"type": "reset"} / {"type": "play"} / {"type": "pause"}
    """
    cmd_type = str(data.get("type", "")).lower()
    try:
        command = ControlCommand(cmd_type)
    except ValueError:
        return {"success": False, "message": f"Unknown command: {cmd_type}"}

    try:
        if command is ControlCommand.POINTER:
            sim.set_pointer(float(data["x"]), float(data.get("y", 0.0)))
            return {"success": True, "message": "Pointer updated"}
        if command is ControlCommand.ACTIVATE:
            spawned = sim.activate(int(data["index"]))
            return {"success": True, "accepted": spawned > 0, "spawned": spawned}
        if command is ControlCommand.LAYOUT:
            centers = {
                int(index): Position(float(center[0]), float(center[1]))
                for index, center in data["centers"].items()
            }
            sim.set_layout(centers)
            return {"success": True, "message": f"Layout updated ({len(centers)} targets)"}
        if command is ControlCommand.VIEWPORT:
            sim.set_viewport(float(data["width"]), float(data["height"]))
            return {"success": True, "message": "Viewport updated"}
        if command is ControlCommand.VIEWED:
            found = sim.mark_viewed(str(data["id"]))
            return {"success": found, "message": "Viewed" if found else "Unknown particle"}
        if command is ControlCommand.RESET:
            sim.reset()
            return {"success": True, "message": "Session reset"}
        if command is ControlCommand.PLAY:
            sim.paused = False
            return {"success": True, "message": "Simulation playing"}
        sim.paused = True
        return {"success": True, "message": "Simulation paused"}
    except (KeyError, TypeError, ValueError, AttributeError, IndexError):
        return {"success": False, "message": f"Invalid arguments for {cmd_type}"}


@app.websocket("/ws/control")
async def websocket_control(websocket: WebSocket) -> None:
    """WebSocket endpoint for receiving control commands."""
    await manager.connect_control(websocket)
    sim = get_sim_state()

    try:
        while True:
            data = await websocket.receive_json()
            await websocket.send_json(handle_control(sim, data))

    except WebSocketDisconnect:
        manager.disconnect_control(websocket)
    except Exception as e:
        logger.error("Control WebSocket error: %s", str(e))
        manager.disconnect_control(websocket)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
