# main.py
import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Body, FastAPI, HTTPException, Request, WebSocket, status
from starlette.websockets import WebSocketDisconnect

from config import EngineConfig
from engine import FEED_IDS, SimulationEngine
from models import (
    AllocationState,
    CaptureRequest,
    CommandResponse,
    DashboardStats,
    FailRequest,
    ForecastChartPoint,
    ForecastRecord,
    OptimizationProgress,
    PositionsSnapshot,
    PriceSample,
    SceneItem,
    SocialFeed,
    VoiceCommand,
    VoiceState,
)
from price_feed import price_stream

logging.basicConfig(
    level=os.environ.get("SIM_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# --- LIFESPAN: one engine per app, torn down on every exit path ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = SimulationEngine(EngineConfig.from_env())
    app.state.engine = engine
    app.state.price_subscribers = 0
    engine.start()
    try:
        yield
    finally:
        await engine.aclose()


app = FastAPI(title="Simulated Market Dashboard Engine", lifespan=lifespan)


def get_engine(request: Request) -> SimulationEngine:
    return request.app.state.engine


# --- Snapshot endpoints ---

@app.get("/price", response_model=List[PriceSample], tags=["Feeds"])
async def get_price(request: Request):
    return get_engine(request).get_price_window()


@app.get("/positions", response_model=PositionsSnapshot, tags=["Feeds"])
async def get_positions(request: Request):
    return get_engine(request).get_positions()


@app.get("/forecasts", response_model=List[ForecastRecord], tags=["Feeds"])
async def get_forecasts(request: Request):
    return get_engine(request).get_forecasts()


@app.get("/forecasts/chart", response_model=List[ForecastChartPoint], tags=["Feeds"])
async def get_forecast_chart(request: Request):
    return get_engine(request).get_forecast_chart()


@app.get("/allocations", response_model=AllocationState, tags=["Optimizer"])
async def get_allocations(request: Request):
    return get_engine(request).get_allocation_state()


@app.get("/optimization", response_model=OptimizationProgress, tags=["Optimizer"])
async def get_optimization(request: Request):
    return get_engine(request).get_optimization_progress()


@app.get("/voice", response_model=VoiceState, tags=["Voice"])
async def get_voice(request: Request):
    return get_engine(request).get_voice_state()


@app.get("/voice/history", response_model=List[VoiceCommand], tags=["Voice"])
async def get_voice_history(request: Request):
    return get_engine(request).get_command_history()


@app.get("/dashboard", response_model=DashboardStats, tags=["Static"])
async def get_dashboard(request: Request):
    return get_engine(request).get_dashboard_stats()


@app.get("/social", response_model=SocialFeed, tags=["Static"])
async def get_social(request: Request):
    return get_engine(request).get_social_feed()


@app.get("/scene", response_model=List[SceneItem], tags=["Static"])
async def get_scene(request: Request):
    return get_engine(request).get_scene_items()


# --- Command endpoints ---

@app.post("/optimization/run", response_model=CommandResponse, tags=["Optimizer"])
async def run_optimization(request: Request):
    accepted = get_engine(request).trigger_optimization()
    return CommandResponse(accepted=accepted, detail="optimization started" if accepted else "optimization already active")


@app.post("/voice/capture", response_model=CommandResponse, tags=["Voice"])
async def capture_voice(request: Request, body: Optional[CaptureRequest] = Body(default=None)):
    command = body.command if body else None
    accepted = get_engine(request).begin_voice_capture(command)
    return CommandResponse(accepted=accepted, detail="listening" if accepted else "capture already in progress")


@app.delete("/voice/capture", response_model=CommandResponse, tags=["Voice"])
async def cancel_voice(request: Request):
    cancelled = get_engine(request).cancel_voice_capture()
    return CommandResponse(accepted=cancelled, detail="capture cancelled" if cancelled else "nothing to cancel")


@app.post("/voice/fail", response_model=CommandResponse, tags=["Voice"])
async def fail_voice(request: Request, body: Optional[FailRequest] = Body(default=None)):
    reason = body.reason if body else FailRequest().reason
    failed = get_engine(request).fail_voice_command(reason)
    return CommandResponse(accepted=failed, detail="command failed" if failed else "no command is processing")


@app.post("/feeds/{feed_id}/{action}", response_model=CommandResponse, tags=["Feeds"])
async def control_feed(request: Request, feed_id: str, action: str):
    if feed_id not in FEED_IDS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Feed {feed_id} not found.")
    engine = get_engine(request)
    if action == "start":
        changed = engine.start_feed(feed_id)
    elif action == "stop":
        changed = engine.stop_feed(feed_id)
    else:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown action {action}.")
    running = engine.feed_running(feed_id)
    return CommandResponse(accepted=changed, detail=f"{feed_id} {'running' if running else 'stopped'}")


# --- WS /ws/price ---

async def _send_samples(websocket: WebSocket, engine: SimulationEngine) -> None:
    latest = engine.price_feed.latest()
    if latest is not None:
        await websocket.send_json(latest.model_dump())
    async for sample in price_stream(engine.price_feed, poll_ms=100):
        await websocket.send_json(sample.model_dump())


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@app.websocket("/ws/price")
async def websocket_price(websocket: WebSocket):
    """Send the latest sample on connect, then every new sample as it lands.

    The client side is read concurrently so a disconnect is noticed even while
    the price feed is stopped and nothing is being sent.
    """
    await websocket.accept()
    state = websocket.app.state
    state.price_subscribers += 1
    sender = asyncio.create_task(_send_samples(websocket, state.engine))
    receiver = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        done, _ = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                raise exc
        logger.info("client disconnected from price stream")
    finally:
        sender.cancel()
        receiver.cancel()
        state.price_subscribers -= 1
        # Attempt graceful close if still connected
        try:
            await websocket.close()
        except RuntimeError:
            pass
