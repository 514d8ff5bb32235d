# engine.py
import asyncio
import logging
import random
from typing import List, Optional

import seeds
from config import EngineConfig
from forecasts import ForecastFeed, forecast_chart
from models import (
    AllocationState,
    DashboardStats,
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
from optimizer import AllocationBook, OptimizationRun, OptimizationState
from positions import PositionBook
from price_feed import PriceFeed
from random_walk import RandomSource
from scheduler import FeedScheduler
from voice import VoicePipeline

logger = logging.getLogger(__name__)

# Feeds that tick for the whole life of the engine and can be started/stopped by id
FEED_IDS = ("price", "positions", "forecasts")
_OPTIMIZER = "optimizer"


def _seconds(ms: float) -> float:
    return ms / 1000.0


class SimulationEngine:
    """Owns every simulated feed and the timers that drive them.

    Lifecycle: construct -> ``start()`` -> ``stop()`` (idempotent). ``start``
    and the trigger methods must be called with an event loop running.
    Accessors return fresh copies; nothing handed out aliases engine state.
    """

    def __init__(self, config: Optional[EngineConfig] = None, rng: Optional[RandomSource] = None):
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else random.Random()
        cfg = self.config

        self.price_feed = PriceFeed(capacity=cfg.price.capacity, spread=cfg.price.spread,
                                    drift=cfg.price.drift, trend=cfg.price.trend, rng=self.rng)
        self.price_feed.initialize(cfg.price.base_price, cfg.price.initial_count)

        self.positions = PositionBook(seeds.seed_positions(), spread=cfg.positions.spread, rng=self.rng)

        self.forecasts = ForecastFeed(
            spread_1h=cfg.forecasts.spread_1h,
            spread_24h=cfg.forecasts.spread_24h,
            spread_7d=cfg.forecasts.spread_7d,
            confidence_spread=cfg.forecasts.confidence_spread,
            confidence_min=cfg.forecasts.confidence_min,
            confidence_max=cfg.forecasts.confidence_max,
            rng=self.rng,
        )
        self.forecasts.initialize(seeds.seed_forecasts())
        self.forecast_chart = forecast_chart(rng=self.rng)

        self.allocations = AllocationBook(seeds.seed_allocations())
        self.optimization = OptimizationRun(self.allocations, step=cfg.optimizer.step)

        self.voice = VoicePipeline(
            example_commands=cfg.voice.example_commands,
            capture_delay_ms=cfg.voice.capture_delay_ms,
            interpret_delay_ms=cfg.voice.interpret_delay_ms,
            execute_delay_ms=cfg.voice.execute_delay_ms,
            history=seeds.seed_voice_history(),
            history_limit=cfg.voice.history_limit,
            rng=self.rng,
        )

        self.scheduler = FeedScheduler()
        self.scheduler.register("price", _seconds(cfg.price.interval_ms), self._tick_price)
        self.scheduler.register("positions", _seconds(cfg.positions.interval_ms), self._tick_positions)
        self.scheduler.register("forecasts", _seconds(cfg.forecasts.interval_ms), self._tick_forecasts)
        self.scheduler.register(_OPTIMIZER, _seconds(cfg.optimizer.interval_ms), self._tick_optimizer)

        self._settle_handle: Optional[asyncio.TimerHandle] = None
        self._voice_handle: Optional[asyncio.TimerHandle] = None

    # --- lifecycle ---

    def start(self) -> None:
        for feed_id in FEED_IDS:
            self.scheduler.start(feed_id)
        logger.info("simulation engine started (%s)", ", ".join(FEED_IDS))

    def stop(self) -> None:
        self.scheduler.stop_all()
        self._settle_handle = None
        self._voice_handle = None
        self.voice.cancel()
        if self.optimization.state is not OptimizationState.IDLE:
            self.optimization.reset()
        logger.info("simulation engine stopped")

    async def aclose(self) -> None:
        await self.scheduler.aclose()
        self.stop()

    async def __aenter__(self) -> "SimulationEngine":
        self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    # --- inputs ---

    def _check_feed(self, feed_id: str) -> None:
        if feed_id not in FEED_IDS:
            raise KeyError(f"unknown feed {feed_id!r}")

    def start_feed(self, feed_id: str) -> bool:
        self._check_feed(feed_id)
        return self.scheduler.start(feed_id)

    def stop_feed(self, feed_id: str) -> bool:
        self._check_feed(feed_id)
        return self.scheduler.stop(feed_id)

    def feed_running(self, feed_id: str) -> bool:
        self._check_feed(feed_id)
        return self.scheduler.running(feed_id)

    def trigger_optimization(self) -> bool:
        """Start an optimization run; a no-op returning False while one is active."""
        asyncio.get_running_loop()  # raise before touching state if there is no loop
        if not self.optimization.start():
            return False
        try:
            self.scheduler.start(_OPTIMIZER)
        except Exception:
            self.optimization.reset()
            raise
        return True

    def begin_voice_capture(self, command: Optional[str] = None) -> bool:
        """Start a voice capture; a no-op returning False while one is in flight."""
        asyncio.get_running_loop()
        if not self.voice.begin_capture(command):
            return False
        try:
            self._voice_handle = self.scheduler.call_later(_seconds(self.voice.delay_ms()), self._advance_voice)
        except Exception:
            self.voice.cancel()
            raise
        return True

    def fail_voice_command(self, reason: str = "Command failed") -> bool:
        """Fail the command currently being processed, if there is one."""
        if not self.voice.fail(reason):
            return False
        self.scheduler.cancel(self._voice_handle)
        self._voice_handle = None
        return True

    def cancel_voice_capture(self) -> bool:
        """Cancel the pending stage timer and return the pipeline to IDLE.

        Returns False if nothing was in flight.
        """
        if not self.voice.busy:
            return False
        self.scheduler.cancel(self._voice_handle)
        self._voice_handle = None
        self.voice.cancel()
        return True

    # --- timer callbacks ---

    def _tick_price(self) -> None:
        self.price_feed.tick()

    def _tick_positions(self) -> None:
        latest = self.price_feed.latest()
        self.positions.tick(latest.price if latest else None)

    def _tick_forecasts(self) -> None:
        self.forecasts.tick()

    def _tick_optimizer(self) -> bool:
        still_running = self.optimization.tick()
        if not still_running and self.optimization.state is OptimizationState.SETTLING:
            self._settle_handle = self.scheduler.call_later(
                _seconds(self.config.optimizer.settle_delay_ms), self._settle_optimization)
        return still_running

    def _settle_optimization(self) -> None:
        self._settle_handle = None
        self.optimization.settle()

    def _advance_voice(self) -> None:
        self._voice_handle = None
        delay = self.voice.advance()
        if delay is not None:
            self._voice_handle = self.scheduler.call_later(_seconds(delay), self._advance_voice)

    # --- snapshots ---

    def get_price_window(self) -> List[PriceSample]:
        return list(self.price_feed.window())

    def get_positions(self) -> PositionsSnapshot:
        return self.positions.snapshot()

    def get_forecasts(self) -> List[ForecastRecord]:
        return self.forecasts.snapshot()

    def get_forecast_chart(self) -> List[ForecastChartPoint]:
        return list(self.forecast_chart)

    def get_optimization_progress(self) -> OptimizationProgress:
        return self.optimization.snapshot()

    def get_allocation_state(self) -> AllocationState:
        return AllocationState(
            assets=self.allocations.snapshot(),
            metrics=seeds.OPTIMIZER_METRICS,
            optimization=self.optimization.snapshot(),
        )

    def get_voice_state(self) -> VoiceState:
        return self.voice.state()

    def get_command_history(self) -> List[VoiceCommand]:
        return self.voice.snapshot()

    def get_dashboard_stats(self) -> DashboardStats:
        return seeds.DASHBOARD_STATS

    def get_social_feed(self) -> SocialFeed:
        return seeds.SOCIAL_FEED

    def get_scene_items(self) -> List[SceneItem]:
        return list(seeds.SCENE_ITEMS)
