# config.py
"""Engine configuration.

Every interval and delay is expressed in milliseconds, matching how the
dashboard panels schedule their timers. Each dataclass validates itself on
construction and raises ``InvalidConfiguration`` for values that would make a
feed unusable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from errors import InvalidConfiguration

DEFAULT_EXAMPLE_COMMANDS: Tuple[str, ...] = (
    "Buy 5 Ethereum at market price",
    "Sell 100 shares of Apple",
    "Set stop loss for Bitcoin at 45000",
    "Show me my portfolio",
    "What is the current price of Tesla?",
    "Place limit order for Ethereum at 2900",
)


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise InvalidConfiguration(f"{name} must be > 0, got {value!r}")


def _require_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise InvalidConfiguration(f"{name} must be >= 0, got {value!r}")


@dataclass
class PriceFeedConfig:
    interval_ms: int = 2000
    capacity: int = 50
    base_price: float = 47000.0
    initial_count: int = 50
    spread: float = 500.0
    drift: float = 0.0
    trend: float = 10.0  # per-sample drift while building the initial window

    def __post_init__(self) -> None:
        _require_positive("price.interval_ms", self.interval_ms)
        _require_positive("price.capacity", self.capacity)
        _require_non_negative("price.base_price", self.base_price)
        _require_non_negative("price.initial_count", self.initial_count)
        _require_non_negative("price.spread", self.spread)


@dataclass
class PositionFeedConfig:
    interval_ms: int = 2000
    spread: float = 10.0

    def __post_init__(self) -> None:
        _require_positive("positions.interval_ms", self.interval_ms)
        _require_non_negative("positions.spread", self.spread)


@dataclass
class ForecastFeedConfig:
    interval_ms: int = 3000
    spread_1h: float = 100.0
    spread_24h: float = 200.0
    spread_7d: float = 500.0
    confidence_spread: float = 5.0
    confidence_min: float = 60.0
    confidence_max: float = 95.0

    def __post_init__(self) -> None:
        _require_positive("forecasts.interval_ms", self.interval_ms)
        for name in ("spread_1h", "spread_24h", "spread_7d", "confidence_spread"):
            _require_non_negative(f"forecasts.{name}", getattr(self, name))
        if self.confidence_min > self.confidence_max:
            raise InvalidConfiguration("forecasts.confidence_min must not exceed confidence_max")


@dataclass
class OptimizerConfig:
    interval_ms: int = 50
    step: float = 2.0
    settle_delay_ms: int = 1000

    def __post_init__(self) -> None:
        _require_positive("optimizer.interval_ms", self.interval_ms)
        _require_positive("optimizer.step", self.step)
        _require_positive("optimizer.settle_delay_ms", self.settle_delay_ms)


@dataclass
class VoiceConfig:
    capture_delay_ms: int = 2000
    interpret_delay_ms: int = 1000
    execute_delay_ms: int = 2000
    example_commands: Tuple[str, ...] = DEFAULT_EXAMPLE_COMMANDS
    history_limit: int = 0  # 0 keeps every command

    def __post_init__(self) -> None:
        _require_positive("voice.capture_delay_ms", self.capture_delay_ms)
        _require_positive("voice.interpret_delay_ms", self.interpret_delay_ms)
        _require_positive("voice.execute_delay_ms", self.execute_delay_ms)
        _require_non_negative("voice.history_limit", self.history_limit)
        if not self.example_commands:
            raise InvalidConfiguration("voice.example_commands must not be empty")
        self.example_commands = tuple(self.example_commands)


@dataclass
class EngineConfig:
    price: PriceFeedConfig = field(default_factory=PriceFeedConfig)
    positions: PositionFeedConfig = field(default_factory=PositionFeedConfig)
    forecasts: ForecastFeedConfig = field(default_factory=ForecastFeedConfig)
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    voice: VoiceConfig = field(default_factory=VoiceConfig)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "EngineConfig":
        """Build a config, overriding defaults with ``SIM_*`` variables.

        Recognised: SIM_PRICE_INTERVAL_MS, SIM_PRICE_CAPACITY, SIM_BASE_PRICE,
        SIM_POSITIONS_INTERVAL_MS, SIM_FORECASTS_INTERVAL_MS,
        SIM_OPTIMIZER_INTERVAL_MS, SIM_OPTIMIZER_STEP,
        SIM_OPTIMIZER_SETTLE_MS, SIM_VOICE_CAPTURE_MS,
        SIM_VOICE_INTERPRET_MS, SIM_VOICE_EXECUTE_MS, SIM_VOICE_HISTORY_LIMIT.
        """
        env = os.environ if environ is None else environ

        def read(key, default, cast=int):
            raw = env.get(key)
            if raw is None or raw == "":
                return default
            try:
                return cast(raw)
            except ValueError as exc:
                raise InvalidConfiguration(f"{key}={raw!r} is not a valid {cast.__name__}") from exc

        price = PriceFeedConfig(
            interval_ms=read("SIM_PRICE_INTERVAL_MS", 2000),
            capacity=read("SIM_PRICE_CAPACITY", 50),
            base_price=read("SIM_BASE_PRICE", 47000.0, float),
        )
        return cls(
            price=price,
            positions=PositionFeedConfig(interval_ms=read("SIM_POSITIONS_INTERVAL_MS", 2000)),
            forecasts=ForecastFeedConfig(interval_ms=read("SIM_FORECASTS_INTERVAL_MS", 3000)),
            optimizer=OptimizerConfig(
                interval_ms=read("SIM_OPTIMIZER_INTERVAL_MS", 50),
                step=read("SIM_OPTIMIZER_STEP", 2.0, float),
                settle_delay_ms=read("SIM_OPTIMIZER_SETTLE_MS", 1000),
            ),
            voice=VoiceConfig(
                capture_delay_ms=read("SIM_VOICE_CAPTURE_MS", 2000),
                interpret_delay_ms=read("SIM_VOICE_INTERPRET_MS", 1000),
                execute_delay_ms=read("SIM_VOICE_EXECUTE_MS", 2000),
                history_limit=read("SIM_VOICE_HISTORY_LIMIT", 0),
            ),
        )
