# models.py
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict

Signal = Literal["BUY", "SELL", "HOLD"]
CommandStatus = Literal["processing", "executed", "failed"]
OptimizationStateName = Literal["IDLE", "RUNNING", "SETTLING"]
VoiceStageName = Literal["IDLE", "CAPTURING", "TRANSCRIBED", "PROCESSING", "EXECUTED", "FAILED"]


# Snapshots handed to consumers are frozen; feeds replace records instead of
# editing them in place.
class Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


# One sample of the rolling price window
class PriceSample(Snapshot):
    time: str        # minute label, e.g. "12m"
    price: float
    volume: float


class Position(Snapshot):
    symbol: str
    quantity: float
    avg_price: float
    current_price: float
    pnl: float
    pnl_percent: float


class PositionsSnapshot(Snapshot):
    reference_price: Optional[float] = None  # latest price-window sample at last revaluation
    positions: List[Position]


class ForecastRecord(Snapshot):
    asset: str
    current_price: float
    predicted_1h: float
    predicted_24h: float
    predicted_7d: float
    confidence: float  # [60, 95]
    signal: Signal
    ai_model: str


class ForecastChartPoint(Snapshot):
    hour: str
    actual: float
    predicted: float
    upper_bound: float
    lower_bound: float


class AllocationAsset(Snapshot):
    symbol: str
    current_allocation: float
    target_allocation: float
    expected_return: float
    risk: float


class OptimizerMetrics(Snapshot):
    current_sharpe: float
    optimized_sharpe: float
    current_return: float
    optimized_return: float
    current_risk: float
    optimized_risk: float
    qubits: int
    iterations: int


class OptimizationProgress(Snapshot):
    state: OptimizationStateName
    progress: float  # [0, 100]
    running: bool
    commits: int


class AllocationState(Snapshot):
    assets: List[AllocationAsset]
    metrics: OptimizerMetrics
    optimization: OptimizationProgress


class VoiceCommand(Snapshot):
    id: str
    command: str
    interpretation: str
    action: str
    status: CommandStatus
    timestamp: str


class VoiceState(Snapshot):
    stage: VoiceStageName
    listening: bool
    transcript: str
    active_command_id: Optional[str] = None


class DashboardStats(Snapshot):
    total_value: float
    daily_pnl: float
    daily_pnl_percent: float
    win_rate: float
    sharpe_ratio: float


class Trader(Snapshot):
    id: str
    name: str
    avatar: str
    verified: bool
    followers: int
    win_rate: float
    total_return: float
    copiers: int


class SocialTrade(Snapshot):
    id: str
    trader: Trader
    action: Literal["BUY", "SELL"]
    asset: str
    price: float
    quantity: float
    timestamp: str
    likes: int
    comments: int


class SocialFeed(Snapshot):
    top_traders: List[Trader]
    trades: List[SocialTrade]


# Labeled value for the 3-D scene
class SceneItem(Snapshot):
    label: str
    value: str
    color: str
    position: Tuple[float, float, float]


# Request/response bodies for the command endpoints
class CaptureRequest(BaseModel):
    command: Optional[str] = None


class CommandResponse(BaseModel):
    accepted: bool
    detail: str


class FailRequest(BaseModel):
    reason: str = "Command failed"
