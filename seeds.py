# seeds.py
"""Fixed starting data for every panel.

These are constants, not computed values: the feeds load them at start and
then perturb them on their own schedules.
"""

from typing import List

from models import (
    AllocationAsset,
    DashboardStats,
    ForecastRecord,
    OptimizerMetrics,
    Position,
    SceneItem,
    SocialFeed,
    SocialTrade,
    Trader,
    VoiceCommand,
)


def seed_positions() -> List[Position]:
    return [
        Position(symbol="BTC/USD", quantity=2.5, avg_price=45000, current_price=47250, pnl=5625, pnl_percent=5.0),
        Position(symbol="ETH/USD", quantity=15, avg_price=2800, current_price=2950, pnl=2250, pnl_percent=5.36),
        Position(symbol="AAPL", quantity=100, avg_price=175, current_price=182, pnl=700, pnl_percent=4.0),
        Position(symbol="TSLA", quantity=50, avg_price=240, current_price=235, pnl=-250, pnl_percent=-2.08),
    ]


def seed_forecasts() -> List[ForecastRecord]:
    return [
        ForecastRecord(asset="BTC/USD", current_price=47250, predicted_1h=47580, predicted_24h=48900,
                       predicted_7d=51200, confidence=87.5, signal="BUY", ai_model="Transformer-XL"),
        ForecastRecord(asset="ETH/USD", current_price=2950, predicted_1h=2985, predicted_24h=3120,
                       predicted_7d=3350, confidence=82.3, signal="BUY", ai_model="LSTM-Attention"),
        ForecastRecord(asset="AAPL", current_price=182, predicted_1h=181.5, predicted_24h=180,
                       predicted_7d=178, confidence=75.8, signal="SELL", ai_model="GRU-Ensemble"),
        ForecastRecord(asset="TSLA", current_price=235, predicted_1h=235.5, predicted_24h=236,
                       predicted_7d=237, confidence=68.2, signal="HOLD", ai_model="CNN-BiLSTM"),
    ]


def seed_allocations() -> List[AllocationAsset]:
    # Percentages are independent; they are not normalised to 100.
    return [
        AllocationAsset(symbol="BTC", current_allocation=30, target_allocation=35, expected_return=12.5, risk=8.2),
        AllocationAsset(symbol="ETH", current_allocation=25, target_allocation=28, expected_return=15.3, risk=9.1),
        AllocationAsset(symbol="AAPL", current_allocation=20, target_allocation=18, expected_return=8.7, risk=4.5),
        AllocationAsset(symbol="TSLA", current_allocation=15, target_allocation=12, expected_return=18.2, risk=12.3),
        AllocationAsset(symbol="CASH", current_allocation=10, target_allocation=7, expected_return=2.1, risk=0.1),
    ]


OPTIMIZER_METRICS = OptimizerMetrics(
    current_sharpe=1.85,
    optimized_sharpe=2.34,
    current_return=11.2,
    optimized_return=13.8,
    current_risk=7.5,
    optimized_risk=6.8,
    qubits=127,
    iterations=10000,
)

DASHBOARD_STATS = DashboardStats(
    total_value=156750,
    daily_pnl=3250,
    daily_pnl_percent=2.12,
    win_rate=68.5,
    sharpe_ratio=2.34,
)


def seed_voice_history() -> List[VoiceCommand]:
    return [
        VoiceCommand(id="1", command="Buy 2 Bitcoin at market price", interpretation="Market order: BUY 2 BTC",
                     action="Order executed at $47,250", status="executed", timestamp="2 minutes ago"),
        VoiceCommand(id="2", command="Set stop loss for Ethereum at 2800",
                     interpretation="Stop-loss order: ETH @ $2,800", action="Stop-loss order placed",
                     status="executed", timestamp="5 minutes ago"),
        VoiceCommand(id="3", command="Show me portfolio performance", interpretation="Query: Portfolio analytics",
                     action="Dashboard updated", status="executed", timestamp="8 minutes ago"),
    ]


_TOP_TRADERS = [
    Trader(id="1", name="CryptoKing", avatar="👑", verified=True, followers=45200,
           win_rate=78.5, total_return=245.3, copiers=1250),
    Trader(id="2", name="QuantMaster", avatar="🎯", verified=True, followers=38900,
           win_rate=82.1, total_return=312.7, copiers=980),
    Trader(id="3", name="AITrader", avatar="🤖", verified=True, followers=52100,
           win_rate=75.3, total_return=198.4, copiers=1580),
]

SOCIAL_FEED = SocialFeed(
    top_traders=_TOP_TRADERS,
    trades=[
        SocialTrade(id="1", trader=_TOP_TRADERS[0], action="BUY", asset="BTC/USD", price=47250,
                    quantity=2.5, timestamp="2 minutes ago", likes=234, comments=45),
        SocialTrade(id="2", trader=_TOP_TRADERS[1], action="SELL", asset="ETH/USD", price=2950,
                    quantity=15, timestamp="5 minutes ago", likes=189, comments=32),
        SocialTrade(id="3", trader=_TOP_TRADERS[2], action="BUY", asset="AAPL", price=182,
                    quantity=100, timestamp="8 minutes ago", likes=156, comments=28),
    ],
)

SCENE_ITEMS = [
    SceneItem(label="BTC/USD", value="$47,250", color="#10b981", position=(-3, 0, 0)),
    SceneItem(label="ETH/USD", value="$2,950", color="#8b5cf6", position=(0, 0, 0)),
    SceneItem(label="Portfolio", value="$156K", color="#f59e0b", position=(3, 0, 0)),
    SceneItem(label="Risk", value="2.3%", color="#ef4444", position=(-3, 3, -2)),
    SceneItem(label="Sharpe", value="2.34", color="#06b6d4", position=(3, 3, -2)),
]
