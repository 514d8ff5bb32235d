import random

import pytest

from errors import InvalidConfiguration
from forecasts import ForecastFeed, forecast_chart
from seeds import seed_forecasts
from conftest import FixedSource


def make_feed(rng):
    feed = ForecastFeed(rng=rng)
    feed.initialize(seed_forecasts())
    return feed


def test_confidence_stays_in_range_over_many_ticks():
    feed = make_feed(random.Random(21))
    for _ in range(2000):
        for record in feed.tick():
            assert 60.0 <= record.confidence <= 95.0


@pytest.mark.parametrize("u,bound", [(1.0, 95.0), (0.0, 60.0)])
def test_confidence_clamped_at_the_edges(u, bound):
    feed = make_feed(FixedSource(u))
    for _ in range(30):
        feed.tick()
    assert all(r.confidence == bound for r in feed.snapshot())


def test_prediction_steps_bounded_by_horizon():
    feed = make_feed(FixedSource(1.0))
    before = {r.asset: r for r in feed.snapshot()}
    for record in feed.tick():
        prev = before[record.asset]
        assert record.predicted_1h == pytest.approx(prev.predicted_1h + 50)
        assert record.predicted_24h == pytest.approx(prev.predicted_24h + 100)
        assert record.predicted_7d == pytest.approx(prev.predicted_7d + 250)


def test_signal_model_and_price_never_change():
    feed = make_feed(random.Random(5))
    seeds = {r.asset: r for r in feed.snapshot()}
    for _ in range(50):
        feed.tick()
    for record in feed.snapshot():
        seed = seeds[record.asset]
        assert record.signal == seed.signal
        assert record.ai_model == seed.ai_model
        assert record.current_price == seed.current_price


def test_insertion_order_preserved():
    feed = make_feed(random.Random(0))
    feed.tick()
    assert [r.asset for r in feed.snapshot()] == ["BTC/USD", "ETH/USD", "AAPL", "TSLA"]


def test_empty_seed_rejected():
    with pytest.raises(InvalidConfiguration):
        ForecastFeed().initialize([])


def test_forecast_chart_band():
    points = forecast_chart(base_price=47250, hours=24, rng=random.Random(8))
    assert len(points) == 24
    assert points[0].hour == "0h" and points[-1].hour == "23h"
    for p in points:
        assert p.upper_bound - p.lower_bound == 1000
