# forecasts.py
import logging
import random
from typing import Dict, Iterable, List, Optional

from errors import InvalidConfiguration
from models import ForecastChartPoint, ForecastRecord
from random_walk import RandomSource, clamp, next_value

logger = logging.getLogger(__name__)


class ForecastFeed:
    """Per-asset horizon predictions that jitter on every tick.

    Only the three predictions and the confidence move. ``signal``,
    ``ai_model`` and ``current_price`` stay at their seed values for the whole
    session, so a BUY label can sit next to falling predictions; that is
    expected display staleness, not corruption.
    """

    def __init__(self, spread_1h: float = 100.0, spread_24h: float = 200.0, spread_7d: float = 500.0,
                 confidence_spread: float = 5.0, confidence_min: float = 60.0, confidence_max: float = 95.0,
                 rng: Optional[RandomSource] = None):
        self.spread_1h = spread_1h
        self.spread_24h = spread_24h
        self.spread_7d = spread_7d
        self.confidence_spread = confidence_spread
        self.confidence_min = confidence_min
        self.confidence_max = confidence_max
        self.rng = rng
        # dicts keep insertion order, which is the display order
        self.records: Dict[str, ForecastRecord] = {}

    def initialize(self, seed_records: Iterable[ForecastRecord]) -> None:
        records = {r.asset: r for r in seed_records}
        if not records:
            raise InvalidConfiguration("forecast seed set must not be empty")
        self.records = {
            asset: r.model_copy(update={"confidence": self._clamp_confidence(r.confidence)})
            for asset, r in records.items()
        }

    def _clamp_confidence(self, value: float) -> float:
        return clamp(value, self.confidence_min, self.confidence_max)

    def _perturb(self, record: ForecastRecord) -> ForecastRecord:
        confidence = next_value(record.confidence, self.confidence_spread, rng=self.rng)
        return record.model_copy(update={
            "predicted_1h": next_value(record.predicted_1h, self.spread_1h, rng=self.rng),
            "predicted_24h": next_value(record.predicted_24h, self.spread_24h, rng=self.rng),
            "predicted_7d": next_value(record.predicted_7d, self.spread_7d, rng=self.rng),
            "confidence": self._clamp_confidence(confidence),
        })

    def tick(self) -> List[ForecastRecord]:
        self.records = {asset: self._perturb(r) for asset, r in self.records.items()}
        logger.debug("perturbed %d forecast records", len(self.records))
        return list(self.records.values())

    def snapshot(self) -> List[ForecastRecord]:
        return list(self.records.values())


def forecast_chart(base_price: float = 47250.0, hours: int = 24,
                   rng: Optional[RandomSource] = None) -> List[ForecastChartPoint]:
    """Hourly actual-vs-predicted series with a fixed ±500 band.

    ``actual`` trends up by 50/hour with wide noise, ``predicted`` by 70/hour
    with narrower noise. Values are rounded to whole units.
    """
    source = rng if rng is not None else random.Random()
    points = []
    for i in range(hours):
        actual = next_value(base_price, 2000, drift=i * 50, rng=source)
        predicted = next_value(base_price, 500, drift=i * 70, rng=source)
        points.append(ForecastChartPoint(
            hour=f"{i}h",
            actual=round(actual),
            predicted=round(predicted),
            upper_bound=round(predicted + 500),
            lower_bound=round(predicted - 500),
        ))
    return points
