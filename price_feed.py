# price_feed.py
# Rolling (time, price, volume) window for one simulated instrument.
# Usage example:
#   feed = PriceFeed(capacity=50)
#   feed.initialize(base_price=47000, count=50)
#   sample = feed.tick()

import asyncio
import logging
import random
from collections import deque
from typing import AsyncIterator, Optional, Tuple

from errors import InvalidConfiguration
from models import PriceSample
from random_walk import RandomSource, clamp, next_value

logger = logging.getLogger(__name__)

MAX_VOLUME = 1_000_000
PRICE_ROUNDING = 0.005


class PriceFeed:
    def __init__(self, capacity: int = 50, spread: float = 500.0, drift: float = 0.0,
                 trend: float = 10.0, rng: Optional[RandomSource] = None):
        if capacity <= 0:
            raise InvalidConfiguration(f"capacity must be > 0, got {capacity}")
        self.capacity = capacity
        self.spread = spread
        self.drift = drift
        self.trend = trend
        self.rng = rng if rng is not None else random.Random()
        # Oldest sample falls off the left once the window is full
        self.samples: deque[PriceSample] = deque(maxlen=capacity)
        self.ticks = 0
        self._minute = 0
        self._base_price = 0.0

    def _sample(self, previous: float, drift: float) -> PriceSample:
        # Rounding to cents happens after the step, so consecutive prices can
        # differ by up to spread/2 + |drift| + PRICE_ROUNDING.
        price = clamp(next_value(previous, self.spread, drift, self.rng), 0.0)
        volume = round(self.rng.uniform(0, MAX_VOLUME))
        sample = PriceSample(time=f"{self._minute}m", price=round(price, 2), volume=volume)
        self._minute += 1
        return sample

    def initialize(self, base_price: float, count: int) -> None:
        """Build the starting window by walking ``count`` steps from ``base_price``.

        Each step carries ``trend`` as its drift so the opening chart slopes
        instead of hovering flat around the base price.
        """
        if base_price < 0:
            raise InvalidConfiguration(f"base_price must be >= 0, got {base_price}")
        self.samples.clear()
        self.ticks = 0
        self._minute = 0
        price = float(base_price)
        for _ in range(count):
            sample = self._sample(price, self.trend)
            self.samples.append(sample)
            price = sample.price
        self._base_price = float(base_price)
        logger.debug("price window initialised with %d samples from %.2f", len(self.samples), base_price)

    def tick(self) -> PriceSample:
        last = self.samples[-1].price if self.samples else self._base_price
        sample = self._sample(last, self.drift)
        self.samples.append(sample)
        self.ticks += 1
        return sample

    def latest(self) -> Optional[PriceSample]:
        return self.samples[-1] if self.samples else None

    def window(self) -> Tuple[PriceSample, ...]:
        return tuple(self.samples)


async def price_stream(feed: PriceFeed, poll_ms: int = 100) -> AsyncIterator[PriceSample]:
    """Yield every sample the feed produces from now on.

    The stream only observes; something else (normally the scheduler) has to
    be ticking the feed. If several ticks land between polls, each of them is
    yielded in order.
    """
    seen = feed.ticks
    while True:
        await asyncio.sleep(max(0.0, poll_ms / 1000.0))
        fresh = feed.ticks - seen
        if fresh <= 0:
            continue
        seen = feed.ticks
        for sample in list(feed.samples)[-min(fresh, len(feed.samples)):]:
            yield sample
