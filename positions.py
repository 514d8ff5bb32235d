# positions.py
"""Unrealized P&L for the held positions.

Each position walks its own ``current_price`` with small noise; it is not
pinned to the price window. The window's latest price is only recorded as
the reference the book was revalued against.
"""

import logging
from typing import Iterable, List, Optional

from errors import InvalidConfiguration
from models import Position, PositionsSnapshot
from random_walk import RandomSource, next_value

logger = logging.getLogger(__name__)


def compute_pnl(avg_price: float, current_price: float, quantity: float):
    """Return ``(pnl, pnl_percent)`` for a long position."""
    pnl = (current_price - avg_price) * quantity
    pnl_percent = (current_price - avg_price) / avg_price * 100 if avg_price else 0.0
    return pnl, pnl_percent


def revalue(position: Position, reference_price: Optional[float] = None, spread: float = 10.0,
            rng: Optional[RandomSource] = None) -> Position:
    """Return a copy of ``position`` after one mark-to-market step.

    ``current_price`` moves by a single random-walk draw around its previous
    value, then P&L and P&L% are recomputed from it. ``reference_price`` does
    not move the valuation. With ``spread=0`` the
    price is left where it is, which makes the P&L arithmetic directly
    checkable.
    """
    current = next_value(position.current_price, spread, rng=rng) if spread else position.current_price
    pnl, pnl_percent = compute_pnl(position.avg_price, current, position.quantity)
    return position.model_copy(update={"current_price": current, "pnl": pnl, "pnl_percent": pnl_percent})


class PositionBook:
    def __init__(self, positions: Iterable[Position], spread: float = 10.0,
                 rng: Optional[RandomSource] = None):
        self.positions: List[Position] = list(positions)
        if not self.positions:
            raise InvalidConfiguration("position seed set must not be empty")
        self.spread = spread
        self.rng = rng
        self.reference_price: Optional[float] = None

    def tick(self, reference_price: Optional[float] = None) -> List[Position]:
        self.positions = [revalue(p, reference_price, self.spread, self.rng) for p in self.positions]
        self.reference_price = reference_price
        logger.debug("revalued %d positions (reference %s)", len(self.positions), reference_price)
        return list(self.positions)

    def snapshot(self) -> PositionsSnapshot:
        return PositionsSnapshot(reference_price=self.reference_price, positions=list(self.positions))
