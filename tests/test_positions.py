import random

import pytest

from errors import InvalidConfiguration
from models import Position
from positions import PositionBook, compute_pnl, revalue
from seeds import seed_positions


def make_btc(current_price=45000.0):
    return Position(symbol="BTC/USD", quantity=2.5, avg_price=45000, current_price=current_price,
                    pnl=0.0, pnl_percent=0.0)


def test_revalue_pnl_matches_formula():
    result = revalue(make_btc(current_price=47250), spread=0.0)
    assert result.current_price == 47250
    assert result.pnl == pytest.approx(5625.0)
    assert result.pnl_percent == pytest.approx(5.0)


def test_revalue_is_reproducible_given_seed():
    a = revalue(make_btc(47250), reference_price=47000, rng=random.Random(11))
    b = revalue(make_btc(47250), reference_price=47000, rng=random.Random(11))
    assert a == b


def test_revalue_walks_from_previous_price_not_reference():
    pos = make_btc(47250)
    result = revalue(pos, reference_price=1.0, spread=10.0, rng=random.Random(3))
    assert abs(result.current_price - 47250) <= 5.0
    assert result.pnl == pytest.approx((result.current_price - 45000) * 2.5)


def test_revalue_returns_copy():
    pos = make_btc(47250)
    revalue(pos, spread=10.0, rng=random.Random(0))
    assert pos.current_price == 47250


def test_negative_pnl():
    pnl, pct = compute_pnl(240, 235, 50)
    assert pnl == -250
    assert pct == pytest.approx(-2.0833, abs=1e-3)


def test_book_tick_revalues_every_position_and_records_reference():
    book = PositionBook(seed_positions(), spread=10.0, rng=random.Random(9))
    before = [p.symbol for p in book.snapshot().positions]
    book.tick(reference_price=47123.0)
    snap = book.snapshot()
    assert [p.symbol for p in snap.positions] == before
    assert snap.reference_price == 47123.0
    for p in snap.positions:
        assert p.pnl == pytest.approx((p.current_price - p.avg_price) * p.quantity)


def test_book_rejects_empty_seed():
    with pytest.raises(InvalidConfiguration):
        PositionBook([])
