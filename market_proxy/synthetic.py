from __future__ import annotations
from typing import Optional

import numpy as np

from market_proxy.rounding import round_price
from market_proxy.schemas import CandleSeries

SECONDS_PER_DAY = 86_400
MAX_DAYS = 30
DAILY_MOVE = 0.03
WICK = 0.02
MIN_VOLUME, MAX_VOLUME = 1_000_000, 6_000_000


def generate_candles(base_price: float, start: int, end: int,
                     rng: Optional[np.random.Generator] = None) -> CandleSeries:
    """Random-walk daily candles used when the upstream plan has no history.

    One candle per day from ``start``, at most 30, each opening at the
    previous close. The result is flagged with ``_mock``.
    """
    rng = rng or np.random.default_rng()
    days = min((end - start) // SECONDS_PER_DAY, MAX_DAYS)
    series = CandleSeries(s="ok", mock=True)

    price = float(base_price)
    for i in range(max(days, 0)):
        daily_change = (rng.random() - 0.5) * 2 * DAILY_MOVE
        open_ = price
        close = open_ * (1 + daily_change)
        high = max(open_, close) * (1 + rng.random() * WICK)
        low = min(open_, close) * (1 - rng.random() * WICK)

        series.t.append(start + i * SECONDS_PER_DAY)
        series.o.append(round_price(open_))
        series.h.append(round_price(high))
        series.l.append(round_price(low))
        series.c.append(round_price(close))
        series.v.append(int(rng.integers(MIN_VOLUME, MAX_VOLUME)))
        price = close

    return series
