"""Property-based tests for the synthetic candle generator."""

import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

from market_proxy.synthetic import MAX_DAYS, SECONDS_PER_DAY, generate_candles

START = 1_700_000_000


def test_five_day_range_yields_five_daily_points():
    series = generate_candles(150.0, START, START + 5 * SECONDS_PER_DAY)

    assert len(series.t) == 5
    assert series.t[0] == START
    assert all(b - a == SECONDS_PER_DAY for a, b in zip(series.t, series.t[1:]))
    for o, h, l, c in zip(series.o, series.h, series.l, series.c):
        assert l <= o <= h
        assert l <= c <= h


def test_first_open_is_base_price_and_opens_follow_closes():
    series = generate_candles(123.45, START, START + 10 * SECONDS_PER_DAY,
                              rng=np.random.default_rng(7))

    assert series.o[0] == 123.45
    assert series.o[1:] == series.c[:-1]


def test_output_is_marked_synthetic():
    body = generate_candles(100, START, START + SECONDS_PER_DAY).model_dump(by_alias=True)

    assert body["_mock"] is True
    assert body["s"] == "ok"


def test_inverted_range_is_empty():
    series = generate_candles(100, START, START - SECONDS_PER_DAY)

    assert len(series) == 0


def test_same_seed_same_walk():
    a = generate_candles(100, START, START + 20 * SECONDS_PER_DAY, rng=np.random.default_rng(3))
    b = generate_candles(100, START, START + 20 * SECONDS_PER_DAY, rng=np.random.default_rng(3))

    assert a == b


class TestSyntheticProperties:

    @given(
        base_price=st.floats(min_value=0.01, max_value=100_000),
        start=st.integers(min_value=0, max_value=2_000_000_000),
        span=st.integers(min_value=0, max_value=400 * SECONDS_PER_DAY),
        seed=st.integers(min_value=0, max_value=2**32 - 1),
    )
    @settings(max_examples=100)
    def test_series_shape_and_bounds(self, base_price, start, span, seed):
        series = generate_candles(base_price, start, start + span, rng=np.random.default_rng(seed))

        expected = min(span // SECONDS_PER_DAY, MAX_DAYS)
        assert len(series.t) == expected
        for column in (series.o, series.h, series.l, series.c, series.v):
            assert len(column) == expected
        for o, h, l, c in zip(series.o, series.h, series.l, series.c):
            assert l <= min(o, c)
            assert max(o, c) <= h
        assert all(1_000_000 <= v < 6_000_000 for v in series.v)
        assert all(isinstance(v, int) for v in series.v)
        assert all(round(p, 2) == p for p in series.c)
