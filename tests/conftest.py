"""Shared fixtures: a scripted stand-in for the Finnhub client."""

from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from market_proxy.app import app, get_finnhub
from market_proxy.errors import UpstreamError


class FakeFinnhub:
    """Records every call and answers from ``responses``.

    ``responses`` maps (method, first positional argument) to a value, or to an
    exception instance to raise. Unknown keys fall back to (method, None).
    """

    batch_timeout = 5
    candle_timeout = 15

    def __init__(self) -> None:
        self.responses: Dict[Tuple[str, Optional[str]], Any] = {}
        self.calls: List[Tuple[str, tuple, dict]] = []

    def set(self, method: str, value: Any, key: Optional[str] = None) -> None:
        self.responses[(method, key)] = value

    def _answer(self, method: str, *args, **kwargs) -> Any:
        self.calls.append((method, args, kwargs))
        key = args[0] if args else None
        if (method, key) in self.responses:
            value = self.responses[(method, key)]
        elif (method, None) in self.responses:
            value = self.responses[(method, None)]
        else:
            raise AssertionError(f"unexpected upstream call {method}{args}")
        if isinstance(value, Exception):
            raise value
        return value

    def called(self, method: str) -> List[tuple]:
        return [args for m, args, _ in self.calls if m == method]

    def search(self, query):
        return self._answer("search", query)

    def quote(self, symbol, timeout=None):
        return self._answer("quote", symbol, timeout=timeout)

    def profile(self, symbol):
        return self._answer("profile", symbol)

    def metrics(self, symbol):
        return self._answer("metrics", symbol)

    def candles(self, symbol, resolution, start, end):
        return self._answer("candles", symbol, resolution, start, end)

    def crypto_candles(self, symbol, resolution, start, end):
        return self._answer("crypto_candles", symbol, resolution, start, end)

    def news(self, category):
        return self._answer("news", category)

    def company_news(self, symbol, today=None):
        return self._answer("company_news", symbol)


def forbidden() -> UpstreamError:
    return UpstreamError("Request failed with status code 403", status_code=403)


@pytest.fixture
def fake() -> FakeFinnhub:
    return FakeFinnhub()


@pytest.fixture
def client(fake):
    app.dependency_overrides[get_finnhub] = lambda: fake
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
