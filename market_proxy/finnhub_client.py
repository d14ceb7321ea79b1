from __future__ import annotations
import datetime, logging, requests
from typing import Any, Dict, List, Optional
from market_proxy.errors import UpstreamError
from market_proxy.settings import Settings

logger = logging.getLogger(__name__)

NEWS_WINDOW_DAYS = 30

class FinnhubClient:
    """Thin blocking wrapper around the Finnhub REST API.

    Every call appends the API token as a query parameter and raises
    ``UpstreamError`` on any non-2xx status, timeout or network fault.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.s = settings
        self.base = self.s.FINNHUB_BASE_URL.rstrip("/")
        self.timeout = self.s.REQUEST_TIMEOUT
        self.candle_timeout = self.s.CANDLE_TIMEOUT
        self.batch_timeout = self.s.CRYPTO_LIST_TIMEOUT
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def close(self) -> None:
        self._session.close()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None,
             timeout: Optional[float] = None) -> Any:
        url = f"{self.base}/{path.lstrip('/')}"
        query = {**(params or {}), "token": self.s.FINNHUB_API_KEY}
        try:
            r = self._session.get(url, params=query, timeout=timeout or self.timeout)
        except requests.Timeout as exc:
            logger.error("Finnhub %s timed out", path)
            raise UpstreamError(f"timeout of {timeout or self.timeout}s exceeded") from exc
        except requests.RequestException as exc:
            logger.error("Finnhub %s failed: %s", path, exc)
            raise UpstreamError(str(exc)) from exc
        if not r.ok:
            logger.error("Finnhub %s -> %s: %s", path, r.status_code, r.text[:300])
            raise UpstreamError(f"Request failed with status code {r.status_code}",
                                status_code=r.status_code)
        try:
            return r.json()
        except ValueError as exc:
            logger.error("Finnhub %s: non-JSON response: %s", path, r.text[:300])
            raise UpstreamError("Upstream returned a non-JSON response",
                                status_code=r.status_code) from exc

    # --- Lookups ---
    def search(self, query: str) -> Dict[str, Any]:
        return self._get("/search", {"q": query})

    def quote(self, symbol: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        return self._get("/quote", {"symbol": symbol}, timeout=timeout)

    def profile(self, symbol: str) -> Dict[str, Any]:
        return self._get("/stock/profile2", {"symbol": symbol})

    def metrics(self, symbol: str) -> Dict[str, Any]:
        return self._get("/stock/metric", {"symbol": symbol, "metric": "all"})

    # --- Candles ---
    def candles(self, symbol: str, resolution: str, start: int, end: int) -> Dict[str, Any]:
        return self._get("/stock/candle",
                         {"symbol": symbol, "resolution": resolution, "from": start, "to": end},
                         timeout=self.candle_timeout)

    def crypto_candles(self, symbol: str, resolution: str, start: int, end: int) -> Dict[str, Any]:
        return self._get("/crypto/candle",
                         {"symbol": symbol, "resolution": resolution, "from": start, "to": end},
                         timeout=self.candle_timeout)

    # --- News ---
    def news(self, category: str) -> List[Dict[str, Any]]:
        return self._get("/news", {"category": category})

    def company_news(self, symbol: str, today: Optional[datetime.date] = None) -> List[Dict[str, Any]]:
        """News for ``symbol`` over the last 30 days (UTC dates)."""
        end = today or datetime.datetime.now(datetime.timezone.utc).date()
        start = end - datetime.timedelta(days=NEWS_WINDOW_DAYS)
        return self._get("/company-news",
                         {"symbol": symbol, "from": start.isoformat(), "to": end.isoformat()})
