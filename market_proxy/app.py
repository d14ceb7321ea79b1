from __future__ import annotations
import asyncio, datetime, logging, sys
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
import uvicorn

from market_proxy.catalog import TOP_CRYPTOS, WATCHLIST, CryptoRef, crypto_symbol
from market_proxy.errors import (ApiError, ErrorKind, UpstreamError, api_error_handler,
                                 bad_request, classify, not_found, upstream_errors)
from market_proxy.finnhub_client import FinnhubClient
from market_proxy.indicators import build_indicators
from market_proxy.predictor import predict, score_sentiment
from market_proxy.schemas import (CryptoAsset, CryptoListResponse, HealthResponse,
                                  IndicatorResponse, PredictionResponse, SearchResponse,
                                  SearchResult, WatchlistEntry)
from market_proxy.settings import get_settings
from market_proxy.synthetic import generate_candles

logger = logging.getLogger("uvicorn.error")

MAX_SEARCH_RESULTS = 20
DEFAULT_SEED_PRICE = 100.0

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.finnhub = FinnhubClient(get_settings())
    yield
    app.state.finnhub.close()

app = FastAPI(title="Market Data Proxy", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(ApiError, api_error_handler)

def get_finnhub() -> FinnhubClient: return app.state.finnhub


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def _is_empty_quote(quote: Dict[str, Any]) -> bool:
    return quote.get("c") == 0 and quote.get("h") == 0 and quote.get("l") == 0

def _require_range(resolution: Optional[str], start: Optional[str], end: Optional[str]) -> Tuple[int, int]:
    if not resolution or not start or not end:
        raise bad_request("Missing required parameters: resolution, from, to")
    try:
        return int(start), int(end)
    except ValueError:
        raise bad_request("Parameters from and to must be UNIX timestamps in seconds") from None

async def _seed_price(fh: FinnhubClient, symbol: str) -> float:
    """Best-effort current price for synthetic candles."""
    try:
        quote = await run_in_threadpool(fh.quote, symbol)
    except UpstreamError as exc:
        logger.warning("Seed quote for %s failed, using default price: %s", symbol, exc.message)
        return DEFAULT_SEED_PRICE
    price = quote.get("c") if isinstance(quote, dict) else None
    return price or DEFAULT_SEED_PRICE

async def _synthetic(fh: FinnhubClient, symbol: str, start: int, end: int) -> Dict[str, Any]:
    logger.info("Generating mock candle data for %s (API limitation)", symbol)
    price = await _seed_price(fh, symbol)
    return generate_candles(price, start, end).model_dump(by_alias=True, exclude_none=True)


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="OK", timestamp=_now_iso())

@app.get("/api/search", response_model=SearchResponse)
async def search(q: Optional[str] = Query(None), fh: FinnhubClient = Depends(get_finnhub)):
    if not q or not q.strip():
        raise bad_request("Search query is required")

    with upstream_errors("Failed to search stocks"):
        data = await run_in_threadpool(fh.search, q.strip())
        matches = [r for r in (data.get("result") or []) if r.get("symbol") and r.get("description")]
        results = [SearchResult(symbol=r["symbol"],
                                description=r["description"],
                                type=r.get("type") or "Unknown",
                                display_symbol=r.get("displaySymbol") or r["symbol"])
                   for r in matches[:MAX_SEARCH_RESULTS]]
    return SearchResponse(count=len(results), results=results)

@app.get("/api/stock/{symbol}")
async def stock_quote(symbol: str, fh: FinnhubClient = Depends(get_finnhub)):
    with upstream_errors("Failed to fetch stock data", symbol=symbol,
                         unavailable="Stock data not available"):
        quote = await run_in_threadpool(fh.quote, symbol)
        if _is_empty_quote(quote):
            raise not_found("Stock not found or market closed", symbol)
    return quote

@app.get("/api/company/{symbol}")
async def company_profile(symbol: str, fh: FinnhubClient = Depends(get_finnhub)):
    with upstream_errors("Failed to fetch company profile", symbol=symbol,
                         unavailable="Company profile not available"):
        profile = await run_in_threadpool(fh.profile, symbol)
        if not profile:
            raise not_found("Company profile not found", symbol)
    return profile

@app.get("/api/candles/{symbol}")
async def candles(symbol: str,
                  resolution: Optional[str] = None,
                  start: Optional[str] = Query(None, alias="from"),
                  end: Optional[str] = Query(None, alias="to"),
                  fh: FinnhubClient = Depends(get_finnhub)):
    frm, to = _require_range(resolution, start, end)
    with upstream_errors("Failed to fetch candles data", symbol=symbol):
        try:
            data = await run_in_threadpool(fh.candles, symbol, resolution, frm, to)
        except UpstreamError as exc:
            if classify(exc) is not ErrorKind.PLAN_RESTRICTED:
                raise
            return await _synthetic(fh, symbol, frm, to)
        if data.get("s") == "no_data":
            raise not_found("No data available for this symbol and time range", symbol)
    return data

@app.get("/api/crypto/{symbol}")
async def crypto_quote(symbol: str, fh: FinnhubClient = Depends(get_finnhub)):
    with upstream_errors("Failed to fetch crypto data", symbol=symbol,
                         unavailable="Crypto data not available"):
        quote = await run_in_threadpool(fh.quote, crypto_symbol(symbol))
        if _is_empty_quote(quote):
            raise not_found("Crypto not found", symbol)
    return quote

async def _fetch_crypto(fh: FinnhubClient, ref: CryptoRef) -> CryptoAsset:
    quote = await run_in_threadpool(fh.quote, crypto_symbol(ref.symbol), timeout=fh.batch_timeout)
    return CryptoAsset(symbol=ref.symbol, name=ref.name, icon=ref.icon,
                       price=quote.get("c") or 0,
                       change=quote.get("d") or 0,
                       change_percent=quote.get("dp") or 0,
                       high=quote.get("h") or 0,
                       low=quote.get("l") or 0,
                       open=quote.get("o") or 0,
                       previous_close=quote.get("pc") or 0)

@app.get("/api/crypto-list", response_model=CryptoListResponse, response_model_exclude_none=True)
async def crypto_list(fh: FinnhubClient = Depends(get_finnhub)):
    outcomes = await asyncio.gather(*(_fetch_crypto(fh, ref) for ref in TOP_CRYPTOS),
                                    return_exceptions=True)
    assets: List[CryptoAsset] = []
    for ref, outcome in zip(TOP_CRYPTOS, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("Error fetching %s: %s", ref.symbol, outcome)
            outcome = CryptoAsset(symbol=ref.symbol, name=ref.name, icon=ref.icon,
                                  error="Failed to fetch")
        assets.append(outcome)

    cryptos = [a for a in assets if a.price > 0]
    return CryptoListResponse(count=len(cryptos), cryptos=cryptos, last_updated=_now_iso())

@app.get("/api/crypto-candles/{symbol}")
async def crypto_candles(symbol: str,
                         resolution: Optional[str] = None,
                         start: Optional[str] = Query(None, alias="from"),
                         end: Optional[str] = Query(None, alias="to"),
                         fh: FinnhubClient = Depends(get_finnhub)):
    frm, to = _require_range(resolution, start, end)
    pair = crypto_symbol(symbol)
    with upstream_errors("Failed to fetch crypto candles", symbol=symbol):
        try:
            data = await run_in_threadpool(fh.crypto_candles, pair, resolution, frm, to)
        except UpstreamError as exc:
            if exc.status_code not in (403, 404):
                raise
            return await _synthetic(fh, pair, frm, to)
        if data.get("s") == "no_data":
            return await _synthetic(fh, pair, frm, to)
    return data

@app.get("/api/crypto-news")
async def crypto_news(fh: FinnhubClient = Depends(get_finnhub)):
    with upstream_errors("Failed to fetch crypto news", unavailable="News not available"):
        return await run_in_threadpool(fh.news, "crypto")

@app.get("/api/news/{category}")
async def news(category: str, fh: FinnhubClient = Depends(get_finnhub)):
    with upstream_errors("Failed to fetch news", unavailable="News not available"):
        return await run_in_threadpool(fh.news, category)

@app.get("/api/market-news")
async def market_news(fh: FinnhubClient = Depends(get_finnhub)):
    with upstream_errors("Failed to fetch market news", unavailable="News not available"):
        return await run_in_threadpool(fh.news, "general")

@app.get("/api/company-news/{symbol}")
async def company_news(symbol: str, fh: FinnhubClient = Depends(get_finnhub)):
    with upstream_errors("Failed to fetch company news", symbol=symbol,
                         unavailable="News not available"):
        return await run_in_threadpool(fh.company_news, symbol)

@app.get("/api/stock-news/{symbol}")
async def stock_news(symbol: str, fh: FinnhubClient = Depends(get_finnhub)):
    with upstream_errors("Failed to fetch stock news", symbol=symbol,
                         unavailable="News not available"):
        return await run_in_threadpool(fh.company_news, symbol)

@app.get("/api/watchlist", response_model=List[WatchlistEntry])
def watchlist():
    return WATCHLIST

@app.get("/api/indicators/{symbol}", response_model=IndicatorResponse)
async def indicators(symbol: str, fh: FinnhubClient = Depends(get_finnhub)):
    with upstream_errors("Failed to fetch indicators", symbol=symbol,
                         unavailable="Financial data not available"):
        quote = await run_in_threadpool(fh.quote, symbol)
        financials = await run_in_threadpool(fh.metrics, symbol)
        metrics = (financials or {}).get("metric") or {}
        result = build_indicators(quote, metrics)
    return IndicatorResponse(symbol=symbol, indicators=result, last_updated=_now_iso())

@app.get("/api/prediction/{symbol}", response_model=PredictionResponse)
async def prediction(symbol: str, fh: FinnhubClient = Depends(get_finnhub)):
    """
    Keyword-sentiment projection:
    1) current price from the quote (404 when zero),
    2) last 30 days of company headlines scored against fixed word lists,
    3) 30-day price path from sentiment, news volume and noise.
    """
    with upstream_errors("Failed to generate prediction", symbol=symbol,
                         unavailable="Prediction not available"):
        quote = await run_in_threadpool(fh.quote, symbol)
        price = quote.get("c")
        if not price:
            raise not_found("Stock data not available", symbol)
        items = await run_in_threadpool(fh.company_news, symbol) or []
        sentiment = score_sentiment(item.get("headline") for item in items)
        projection = predict(price, sentiment, len(items))

    return PredictionResponse(symbol=symbol,
                              current_price=price,
                              prediction=projection,
                              sentiment=sentiment,
                              news_count=len(items),
                              analysis_date=_now_iso())


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as exc:
        logger.error("FINNHUB_API_KEY is not set in the environment or .env file: %s", exc)
        sys.exit(1)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
