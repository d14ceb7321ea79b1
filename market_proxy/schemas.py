# market_proxy/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class SearchResult(CamelModel):
    symbol: str
    description: str
    type: str = "Unknown"
    display_symbol: str


class SearchResponse(BaseModel):
    count: int
    results: List[SearchResult]


class WatchlistEntry(BaseModel):
    symbol: str
    name: str


class CryptoAsset(CamelModel):
    symbol: str
    name: str
    icon: str
    price: float = 0
    change: float = 0
    change_percent: float = 0
    high: float = 0
    low: float = 0
    open: float = 0
    previous_close: float = 0
    error: Optional[str] = None


class CryptoListResponse(CamelModel):
    count: int
    cryptos: List[CryptoAsset]
    last_updated: str


class CandleSeries(BaseModel):
    """OHLCV series in Finnhub's columnar layout."""
    model_config = ConfigDict(populate_by_name=True)

    s: Literal["ok", "no_data"] = "ok"
    t: List[int] = []
    o: List[float] = []
    h: List[float] = []
    l: List[float] = []
    c: List[float] = []
    v: List[int] = []
    mock: Optional[bool] = Field(default=None, alias="_mock")

    def __len__(self) -> int:
        return len(self.t)


class IndicatorResponse(CamelModel):
    symbol: str
    indicators: Dict[str, Any]
    last_updated: str


class PredictionPoint(CamelModel):
    date: str
    price: float
    change_percent: float
    confidence: float


class PredictionSummary(CamelModel):
    trend: Literal["bullish", "bearish", "neutral"]
    expected_change: float
    target_price: float
    confidence: float = 75


class Prediction(BaseModel):
    predictions: List[PredictionPoint]
    summary: PredictionSummary


class PredictionResponse(CamelModel):
    symbol: str
    current_price: float
    prediction: Prediction
    sentiment: float
    news_count: int
    analysis_date: str

