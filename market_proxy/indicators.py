from __future__ import annotations
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from market_proxy.rounding import to_fixed

logger = logging.getLogger(__name__)

# indicator name -> Finnhub metric keys, first truthy value wins
METRIC_SOURCES: Dict[str, Tuple[str, ...]] = {
    # valuation
    "peRatio": ("peBasicExclExtraTTM", "peNormalizedAnnual"),
    "pbRatio": ("pbQuarterly", "priceToBook"),
    "psRatio": ("psTTM",),
    "pcRatio": ("priceToCashFlowTTM",),
    "evToEbitda": ("enterpriseValueToEbitdaTTM",),
    # profitability
    "roe": ("roeTTM",),
    "roa": ("roaTTM",),
    "roic": ("roicTTM",),
    "grossMargin": ("grossMarginTTM",),
    "operatingMargin": ("operatingMarginTTM",),
    "netMargin": ("netMarginTTM",),
    # financial health
    "debtToEquity": ("totalDebtToEquityQuarterly",),
    "currentRatio": ("currentRatioQuarterly",),
    "quickRatio": ("quickRatioQuarterly",),
    "totalDebtToTotalCapital": ("totalDebtToTotalCapitalQuarterly",),
    # growth
    "revenueGrowth": ("revenueGrowthTTM",),
    "earningsGrowth": ("epsGrowthTTM",),
    "bookValuePerShare": ("bookValuePerShareQuarterly",),
    # balance sheet
    "totalEquity": ("totalShareholdersEquityQuarterly",),
    "totalAssets": ("totalAssetsQuarterly",),
    "totalLiabilities": ("totalLiabilitiesQuarterly",),
    "cashAndEquivalents": ("cashAndShortTermInvestmentsQuarterly",),
    # income statement
    "eps": ("epsBasicExclExtraItemsTTM",),
    "revenuePerShare": ("revenuePerShareTTM",),
    "ebitda": ("ebitdaTTM",),
    # market
    "marketCap": ("marketCapitalization",),
    "sharesOutstanding": ("sharesOutstanding",),
    "beta": ("beta",),
    # technical
    "rsi": ("rsi",),
    "macd": ("macd",),
}

# 52-week and volume figures follow the quote-derived fields
TRAILING_SOURCES: Dict[str, Tuple[str, ...]] = {
    "avgVolume": ("10DayAverageTradingVolume",),
    "week52High": ("52WeekHigh",),
    "week52Low": ("52WeekLow",),
    "week52Change": ("52WeekPriceReturnDaily",),
}

LARGE_NUMBER_KEYS = ("marketCap", "total", "ebitda")
PLAIN_KEYS = ("Ratio", "Margin", "Growth", "beta")
DOLLAR_KEYS = ("PerShare", "eps", "sma", "macd")


def _first(metrics: Mapping[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if metrics.get(key):
            return metrics[key]
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def abbreviate(value: float) -> str:
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if value >= threshold:
            return f"{to_fixed(value / threshold)}{suffix}"
    return to_fixed(value)


def format_indicator(name: str, value: Any) -> Any:
    """Render a metric for display; the matching rule is picked by the
    (case-sensitive) indicator name."""
    if not _is_number(value):
        return value
    if any(k in name for k in LARGE_NUMBER_KEYS):
        return abbreviate(value)
    if any(k in name for k in PLAIN_KEYS):
        return to_fixed(value)
    if any(k in name for k in DOLLAR_KEYS):
        return f"${to_fixed(value)}"
    return to_fixed(value)


def collect_indicators(quote: Mapping[str, Any],
                       metrics: Mapping[str, Any]) -> Dict[str, Optional[Any]]:
    raw: Dict[str, Optional[Any]] = {name: _first(metrics, keys)
                                     for name, keys in METRIC_SOURCES.items()}
    price = quote.get("c") or 0
    # Not moving averages: placeholders keyed off the 52-week range.
    raw["sma50"] = price * 0.95 if metrics.get("52WeekHigh") else None
    raw["sma200"] = price * 1.05 if metrics.get("52WeekLow") else None
    raw["volume"] = quote.get("v") or 0
    raw.update({name: _first(metrics, keys) for name, keys in TRAILING_SOURCES.items()})
    return raw


def build_indicators(quote: Mapping[str, Any], metrics: Mapping[str, Any]) -> Dict[str, Any]:
    """Formatted indicator set with absent metrics dropped."""
    raw = collect_indicators(quote, metrics)
    logger.debug("metric keys available: %s", sorted(metrics))
    return {name: format_indicator(name, value) for name, value in raw.items() if value is not None}
