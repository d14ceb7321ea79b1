from __future__ import annotations
import datetime
from typing import Iterable, Optional

import numpy as np

from market_proxy.rounding import round_price
from market_proxy.schemas import Prediction, PredictionPoint, PredictionSummary

POSITIVE_WORDS = ("surge", "gain", "profit", "growth", "bullish", "upgrade",
                  "beat", "success", "high", "record", "strong")
NEGATIVE_WORDS = ("fall", "loss", "decline", "bearish", "downgrade", "miss",
                  "weak", "low", "drop", "concern", "risk")

HORIZON_DAYS = 30
SENTIMENT_WEIGHT = 0.08
NOISE_BIAS = 0.7
NOISE_SCALE = 0.02
NEWS_BOOST_CAP = 0.01
DAILY_JITTER = 0.02
TREND_THRESHOLD = 1.0
SUMMARY_CONFIDENCE = 75


def score_sentiment(headlines: Iterable[Optional[str]]) -> float:
    """Keyword-count sentiment in [-1, 1].

    Each headline adds one point per positive word it contains and removes one
    per negative word (substring match, case-insensitive). The total is
    divided by the headline count, but never by less than 10.
    """
    score, count = 0, 0
    for headline in headlines:
        count += 1
        text = (headline or "").lower()
        score += sum(1 for w in POSITIVE_WORDS if w in text)
        score -= sum(1 for w in NEGATIVE_WORDS if w in text)
    return max(-1.0, min(1.0, score / max(count, 10)))


def confidence_for_day(day: int) -> float:
    return max(50.0, 90 - day * 1.3)


def classify_trend(expected_change: float) -> str:
    if expected_change > TREND_THRESHOLD:
        return "bullish"
    if expected_change < -TREND_THRESHOLD:
        return "bearish"
    return "neutral"


def predict(current_price: float, sentiment: float, news_count: int,
            rng: Optional[np.random.Generator] = None,
            today: Optional[datetime.date] = None) -> Prediction:
    rng = rng or np.random.default_rng()
    today = today or datetime.datetime.now(datetime.timezone.utc).date()

    # all terms in percent
    change = sentiment * SENTIMENT_WEIGHT * 100
    change += (rng.random() - NOISE_BIAS) * NOISE_SCALE * 100
    change += min(news_count / 50, NEWS_BOOST_CAP) * 100

    points = []
    for day in range(1, HORIZON_DAYS + 1):
        jitter = (rng.random() - 0.5) * DAILY_JITTER
        cumulative = change * (day / HORIZON_DAYS) + jitter * day * 100
        points.append(PredictionPoint(
            date=(today + datetime.timedelta(days=day)).isoformat(),
            price=round_price(current_price * (1 + cumulative / 100)),
            change_percent=round_price(cumulative),
            confidence=confidence_for_day(day),
        ))

    expected = round_price(change)
    summary = PredictionSummary(
        trend=classify_trend(expected),
        expected_change=expected,
        target_price=round_price(current_price * (1 + change / 100)),
        confidence=SUMMARY_CONFIDENCE,
    )
    return Prediction(predictions=points, summary=summary)
