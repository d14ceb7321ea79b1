# market_proxy/catalog.py
from typing import List, NamedTuple


class CryptoRef(NamedTuple):
    symbol: str
    name: str
    icon: str


# Ordered by market cap; the crypto list keeps this order.
TOP_CRYPTOS: List[CryptoRef] = [
    CryptoRef("BTC", "Bitcoin", "₿"),
    CryptoRef("ETH", "Ethereum", "Ξ"),
    CryptoRef("USDT", "Tether", "₮"),
    CryptoRef("BNB", "Binance Coin", "BNB"),
    CryptoRef("SOL", "Solana", "SOL"),
    CryptoRef("XRP", "Ripple", "XRP"),
    CryptoRef("ADA", "Cardano", "₳"),
    CryptoRef("DOGE", "Dogecoin", "Ð"),
    CryptoRef("AVAX", "Avalanche", "AVAX"),
    CryptoRef("MATIC", "Polygon", "MATIC"),
    CryptoRef("DOT", "Polkadot", "DOT"),
    CryptoRef("SHIB", "Shiba Inu", "SHIB"),
    CryptoRef("LTC", "Litecoin", "Ł"),
    CryptoRef("TRX", "TRON", "TRX"),
    CryptoRef("LINK", "Chainlink", "LINK"),
]

WATCHLIST = [
    {"symbol": "AAPL", "name": "Apple Inc."},
    {"symbol": "GOOGL", "name": "Alphabet Inc."},
    {"symbol": "MSFT", "name": "Microsoft Corporation"},
    {"symbol": "TSLA", "name": "Tesla, Inc."},
    {"symbol": "AMZN", "name": "Amazon.com, Inc."},
]


def crypto_symbol(symbol: str) -> str:
    """Exchange-qualified Binance/USDT pair, e.g. ``BTC`` -> ``BINANCE:BTCUSDT``."""
    return f"BINANCE:{symbol}USDT"
