from __future__ import annotations
import enum, logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PLAN_MESSAGE = ("This stock exchange or symbol is not supported by this data plan. "
                "Try US stocks (e.g., AAPL) or Indian NSE stocks (e.g., RELIANCE.NS)")


class UpstreamError(Exception):
    """Raised by the Finnhub client for HTTP errors, timeouts and network faults."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ErrorKind(enum.Enum):
    BAD_REQUEST = status.HTTP_400_BAD_REQUEST
    PLAN_RESTRICTED = status.HTTP_403_FORBIDDEN
    NOT_FOUND = status.HTTP_404_NOT_FOUND
    UPSTREAM_FAILURE = status.HTTP_500_INTERNAL_SERVER_ERROR


class ApiError(HTTPException):
    def __init__(self, kind: ErrorKind, error: str, *,
                 message: Optional[str] = None, symbol: Optional[str] = None):
        super().__init__(status_code=kind.value, detail=error)
        self.kind = kind
        self.error = error
        self.message = message
        self.symbol = symbol

    def body(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.error}
        if self.message is not None:
            payload["message"] = self.message
        if self.symbol is not None:
            payload["symbol"] = self.symbol
        return payload


def bad_request(error: str) -> ApiError:
    return ApiError(ErrorKind.BAD_REQUEST, error)


def not_found(error: str, symbol: Optional[str] = None) -> ApiError:
    return ApiError(ErrorKind.NOT_FOUND, error, symbol=symbol)


def classify(exc: BaseException) -> ErrorKind:
    if isinstance(exc, ApiError):
        return exc.kind
    if isinstance(exc, UpstreamError) and exc.status_code == status.HTTP_403_FORBIDDEN:
        return ErrorKind.PLAN_RESTRICTED
    return ErrorKind.UPSTREAM_FAILURE


def to_api_error(exc: Exception, failure: str, *, symbol: Optional[str] = None,
                 unavailable: Optional[str] = None) -> ApiError:
    """Translate an upstream exception into the JSON error returned to the browser.

    ``failure`` labels generic upstream failures (500) and ``unavailable``
    labels plan restrictions (403); it defaults to ``failure``.
    """
    if isinstance(exc, ApiError):
        return exc
    kind = classify(exc)
    if kind is ErrorKind.PLAN_RESTRICTED:
        return ApiError(kind, unavailable or failure, message=PLAN_MESSAGE, symbol=symbol)
    return ApiError(kind, failure, message=str(exc), symbol=symbol)


@contextmanager
def upstream_errors(failure: str, *, symbol: Optional[str] = None,
                    unavailable: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except ApiError:
        raise
    except Exception as exc:
        logger.error("%s%s: %s", failure, f" ({symbol})" if symbol else "", exc)
        raise to_api_error(exc, failure, symbol=symbol, unavailable=unavailable) from exc


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.body())
