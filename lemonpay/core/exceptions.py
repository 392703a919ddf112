import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class LemonpayError(Exception):
    """
    서비스 계층에서 던지는 에러의 공통 부모.
    status_code는 HTTP 계층에서 그대로 응답 코드로 사용한다.
    """
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def extra(self) -> Dict[str, Any]:
        return {}


class ValidationError(LemonpayError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(LemonpayError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(LemonpayError):
    status_code = status.HTTP_409_CONFLICT


class InvalidTransition(LemonpayError):
    status_code = status.HTTP_400_BAD_REQUEST


class InsufficientBalance(LemonpayError):
    """
    연간 한도 초과. 남은 일수와 한도를 같이 들고 다녀서
    클라이언트가 추가 조회 없이 사유를 보여줄 수 있게 한다.
    """
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        leave_type: str,
        remaining: float,
        limit: int,
        message: Optional[str] = None,
    ) -> None:
        self.leave_type = leave_type
        self.remaining = remaining
        self.limit = limit
        if message is None:
            message = (
                f"Not enough {leave_type.capitalize()} Leaves. "
                f"Only {remaining:g} day(s) remaining for the year (Limit: {limit})."
            )
        super().__init__(message)

    def extra(self) -> Dict[str, Any]:
        return {"remaining": self.remaining, "limit": self.limit}


async def _lemonpay_error_handler(_request: Request, exc: LemonpayError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "success": False, **exc.extra()},
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
    )


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    # 필드 누락/형식 오류도 400으로 통일
    messages = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(messages) or "Invalid request", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LemonpayError, _lemonpay_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
