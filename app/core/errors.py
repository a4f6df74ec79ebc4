"""
API 오류 응답 정의

모든 오류는 {"error": <분류>, "details": <상세 메시지>} 형태의 JSON으로 반환됩니다.
"""
import logging
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """오류 분류(error)와 상세 메시지(details)를 함께 담는 HTTPException"""

    def __init__(self, status_code: int, error: str, details: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(status_code=status_code, detail=details or error, headers=headers)
        self.error = error
        self.details = details


def unauthorized(details: Optional[str] = None) -> ApiError:
    return ApiError(
        status.HTTP_401_UNAUTHORIZED,
        "Unauthorized",
        details,
        headers={"WWW-Authenticate": "Bearer"},
    )


def bad_request(details: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, "Bad Request", details)


def forbidden(details: str) -> ApiError:
    return ApiError(status.HTTP_403_FORBIDDEN, "Forbidden", details)


def not_found(details: str, error: str = "Not Found") -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, error, details)


def conflict(details: str) -> ApiError:
    return ApiError(status.HTTP_409_CONFLICT, "Conflict", details)


def internal_error(details: str) -> ApiError:
    return ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", details)


def error_body(error: str, details: Optional[str] = None) -> dict:
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return body


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form"))
        message = err.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc, ApiError):
        body = error_body(exc.error, exc.details)
    else:
        error = HTTPStatus(exc.status_code).phrase
        details = exc.detail if isinstance(exc.detail, str) and exc.detail != error else None
        body = error_body(error, details)
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _format_validation_errors(exc)
    logger.info(f"요청 검증 실패: {request.method} {request.url.path} - {details}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body("Bad Request", details))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"처리되지 않은 오류: {request.method} {request.url.path} - {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", str(exc)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
