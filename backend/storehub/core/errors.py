
"""
   应用级异常类型 + FastAPI 异常处理器。
   service/repository 只抛这些异常，HTTP 状态码的映射统一在这里做，
   客户端只拿到简短的 message，堆栈只进服务端日志。
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status


logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for all errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> dict:
        body: dict = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class AuthorizationError(AppError):
    """No/invalid session, or the resource belongs to someone else."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ValidationError(AppError):
    """Input rejected before any write; details carry the violated fields."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid data"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    """Another operation holds the resource (e.g. an import already running for the store)."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class RemoteError(AppError):
    """Any non-2xx status or network failure from a store API. Never retried."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Remote store request failed"


# ---------------- handlers ----------------

def _field_errors(exc: RequestValidationError) -> List[dict]:
    # 只保留前端需要的字段：path / message / type
    out: List[dict] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        out.append({
            "path": loc,
            "message": err.get("msg"),
            "code": err.get("type"),
        })
    return out


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request.failed method=%s path=%s err=%s: %s",
                     request.method, request.url.path, type(exc).__name__, exc.message)
    else:
        logger.info("request.rejected method=%s path=%s status=%s err=%s",
                    request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _field_errors(exc)
    logger.info("request.invalid method=%s path=%s fields=%s",
                request.method, request.url.path, [d["path"] for d in details])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": ValidationError.default_message, "details": details},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.crashed method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": AppError.default_message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
