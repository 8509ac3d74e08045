from __future__ import annotations
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import structlog

log = structlog.get_logger()


class LeaderboardError(Exception):
    """Base error; rendered as ``{success: false, message, error}``."""
    status_code = 500
    default_message = "Something went wrong!"

    def __init__(self, message: str | None = None, error: str | None = None):
        self.message = message or self.default_message
        self.error = error or self.message
        super().__init__(self.message)


class ValidationError(LeaderboardError):
    status_code = 400
    default_message = "Invalid request parameters"


class NotFoundError(LeaderboardError):
    status_code = 404
    default_message = "User not found"


class UnauthorizedError(LeaderboardError):
    status_code = 401
    default_message = "Not authorized"


class ForbiddenError(LeaderboardError):
    status_code = 403
    default_message = "Admin access required"


class UpstreamError(LeaderboardError):
    status_code = 500
    default_message = "Database unavailable"

    @classmethod
    def wrap(cls, message: str, exc: SQLAlchemyError) -> "UpstreamError":
        return cls(message=message, error=str(getattr(exc, "orig", None) or exc))


def _body(message: str, error: str | None) -> dict:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LeaderboardError)
    async def _leaderboard_error(request: Request, exc: LeaderboardError):
        if exc.status_code >= 500:
            log.error("request_failed", path=request.url.path, message=exc.message, error=exc.error)
        else:
            log.info("request_rejected", path=request.url.path, status=exc.status_code, message=exc.message)
        # 404s keep the bare {success, message} shape
        error = None if isinstance(exc, NotFoundError) else exc.error
        return JSONResponse(status_code=exc.status_code, content=_body(exc.message, error))

    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in errors
        )
        log.info("request_rejected", path=request.url.path, status=400, errors=len(errors))
        return JSONResponse(status_code=400, content=_body(ValidationError.default_message, detail))

    @app.exception_handler(SQLAlchemyError)
    async def _db_error(request: Request, exc: SQLAlchemyError):
        log.error("database_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content=_body("Database unavailable", str(exc)))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        log.exception("unhandled_error", path=request.url.path)
        return JSONResponse(status_code=500, content=_body("Something went wrong!", str(exc)))
