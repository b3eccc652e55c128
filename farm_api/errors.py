"""Error types shared by the services and their HTTP translation."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException


class FarmError(Exception):
    """Base class for errors raised by the farm services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FarmError):
    """Client-supplied data is missing or malformed."""

    status_code = 400


class NotFoundError(FarmError):
    """The addressed row does not exist."""

    status_code = 404


class StoreFailure(FarmError):
    """A database call failed. The message is safe to show to clients."""

    status_code = 500


class CategoryCreationError(StoreFailure):
    """Auto-creating a category for an expense failed."""


def expense_not_found(expense_id: int) -> str:
    return f"Expense {expense_id} not found"


def missing_required_fields(fields: list[str]) -> str:
    return f"Missing required fields: {', '.join(fields)}"


def _error_body(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Render every handled failure as ``{"error": "..."}``."""

    @app.exception_handler(FarmError)
    async def _farm_error(_: Request, exc: FarmError):
        return _error_body(exc.status_code, exc.message)

    @app.exception_handler(HTTPException)
    async def _http_error(_: Request, exc: HTTPException):
        return _error_body(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(_: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        return _error_body(400, message)

    @app.exception_handler(SQLAlchemyError)
    async def _store_error(request: Request, exc: SQLAlchemyError):
        request.app.state.error_logger.error(
            "Unhandled database error",
            f"{request.method} {request.url.path}",
            {"error": str(exc)},
            request,
        )
        return _error_body(500, "Internal server error")
