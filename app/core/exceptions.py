from typing import Any

from fastapi import Request, status
from fastapi.responses import ORJSONResponse


class AppError(Exception):
    """Base application error with consistent schema."""

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class PointsError(AppError):
    """Points endpoint error: machine `error` text plus a localized `message`."""

    def __init__(
        self,
        error: str,
        localized_message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: str = "POINTS_ERROR",
    ):
        super().__init__(error, code=code, status_code=status_code)
        self.localized_message = localized_message


class PointsStorageError(PointsError):
    """Balance write failed; carries the raw storage message."""

    def __init__(self, error: str, localized_message: str):
        super().__init__(error, localized_message, code="STORAGE_ERROR")


async def points_exception_handler(request: Request, exc: PointsError) -> ORJSONResponse:
    """Points clients read a flat {success, error, message} body."""
    return ORJSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "message": exc.localized_message},
    )
