"""
Custom exceptions and exception handlers for the detection service.
"""
from typing import Any, Dict, Iterable, List, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hardhat.core.logging import logger


class APIError(Exception):
    """Base class for API exceptions."""
    def __init__(self, status_code: int, message: str, **extra: Any):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message, **self.extra}


class ConfigurationError(APIError):
    """Exception raised when required credentials or identifiers are missing."""
    def __init__(self, message: str = "Service is not configured"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, message=message)


class ValidationError(APIError):
    """Exception raised for malformed or missing input fields."""
    def __init__(self, message: str = "Invalid input", fields: Optional[Iterable[str]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            message=message,
            fields=list(fields or [])
        )

    @property
    def fields(self) -> List[str]:
        return self.extra["fields"]


class DependencyError(APIError):
    """
    Exception raised when the external detector (or an image host) fails.

    The upstream status and body are kept verbatim for diagnosis.
    """
    def __init__(
        self,
        message: str = "Upstream service error",
        upstream_status: Optional[int] = None,
        detail: Any = None,
        status_code: int = status.HTTP_502_BAD_GATEWAY
    ):
        super().__init__(
            status_code=status_code,
            message=message,
            upstream_status=upstream_status,
            detail=detail
        )

    @property
    def upstream_status(self) -> Optional[int]:
        return self.extra["upstream_status"]

    @property
    def detail(self) -> Any:
        return self.extra["detail"]


class DependencyTimeout(DependencyError):
    """Exception raised when an outbound call exceeds its time budget."""
    def __init__(self, message: str = "Upstream service timed out"):
        super().__init__(
            message=message,
            status_code=status.HTTP_504_GATEWAY_TIMEOUT
        )


class NotFoundError(APIError):
    """Exception raised when a resource is not found."""
    def __init__(self, message: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, message=message)


# Exception handlers

async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handler for custom API exceptions."""
    if exc.status_code >= 500:
        logger.error(f"API Error on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"API Error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as a ValidationError naming the fields."""
    fields = []
    missing = []
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", []) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        if field not in fields:
            fields.append(field)
        if error.get("type") == "missing" and field not in missing:
            missing.append(field)
        errors.append(f"{field}: {error.get('msg', 'Validation error')}")

    if missing:
        message = f"Missing required fields: {', '.join(missing)}"
    else:
        message = f"Invalid fields: {', '.join(fields)}"

    logger.warning(f"Validation Error: {'; '.join(errors)}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationError(message, fields=fields).to_dict()
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.opt(exception=exc).error(f"Unhandled Exception: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "message": "Internal server error"
        }
    )
