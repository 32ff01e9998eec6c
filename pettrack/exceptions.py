import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIException(HTTPException):
    """Operational error surfaced verbatim to the caller."""

    status_code_default = 500
    default_message = "Internal server error"

    def __init__(self, detail: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(status_code=self.status_code_default, detail=detail or self.default_message)
        self.errors = errors


class ValidationError(APIException):
    status_code_default = 400
    default_message = "Validation failed"


class BadRequestError(APIException):
    status_code_default = 400
    default_message = "Bad request"


class UnauthorizedError(APIException):
    status_code_default = 401
    default_message = "Authentication required"


class ForbiddenError(APIException):
    status_code_default = 403
    default_message = "Forbidden"


class NotFoundError(APIException):
    status_code_default = 404
    default_message = "Resource not found"


class ConflictError(APIException):
    status_code_default = 409
    default_message = "Conflict"


def create_error_response(message: str, errors: Optional[List[Dict[str, Any]]] = None) -> dict:
    """Create a standardized error response"""
    body: Dict[str, Any] = {
        "success": False,
        "message": message,
    }
    if errors:
        body["errors"] = errors
    return body


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    errors = getattr(exc, "errors", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail), errors),
        headers=getattr(exc, "headers", None),
    )


def _format_validation_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in exc.errors():
        # drop the "body"/"query"/"path" prefix from the location
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return errors


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _format_validation_errors(exc)
    logger.info(f"Validation failed on {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content=create_error_response("Validation failed", errors),
    )
