# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception taxonomy for the API.
# Every failure is returned as a structured body: {"error", "status", "code"}.
# =============================================================================

import logging
import traceback
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse

from app.config import settings

logger = logging.getLogger(__name__)


class MarketplaceException(Exception):
    """
    Base exception for the marketplace API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "MARKETPLACE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        # Top-level flags clients branch on (e.g. has_pending_application)
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "status": self.status_code,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        result.update(self.extra)
        return result


# =============================================================================
# Authentication / Authorization
# =============================================================================

class UnauthenticatedError(MarketplaceException):
    """Raised when the request carries no valid session."""

    def __init__(self, message: str = "Unauthorized: Please log in"):
        super().__init__(
            message=message,
            code="UNAUTHENTICATED",
            status_code=401,
            suggestion="Sign in and retry with a valid session",
        )


class ForbiddenError(MarketplaceException):
    """Raised when the caller is signed in but lacks the required role."""

    def __init__(self, message: str = "Forbidden: Admin access required"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
        )


class RedirectRequired(Exception):
    """
    Raised by the page guard instead of an error response.

    Converted into a 303 redirect by the handler registered in main.py.
    """

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location


# =============================================================================
# Not Found
# =============================================================================

class NotFoundError(MarketplaceException):
    """Raised when an entity doesn't exist."""

    def __init__(self, entity: str, entity_id: str, code: str = "NOT_FOUND"):
        super().__init__(
            message=f"{entity} not found",
            code=code,
            status_code=404,
            suggestion=f"Check that the {entity.lower()} id is correct",
            details={"id": entity_id},
        )


class AssetNotFoundError(NotFoundError):
    """Raised when an asset ID doesn't exist."""

    def __init__(self, asset_id: str):
        super().__init__("Asset", asset_id, code="ASSET_NOT_FOUND")


class ProfileNotFoundError(NotFoundError):
    """Raised when a profile ID doesn't exist."""

    def __init__(self, profile_id: str):
        super().__init__("Contributor", profile_id, code="PROFILE_NOT_FOUND")


class PlanNotFoundError(NotFoundError):
    """Raised when a subscription plan doesn't exist."""

    def __init__(self, plan_id: str):
        super().__init__("Plan", plan_id, code="PLAN_NOT_FOUND")


# =============================================================================
# Invalid State
# =============================================================================

class InvalidStateError(MarketplaceException):
    """Raised when an operation is not legal from the entity's current state."""

    def __init__(
        self,
        message: str,
        code: str = "INVALID_STATE",
        details: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            details=details,
            extra=extra,
        )


class AssetNotPendingError(InvalidStateError):
    """Raised when approving or rejecting an asset that already left pending."""

    def __init__(self, asset_id: str, current_status: str):
        super().__init__(
            message=f"Asset is not pending. Current status: {current_status}",
            code="ASSET_NOT_PENDING",
            details={"asset_id": asset_id, "current_status": current_status},
        )


class AlreadyContributorError(InvalidStateError):
    """Raised when the profile already holds the contributor (or admin) role."""

    def __init__(self, message: str = "You are already an approved contributor."):
        super().__init__(message=message, code="ALREADY_CONTRIBUTOR")


class ApplicationPendingError(InvalidStateError):
    """Raised when a contributor application is already waiting for review."""

    def __init__(self):
        super().__init__(
            message="You have already submitted an application. Please wait for admin review.",
            code="APPLICATION_PENDING",
            extra={"has_pending_application": True},
        )


# =============================================================================
# Validation / Dependencies
# =============================================================================

class InputValidationError(MarketplaceException):
    """Raised when request input is malformed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=details,
        )


class DependencyFailureError(MarketplaceException):
    """Raised when the row store (or another backing service) fails a primary operation."""

    def __init__(self, message: str, error: str | None = None):
        super().__init__(
            message=message,
            code="DEPENDENCY_FAILURE",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            # Backend error text is only exposed while developing
            details={"error": error} if error and settings.is_development else None,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def marketplace_exception_handler(
    request: Request,
    exc: MarketplaceException
) -> JSONResponse:
    """Convert MarketplaceException to JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def redirect_required_handler(
    request: Request,
    exc: RedirectRequired
) -> RedirectResponse:
    """Send page-guard failures to the sign-in or home route."""
    return RedirectResponse(url=exc.location, status_code=303)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Malformed input is a 400 like every other validation failure.
    """
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request body",
            "status": 400,
            "code": "VALIDATION_ERROR",
            "errors": [
                {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
                for err in exc.errors()
            ],
        }
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions; stack traces only in development."""
    logger.exception(f"Unexpected error on {request.url.path}: {exc}")
    content: dict[str, Any] = {
        "error": "Internal server error",
        "status": 500,
        "code": "INTERNAL_ERROR",
    }
    if settings.is_development:
        content["details"] = {
            "message": str(exc),
            "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return JSONResponse(status_code=500, content=content)
