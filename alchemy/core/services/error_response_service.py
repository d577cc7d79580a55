"""
Error Response Service for Alchemy.

Purpose
-------
Format domain and infrastructure exceptions into transport-neutral response
dicts for the boundary layer (HTTP handlers, bot commands, admin tooling).

Responsibilities
----------------
- Format domain exceptions using the EXCEPTION_TEMPLATES registry
- Attach the stable `error_code` and `kind` for programmatic handling
- Provide a generic fallback for unknown or infrastructure exceptions

Non-Responsibilities
--------------------
- Logging (handled by services)
- Exception creation or domain logic
- Rendering (the boundary decides how to show the dict)
"""

from __future__ import annotations

from typing import Any, Dict

from alchemy.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
)
from alchemy.domain.exceptions.registry import get_exception_template
from alchemy.modules.shared.exceptions import AlchemyDomainException, ErrorSeverity


class ErrorResponseService:
    """
    Formats exceptions into user-facing response structures.

    Example:
        >>> ErrorResponseService().format_error(TierTooLowError("Alchemist", "Adept"))
        {
            "title": "Tier Too Low",
            "description": "This reward requires **Alchemist** tier or higher.",
            "help_text": "Keep earning points to reach a higher tier.",
            "severity": ErrorSeverity.INFO,
            "status_code": 403,
            "error_code": "TIER_TOO_LOW",
            "kind": "tier_too_low",
        }
    """

    def format_error(self, error: Exception) -> Dict[str, Any]:
        template = get_exception_template(error)

        if template is not None:
            response = template.format(error)
        else:
            response = self._format_fallback_error(error)

        if isinstance(error, AlchemyDomainException):
            response["error_code"] = error.error_code
            response["kind"] = error.kind.value if error.kind else None
        else:
            response["error_code"] = "INTERNAL_ERROR"
            response["kind"] = None

        return response

    def _format_fallback_error(self, error: Exception) -> Dict[str, Any]:
        status_code = 500
        if isinstance(error, AlchemyDomainException):
            severity = error.severity
            description = error.message
        elif isinstance(error, (DatabaseInitializationError, DatabaseNotInitializedError)):
            severity = ErrorSeverity.CRITICAL
            description = "A system error occurred. Please try again in a moment."
            status_code = 503
        else:
            severity = ErrorSeverity.ERROR
            description = "An unexpected error occurred."

        return {
            "title": "Something Went Wrong",
            "description": description,
            "help_text": "The issue has been logged. If this persists, contact support.",
            "severity": severity,
            "status_code": status_code,
        }
