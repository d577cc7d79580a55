"""
Exception message template registry for Alchemy.

Purpose
-------
Single source of truth for exception-to-message mappings. Converts domain
exceptions into structured, transport-neutral responses (title,
description, help text, severity and a suggested status code) so the
boundary layer never hardcodes error text.

Design Notes
------------
Each template contains:
- title: Short, clear error title
- template: Message template with {placeholder} interpolation from
  `exception.details`
- help_text: Optional guidance for the player
- severity: ErrorSeverity level
- status_code: HTTP-style status the boundary should use

Lookup walks the exception's MRO, so a subclass without its own template
inherits its parent's.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from alchemy.modules.shared.exceptions import (
    AlchemyDomainException,
    AlreadyClaimedError,
    CosmeticLockedError,
    ErrorSeverity,
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    OutOfStockError,
    TierTooLowError,
    ValidationError,
)


class ExceptionTemplate:
    """Template for formatting exception messages."""

    def __init__(
        self,
        title: str,
        template: str,
        help_text: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        status_code: int = 500,
    ):
        self.title = title
        self.template = template
        self.help_text = help_text
        self.severity = severity
        self.status_code = status_code

    def format(self, exception: Exception) -> Dict[str, Any]:
        """
        Format exception using template.

        Returns:
            Dict with 'title', 'description', 'help_text', 'severity',
            'status_code'
        """
        details: Dict[str, Any] = {}
        if isinstance(exception, AlchemyDomainException):
            details = exception.details.copy()

        try:
            description = self.template.format(**details)
        except (KeyError, ValueError):
            # Missing placeholder or mismatched format spec
            description = (
                exception.message
                if isinstance(exception, AlchemyDomainException)
                else str(exception)
            )

        return {
            "title": self.title,
            "description": description,
            "help_text": self.help_text,
            "severity": self.severity,
            "status_code": self.status_code,
        }


# ============================================================================
# EXCEPTION TEMPLATE REGISTRY
# ============================================================================

EXCEPTION_TEMPLATES: Dict[type, ExceptionTemplate] = {
    NotFoundError: ExceptionTemplate(
        title="Not Found",
        template="{resource_type} not found.",
        help_text=None,
        severity=ErrorSeverity.INFO,
        status_code=404,
    ),
    InvalidStateError: ExceptionTemplate(
        title="Not Allowed Yet",
        template="Cannot do that right now: {reason}.",
        help_text="Finish the previous step and try again.",
        severity=ErrorSeverity.INFO,
        status_code=422,
    ),
    AlreadyClaimedError: ExceptionTemplate(
        title="Already Claimed",
        template="You have already claimed the rewards for this quest.",
        help_text=None,
        severity=ErrorSeverity.DEBUG,
        status_code=409,
    ),
    ValidationError: ExceptionTemplate(
        title="Invalid Input",
        template="**{field}**: {validation_message}",
        help_text="Please check your input and try again.",
        severity=ErrorSeverity.INFO,
        status_code=400,
    ),
    InsufficientBalanceError: ExceptionTemplate(
        title="Insufficient Points",
        template="You need **{required:,} {resource}**, but you only have **{current:,}**.",
        help_text="Complete quests to earn more points.",
        severity=ErrorSeverity.INFO,
        status_code=400,
    ),
    OutOfStockError: ExceptionTemplate(
        title="Out of Stock",
        template="This reward is no longer available.",
        help_text="Check the rewards list for other options.",
        severity=ErrorSeverity.INFO,
        status_code=409,
    ),
    TierTooLowError: ExceptionTemplate(
        title="Tier Too Low",
        template="This reward requires **{required_tier}** tier or higher.",
        help_text="Keep earning points to reach a higher tier.",
        severity=ErrorSeverity.INFO,
        status_code=403,
    ),
    CosmeticLockedError: ExceptionTemplate(
        title="Not Unlocked Yet",
        template="This unlocks at **level {required_level}**. You are level {current_level}.",
        help_text="Level up or complete quests to unlock it.",
        severity=ErrorSeverity.INFO,
        status_code=403,
    ),
}


def get_exception_template(exception: Exception) -> Optional[ExceptionTemplate]:
    """
    Get the template registered for an exception type or its nearest base.

    Returns:
        ExceptionTemplate if found, None otherwise
    """
    for exception_type in type(exception).__mro__:
        template = EXCEPTION_TEMPLATES.get(exception_type)
        if template is not None:
            return template
    return None
