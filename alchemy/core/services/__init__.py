"""
Core application services: dependency container and error formatting.
"""

from .container import ServiceContainer
from .error_response_service import ErrorResponseService

__all__ = [
    "ErrorResponseService",
    "ServiceContainer",
]
