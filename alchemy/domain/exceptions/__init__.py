"""
Domain exceptions package for Alchemy.

Exports
-------
- EXCEPTION_TEMPLATES: Registry mapping exception types to templates
- ExceptionTemplate, get_exception_template

The exception classes themselves live in
`alchemy.modules.shared.exceptions`.
"""

from .registry import EXCEPTION_TEMPLATES, ExceptionTemplate, get_exception_template

__all__ = [
    "EXCEPTION_TEMPLATES",
    "ExceptionTemplate",
    "get_exception_template",
]
