"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the user as clean messages
(without stack traces) must inherit from AmustacheError.

Parse-time and render-time failures are disjoint: a TemplateSyntaxError is
never raised while rendering an already parsed tree, and a RenderError never
signals malformed template source.

Programming errors and bugs should NOT inherit from AmustacheError;
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class AmustacheError(Exception):
    """
    Base class for all user-facing errors of the template engine.

    These errors indicate problems that the user can fix:
    malformed templates, unknown partials, invalid configuration, etc.
    """
    pass


class TemplateSyntaxError(AmustacheError):
    """
    Structural malformation of the tag grammar.

    Raised by the lexer/parser for unclosed or mismatched sections,
    empty tag names and unterminated tags. Carries the 1-based line/column
    and the 0-based offset of the offending tag.
    """

    def __init__(self, message: str, line: int = 0, column: int = 0, position: int = 0, template_name: str = ""):
        where = f" at {line}:{column}" if line else ""
        prefix = f"{template_name}: " if template_name else ""
        super().__init__(f"{prefix}{message}{where}")
        self.message = message
        self.line = line
        self.column = column
        self.position = position
        self.template_name = template_name


class RenderError(AmustacheError):
    """
    Render-time failure.

    Unresolved partial or name in strict mode, a partial recursion limit,
    or a resolution callback that itself failed.
    """

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name


class RenderCancelled(RenderError):
    """Rendering was aborted by the caller between two sibling nodes."""
    pass


class ConfigLoadError(AmustacheError, ValueError):
    """Invalid configuration value, reported with the path of the field."""
    pass


__all__ = [
    "AmustacheError",
    "TemplateSyntaxError",
    "RenderError",
    "RenderCancelled",
    "ConfigLoadError",
]
