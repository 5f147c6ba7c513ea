"""
Attributed Mustache: шаблоны Mustache, текст и теги которых несут
атрибутированные прогоны вместо обычных строк.
"""

from __future__ import annotations

from .config import MissingPolicy, RenderOptions
from .errors import AmustacheError, TemplateSyntaxError, RenderError, RenderCancelled, ConfigLoadError
from .template import (
    RenderContext, Renderer, TemplateProcessor, parse_template, render_template,
    MappingPartialResolver, DirectoryPartialResolver,
)
from .text import AttributedText, Run

__all__ = [
    "AttributedText",
    "Run",
    "MissingPolicy",
    "RenderOptions",
    "AmustacheError",
    "TemplateSyntaxError",
    "RenderError",
    "RenderCancelled",
    "ConfigLoadError",
    "RenderContext",
    "Renderer",
    "TemplateProcessor",
    "parse_template",
    "render_template",
    "MappingPartialResolver",
    "DirectoryPartialResolver",
]
