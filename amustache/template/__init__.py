"""
Шаблонизатор Mustache с атрибутированным текстом.

AST, лексер, парсер, контекст, включения и рендерер.
"""

from __future__ import annotations

from .context import RenderContext
from .escaping import get_escaper, list_escapers
from .lexer import TemplateLexer, tokenize_template
from .nodes import (
    TemplateNode, EmptyNode, GlobalNode, TextNode, SectionNode, InvertedSectionNode,
    TagNode, UnescapedTagNode, PartialNode, TemplateAST, iter_nodes, partial_names, to_dict,
)
from .parser import TemplateParser, parse_template
from .partials import (
    PartialResolver, NullPartialResolver, MappingPartialResolver,
    DirectoryPartialResolver, ChainPartialResolver,
)
from .processor import TemplateProcessor, render_template
from .renderer import Renderer, render_tree
from .tokens import Delimiters, Token, TokenType
from .values import MISSING, ValueKind, classify, is_truthy

__all__ = [
    "RenderContext",
    "get_escaper",
    "list_escapers",
    "TemplateLexer",
    "tokenize_template",
    "TemplateNode",
    "EmptyNode",
    "GlobalNode",
    "TextNode",
    "SectionNode",
    "InvertedSectionNode",
    "TagNode",
    "UnescapedTagNode",
    "PartialNode",
    "TemplateAST",
    "iter_nodes",
    "partial_names",
    "to_dict",
    "TemplateParser",
    "parse_template",
    "PartialResolver",
    "NullPartialResolver",
    "MappingPartialResolver",
    "DirectoryPartialResolver",
    "ChainPartialResolver",
    "TemplateProcessor",
    "render_template",
    "Renderer",
    "render_tree",
    "Delimiters",
    "Token",
    "TokenType",
    "MISSING",
    "ValueKind",
    "classify",
    "is_truthy",
]
