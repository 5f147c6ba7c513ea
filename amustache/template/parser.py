"""
Парсер шаблонов.

Преобразует последовательность токенов в AST с корнем GlobalNode.
Текстовые фрагменты и имена тегов вырезаются из исходного
атрибутированного текста, поэтому атрибуты исходника сохраняются в узлах.
"""

from __future__ import annotations

import logging
from typing import List, NoReturn, Optional

from .lexer import TemplateLexer
from .nodes import (
    TemplateNode, GlobalNode, EmptyNode, TextNode, SectionNode, InvertedSectionNode,
    TagNode, UnescapedTagNode, PartialNode,
)
from .tokens import Delimiters, Token, TokenType
from ..errors import TemplateSyntaxError
from ..text import AttributedText, TextLike

logger = logging.getLogger(__name__)


class TemplateParser:
    """
    Рекурсивный парсер для шаблонов.

    Обрабатывает последовательность токенов и строит AST, проверяя
    парность открывающих и закрывающих тегов секций.
    """

    def __init__(self, source: TextLike, tokens: List[Token], template_name: str = ""):
        """
        Args:
            source: Исходный текст, по которому построены токены
            tokens: Токены лексера (заканчиваются EOF)
            template_name: Имя шаблона для диагностики
        """
        self.source = AttributedText.coerce(source)
        self.tokens = tokens
        self.template_name = template_name
        self.position = 0

    def parse(self) -> GlobalNode:
        """
        Парсит всю последовательность токенов в AST.

        Returns:
            Корневой узел GlobalNode

        Raises:
            TemplateSyntaxError: При незакрытой или несовпадающей секции
        """
        try:
            children = self._parse_nodes(opener=None)
        except RecursionError:
            raise TemplateSyntaxError("Sections are nested too deeply", template_name=self.template_name) from None
        return GlobalNode(children=tuple(children))

    def _parse_nodes(self, opener: Optional[Token]) -> List[TemplateNode]:
        """
        Парсит узлы до закрывающего тега opener (или до конца, если opener None).
        """
        nodes: List[TemplateNode] = []

        while not self._is_at_end():
            token = self._advance()

            if token.type == TokenType.SECTION_CLOSE:
                if opener is None:
                    self._error(f"Closing tag '{token.value}' without an opening section", token)
                if token.value != opener.value:
                    self._error(
                        f"Mismatched closing tag '{token.value}', expected '{opener.value}' "
                        f"(opened at {opener.line}:{opener.column})",
                        token,
                    )
                return nodes

            if token.type in (TokenType.SECTION_OPEN, TokenType.INVERTED_OPEN):
                body = self._parse_nodes(opener=token)
                node_cls = SectionNode if token.type == TokenType.SECTION_OPEN else InvertedSectionNode
                nodes.append(node_cls(name=token.value, children=tuple(body)))
                continue

            nodes.append(self._parse_leaf(token))

        if opener is not None:
            self._error(f"Unclosed section '{opener.value}'", opener)
        return nodes

    def _parse_leaf(self, token: Token) -> TemplateNode:
        """Создает узел для токена без вложенности."""
        if token.type == TokenType.TEXT:
            return TextNode(text=self.source.slice(token.position, token.end))
        if token.type == TokenType.VARIABLE:
            return TagNode(run=self._name_run(token))
        if token.type == TokenType.UNESCAPED:
            return UnescapedTagNode(run=self._name_run(token))
        if token.type == TokenType.PARTIAL:
            return PartialNode(name=token.value)
        if token.type == TokenType.COMMENT:
            return EmptyNode()
        self._error(f"Unexpected token {token.type.name}", token)

    def _name_run(self, token: Token) -> AttributedText:
        """Атрибутированный прогон имени тега, вырезанный из исходника."""
        start, end = token.name_span
        return self.source.slice(start, end)

    def _advance(self) -> Token:
        """Продвигается к следующему токену и возвращает предыдущий."""
        current = self.tokens[self.position]
        if not self._is_at_end():
            self.position += 1
        return current

    def _is_at_end(self) -> bool:
        """Проверяет, достигли ли мы конца токенов."""
        return (self.position >= len(self.tokens) or
                self.tokens[self.position].type == TokenType.EOF)

    def _error(self, message: str, token: Token) -> NoReturn:
        raise TemplateSyntaxError(message, token.line, token.column, token.position, self.template_name)


def parse_template(
    source: TextLike,
    delimiters: Optional[Delimiters] = None,
    template_name: str = "",
) -> GlobalNode:
    """
    Удобная функция для парсинга шаблона из текста.

    Args:
        source: Исходный текст шаблона (строка или AttributedText)
        delimiters: Разделители тегов
        template_name: Имя шаблона для диагностики

    Returns:
        Корневой узел GlobalNode

    Raises:
        TemplateSyntaxError: При ошибке разбора
    """
    text = AttributedText.coerce(source)
    lexer = TemplateLexer(text.plain, delimiters, template_name)
    tokens = lexer.tokenize()

    parser = TemplateParser(text, tokens, template_name)
    tree = parser.parse()
    logger.debug("Parsed template '%s' -> %d top-level nodes", template_name, len(tree.children))
    return tree


__all__ = ["TemplateParser", "parse_template"]
