"""
Лексический анализатор шаблонов.

Токенизирует исходный текст шаблона, разбивая его на последовательность
текстовых фрагментов и тегов для последующего синтаксического анализа.
Работает по обычной строке: атрибуты исходника лексеру не нужны,
парсер восстанавливает их по позициям токенов.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import List, NoReturn, Optional, Tuple

from .tokens import DEFAULT_DELIMITERS, SIGILS, Delimiters, Token, TokenType
from ..errors import TemplateSyntaxError


class TemplateLexer:
    """
    Лексический анализатор шаблонов.

    Распознает:
    - обычный текст
    - переменные {{name}}
    - переменные без экранирования {{{name}}} и {{&name}}
    - секции {{#name}}, {{^name}}, {{/name}}
    - включения {{>name}}
    - комментарии {{! ... }}
    """

    def __init__(self, text: str, delimiters: Optional[Delimiters] = None, template_name: str = ""):
        self.text = text
        self.delimiters = delimiters or DEFAULT_DELIMITERS
        self.template_name = template_name
        self.position = 0
        self.length = len(text)

        # Начала строк для вычисления line/column по позиции
        self._line_starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._line_starts.append(i + 1)

    def tokenize(self) -> List[Token]:
        """
        Токенизирует весь исходный текст и возвращает список токенов.

        Последним всегда идет EOF.

        Raises:
            TemplateSyntaxError: Незакрытый тег или пустое имя тега
        """
        tokens: List[Token] = []

        while self.position < self.length:
            tag_start = self.text.find(self.delimiters.open, self.position)
            if tag_start < 0:
                tokens.append(self._text_token(self.position, self.length))
                self.position = self.length
                break

            if tag_start > self.position:
                tokens.append(self._text_token(self.position, tag_start))

            token = self._tag_token(tag_start)
            tokens.append(token)
            self.position = token.end

        line, column = self.location(self.length)
        tokens.append(Token(TokenType.EOF, "", self.length, self.length, line, column))
        return tokens

    def location(self, position: int) -> Tuple[int, int]:
        """Возвращает (line, column) для позиции, обе начиная с 1."""
        index = bisect_right(self._line_starts, position) - 1
        return index + 1, position - self._line_starts[index] + 1

    def _text_token(self, start: int, end: int) -> Token:
        line, column = self.location(start)
        return Token(TokenType.TEXT, self.text[start:end], start, end, line, column, (start, end))

    def _tag_token(self, start: int) -> Token:
        """Разбирает один тег, начинающийся в позиции start."""
        delims = self.delimiters

        if self.text.startswith(delims.triple_open, start):
            body_start = start + len(delims.triple_open)
            closer = delims.triple_close
            token_type: Optional[TokenType] = TokenType.UNESCAPED
        else:
            body_start = start + len(delims.open)
            closer = delims.close
            token_type = None

        body_end = self.text.find(closer, body_start)
        if body_end < 0:
            self._error(f"Unclosed tag, expected {closer!r}", start)

        name_start = body_start
        if token_type is None:
            sigil = self.text[body_start:body_start + 1]
            token_type = SIGILS.get(sigil, TokenType.VARIABLE)
            if token_type is not TokenType.VARIABLE:
                name_start += 1

        name_start, name_end = self._strip_span(name_start, body_end)
        name = self.text[name_start:name_end]

        if not name and token_type is not TokenType.COMMENT:
            self._error("Empty tag name", start)

        line, column = self.location(start)
        return Token(
            token_type,
            name,
            start,
            body_end + len(closer),
            line,
            column,
            (name_start, name_end),
        )

    def _strip_span(self, start: int, end: int) -> Tuple[int, int]:
        """Сужает диапазон, отбрасывая пробельные символы по краям."""
        while start < end and self.text[start].isspace():
            start += 1
        while end > start and self.text[end - 1].isspace():
            end -= 1
        return start, end

    def _error(self, message: str, position: int) -> NoReturn:
        line, column = self.location(position)
        raise TemplateSyntaxError(message, line, column, position, self.template_name)


def tokenize_template(text: str, delimiters: Optional[Delimiters] = None) -> List[Token]:
    """
    Удобная функция для токенизации шаблона.

    Args:
        text: Исходный текст шаблона
        delimiters: Разделители тегов (по умолчанию {{ и }})

    Returns:
        Список токенов

    Raises:
        TemplateSyntaxError: При ошибке лексического анализа
    """
    lexer = TemplateLexer(text, delimiters)
    return lexer.tokenize()


__all__ = ["TemplateLexer", "tokenize_template"]
