"""
Лексические типы.

Определяет типы токенов и разделители тегов.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Tuple


class TokenType(enum.Enum):
    """Типы токенов в шаблоне."""

    # Текстовый контент
    TEXT = "TEXT"

    # Теги
    VARIABLE = "VARIABLE"              # {{name}}
    UNESCAPED = "UNESCAPED"            # {{{name}}} или {{&name}}
    SECTION_OPEN = "SECTION_OPEN"      # {{#name}}
    INVERTED_OPEN = "INVERTED_OPEN"    # {{^name}}
    SECTION_CLOSE = "SECTION_CLOSE"    # {{/name}}
    PARTIAL = "PARTIAL"                # {{>name}}
    COMMENT = "COMMENT"                # {{! ... }}

    EOF = "EOF"


# Сигил сразу после открывающего разделителя -> тип тега
SIGILS: Dict[str, TokenType] = {
    "#": TokenType.SECTION_OPEN,
    "^": TokenType.INVERTED_OPEN,
    "/": TokenType.SECTION_CLOSE,
    ">": TokenType.PARTIAL,
    "&": TokenType.UNESCAPED,
    "!": TokenType.COMMENT,
}


@dataclass(frozen=True)
class Delimiters:
    """
    Открывающий и закрывающий разделители тегов.

    Форма без экранирования получается добавлением фигурных скобок:
    open + "{" ... "}" + close.
    """
    open: str = "{{"
    close: str = "}}"

    def __post_init__(self):
        if not self.open or not self.close:
            raise ValueError("Tag delimiters cannot be empty")
        if any(ch.isspace() for ch in self.open + self.close):
            raise ValueError(f"Tag delimiters cannot contain whitespace: {self.open!r} {self.close!r}")

    @property
    def triple_open(self) -> str:
        return self.open + "{"

    @property
    def triple_close(self) -> str:
        return "}" + self.close


DEFAULT_DELIMITERS = Delimiters()


@dataclass(frozen=True)
class Token:
    """
    Токен с позиционной информацией для точной диагностики ошибок.

    Для тегов value содержит имя без сигила и пробелов, а name_span хранит
    его границы в исходном тексте (по ним парсер вырезает атрибутированный
    прогон имени). Для текста value: сам текст.
    """
    type: TokenType
    value: str
    position: int           # Позиция начала токена в исходном тексте
    end: int                # Позиция сразу за токеном
    line: int               # Номер строки (начиная с 1)
    column: int             # Номер колонки (начиная с 1)
    name_span: Tuple[int, int] = (0, 0)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


__all__ = ["TokenType", "SIGILS", "Delimiters", "DEFAULT_DELIMITERS", "Token"]
