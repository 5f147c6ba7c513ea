"""
Значения контекста.

Классификация значений (отсутствует / логическое / скаляр / список / запись),
правило истинности для секций и приведение к тексту для тегов.
"""

from __future__ import annotations

import enum
import numbers
from collections.abc import Mapping, Sequence
from typing import Any, Union

from ..text import AttributedText


class _Missing:
    """Маркер отсутствующего значения (отличается от None в найденном ключе)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class ValueKind(enum.Enum):
    """Вид значения с точки зрения рендеринга."""
    ABSENT = "absent"
    BOOLEAN = "boolean"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    RECORD = "record"


_SCALAR_TYPES = (str, bytes, bytearray, AttributedText, numbers.Number)


def is_sequence(value: Any) -> bool:
    """Список для итерации в секции: Sequence, но не строка."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def classify(value: Any) -> ValueKind:
    """Определяет вид значения."""
    if value is MISSING or value is None:
        return ValueKind.ABSENT
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, _SCALAR_TYPES):
        return ValueKind.SCALAR
    if is_sequence(value):
        return ValueKind.SEQUENCE
    # Mapping и любые прочие объекты: поиск по ключам или атрибутам
    return ValueKind.RECORD


def is_truthy(value: Any) -> bool:
    """
    Правило истинности для секций.

    Ложны: отсутствующее значение, False, пустая строка (в том числе b"")
    и пустой список.
    Все остальное истинно, в том числе 0 и пустой словарь.
    """
    kind = classify(value)
    if kind is ValueKind.ABSENT:
        return False
    if kind is ValueKind.BOOLEAN:
        return value
    if kind is ValueKind.SEQUENCE:
        return len(value) > 0
    if isinstance(value, (str, bytes, bytearray, AttributedText)):
        return len(value) > 0
    return True


def to_text(value: Any) -> Union[str, AttributedText]:
    """
    Текстовое представление значения для подстановки в тег.
    """
    if value is MISSING or value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, AttributedText)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)


def lookup_member(container: Any, key: str) -> Any:
    """
    Ищет ключ внутри одного значения (без подъема по родителям).

    - Mapping: по ключу
    - список: по целочисленному индексу ("items.0")
    - прочие объекты-записи: по публичному атрибуту
    """
    kind = classify(container)
    if kind is ValueKind.RECORD:
        if isinstance(container, Mapping):
            return container[key] if key in container else MISSING
        if not key or key.startswith("_"):
            return MISSING
        return getattr(container, key, MISSING)
    if kind is ValueKind.SEQUENCE and key.isascii() and key.isdecimal():
        index = int(key)
        return container[index] if index < len(container) else MISSING
    return MISSING


__all__ = [
    "MISSING",
    "ValueKind",
    "classify",
    "is_sequence",
    "is_truthy",
    "to_text",
    "lookup_member",
]
