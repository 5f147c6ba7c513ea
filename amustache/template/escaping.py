"""
Функции экранирования для целевых форматов вывода.
"""

from __future__ import annotations

from typing import Callable, Dict, List

Escaper = Callable[[str], str]

_HTML_TABLE = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
})

_XML_TABLE = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
})


def escape_html(text: str) -> str:
    return text.translate(_HTML_TABLE)


def escape_xml(text: str) -> str:
    return text.translate(_XML_TABLE)


def escape_none(text: str) -> str:
    return text


ESCAPERS: Dict[str, Escaper] = {
    "html": escape_html,
    "xml": escape_xml,
    "none": escape_none,
}


def get_escaper(name: str) -> Escaper:
    """
    Возвращает функцию экранирования по имени формата.

    Raises:
        ValueError: Неизвестный формат
    """
    try:
        return ESCAPERS[name]
    except KeyError:
        raise ValueError(f"Unknown escaper '{name}'. Available: {', '.join(list_escapers())}") from None


def list_escapers() -> List[str]:
    return sorted(ESCAPERS)


__all__ = ["Escaper", "ESCAPERS", "escape_html", "escape_xml", "escape_none", "get_escaper", "list_escapers"]
