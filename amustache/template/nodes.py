"""
AST-узлы шаблона.

Закрытый набор неизменяемых вариантов, описывающих разобранный шаблон.
Сами узлы ничего не вычисляют: семантику каждого варианта реализует
рендерер (см. renderer.py).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Tuple

from ..text import AttributedText, Attributes, NO_ATTRIBUTES


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


def _freeze_children(children: Iterable[TemplateNode], owner: str) -> Tuple[TemplateNode, ...]:
    frozen = tuple(children)
    for child in frozen:
        if not isinstance(child, TemplateNode):
            raise TypeError(f"{owner} children must be TemplateNode instances, got {type(child).__name__}")
        if isinstance(child, GlobalNode):
            raise ValueError(f"GlobalNode cannot be nested inside {owner}")
    return frozen


@dataclass(frozen=True)
class EmptyNode(TemplateNode):
    """
    Узел, который ничего не выводит.

    Парсер создает его на месте комментариев {{! ... }}.
    """
    pass


@dataclass(frozen=True)
class GlobalNode(TemplateNode):
    """
    Корень шаблона: содержит узлы верхнего уровня в порядке следования.

    Единственная допустимая форма верхнего уровня; вложенным не бывает.
    """
    children: Tuple[TemplateNode, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "children", _freeze_children(self.children, "GlobalNode"))


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Выводится в результат как есть, вместе с диапазонами атрибутов.
    """
    text: AttributedText

    def __post_init__(self):
        object.__setattr__(self, "text", AttributedText.coerce(self.text))


@dataclass(frozen=True)
class SectionNode(TemplateNode):
    """
    Секция {{#name}}...{{/name}}: условие или повторение.

    Если значение ложно или пустой список, содержимое не выводится.
    Непустой список выводит содержимое для каждого элемента, делая элемент
    текущим контекстом. Иное истинное значение выводит содержимое один раз.

    Пример:

        {{#addresses}}
          Has address in: {{city}}
        {{/addresses}}
    """
    name: str
    children: Tuple[TemplateNode, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "children", _freeze_children(self.children, "SectionNode"))


@dataclass(frozen=True)
class InvertedSectionNode(TemplateNode):
    """
    Инвертированная секция {{^name}}...{{/name}}.

    Выводит содержимое ровно один раз, если значение отсутствует, ложно
    или является пустым списком. Никогда не повторяется.
    """
    name: str
    children: Tuple[TemplateNode, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "children", _freeze_children(self.children, "InvertedSectionNode"))


@dataclass(frozen=True)
class _VariableNode(TemplateNode):
    """Общая часть тегов подстановки: прогон, текст которого является именем."""
    run: AttributedText

    def __post_init__(self):
        object.__setattr__(self, "run", AttributedText.coerce(self.run))

    @property
    def name(self) -> str:
        """Имя для поиска в контексте."""
        return self.run.plain.strip()

    @property
    def attributes(self) -> Attributes:
        """Атрибуты места тега: с ними выводится подставленное значение."""
        if not self.run:
            return NO_ATTRIBUTES
        return self.run.attributes_at(0)


@dataclass(frozen=True)
class TagNode(_VariableNode):
    """
    Переменная {{name}}. Значение экранируется перед вставкой.
    """
    pass


@dataclass(frozen=True)
class UnescapedTagNode(_VariableNode):
    """
    Переменная без экранирования: {{{name}}} или {{&name}}.
    """
    pass


@dataclass(frozen=True)
class PartialNode(TemplateNode):
    """
    Включение {{>name}}. Поиск поддерева выполняет PartialResolver.
    """
    name: str


# Алиас для корня AST
TemplateAST = GlobalNode

# Все конкретные варианты; рендерер обязан обработать каждый
NODE_TYPES: Tuple[type, ...] = (
    EmptyNode,
    GlobalNode,
    TextNode,
    SectionNode,
    InvertedSectionNode,
    TagNode,
    UnescapedTagNode,
    PartialNode,
)


def child_nodes(node: TemplateNode) -> Tuple[TemplateNode, ...]:
    """Возвращает непосредственных потомков узла."""
    if isinstance(node, (GlobalNode, SectionNode, InvertedSectionNode)):
        return node.children
    return ()


def iter_nodes(node: TemplateNode) -> Iterator[TemplateNode]:
    """Обходит дерево в глубину в порядке документа, начиная с node."""
    stack: List[TemplateNode] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(child_nodes(current)))


def partial_names(node: TemplateNode) -> List[str]:
    """Имена включений в порядке первого появления, без повторов."""
    seen: Dict[str, None] = {}
    for item in iter_nodes(node):
        if isinstance(item, PartialNode):
            seen.setdefault(item.name, None)
    return list(seen)


def to_dict(node: TemplateNode) -> Dict[str, Any]:
    """
    JSON-совместимое представление дерева (для отладки и CLI).
    """
    if isinstance(node, EmptyNode):
        return {"type": "empty"}
    if isinstance(node, GlobalNode):
        return {"type": "global", "children": [to_dict(c) for c in node.children]}
    if isinstance(node, TextNode):
        return {"type": "text", "runs": node.text.to_json()}
    if isinstance(node, SectionNode):
        return {"type": "section", "name": node.name, "children": [to_dict(c) for c in node.children]}
    if isinstance(node, InvertedSectionNode):
        return {"type": "inverted_section", "name": node.name, "children": [to_dict(c) for c in node.children]}
    if isinstance(node, TagNode):
        return {"type": "tag", "name": node.name, "runs": node.run.to_json()}
    if isinstance(node, UnescapedTagNode):
        return {"type": "unescaped_tag", "name": node.name, "runs": node.run.to_json()}
    if isinstance(node, PartialNode):
        return {"type": "partial", "name": node.name}
    raise TypeError(f"Unknown node type: {type(node).__name__}")


__all__ = [
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
    "NODE_TYPES",
    "child_nodes",
    "iter_nodes",
    "partial_names",
    "to_dict",
]
