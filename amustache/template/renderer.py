"""
Рендерер AST шаблона.

Обходит дерево в порядке документа и собирает атрибутированный результат.
Рендерер не хранит состояния отдельного прохода в экземпляре: буфер
фрагментов, глубина включений и проверка отмены живут в объекте прохода,
поэтому один Renderer можно использовать из нескольких потоков.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type

from .context import RenderContext
from .escaping import get_escaper
from .nodes import (
    TemplateNode, EmptyNode, GlobalNode, TextNode, SectionNode, InvertedSectionNode,
    TagNode, UnescapedTagNode, PartialNode, NODE_TYPES,
)
from .partials import NullPartialResolver, PartialResolver
from .values import MISSING, ValueKind, classify, is_truthy, to_text
from ..config.model import MissingPolicy, RenderOptions
from ..errors import RenderCancelled, RenderError, TemplateSyntaxError
from ..text import AttributedText

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]


@dataclass
class _RenderPass:
    """Состояние одного вызова render()."""
    cancel: Optional[CancelCheck] = None
    partial_depth: int = 0
    out: List[AttributedText] = field(default_factory=list)

    def check_cancel(self) -> None:
        if self.cancel is not None and self.cancel():
            raise RenderCancelled("Rendering cancelled")


class Renderer:
    """
    Рендерер шаблонов.

    Обработчики зарегистрированы по типу узла; каждый вариант AST
    обязан иметь обработчик.
    """

    def __init__(self, partials: Optional[PartialResolver] = None, options: Optional[RenderOptions] = None):
        """
        Args:
            partials: Резолвер включений {{>name}}
            options: Настройки рендеринга
        """
        self.partials: PartialResolver = partials if partials is not None else NullPartialResolver()
        self.options = options or RenderOptions()
        self._escape = get_escaper(self.options.escape)

        self._processors: Dict[Type[TemplateNode], Callable[[Any, RenderContext, _RenderPass], None]] = {
            EmptyNode: self._render_empty,
            GlobalNode: self._render_container,
            TextNode: self._render_text,
            SectionNode: self._render_section,
            InvertedSectionNode: self._render_inverted_section,
            TagNode: self._render_tag,
            UnescapedTagNode: self._render_tag,
            PartialNode: self._render_partial,
        }
        missing = [t.__name__ for t in NODE_TYPES if t not in self._processors]
        if missing:
            raise TypeError(f"No processors registered for: {', '.join(missing)}")

    def render(
        self,
        tree: TemplateNode,
        context: Any = None,
        *,
        cancel: Optional[CancelCheck] = None,
    ) -> AttributedText:
        """
        Рендерит дерево в контексте.

        Args:
            tree: Корень шаблона (обычно GlobalNode)
            context: RenderContext или значение корневого фрейма
            cancel: Функция без аргументов; True между соседними узлами
                прерывает рендеринг

        Returns:
            Полный атрибутированный результат

        Raises:
            RenderError: Строгий режим, предел вложенности, сбой резолвера
                или отмена. Частичный результат не возвращается.
        """
        ctx = context if isinstance(context, RenderContext) else RenderContext.root(context)
        render_pass = _RenderPass(cancel=cancel)
        try:
            self._render_node(tree, ctx, render_pass)
        except RecursionError as e:
            raise RenderError("Template nesting is too deep to render") from e
        return AttributedText.join(render_pass.out)

    # ======= Обработчики узлов =======

    def _render_node(self, node: TemplateNode, ctx: RenderContext, render_pass: _RenderPass) -> None:
        processor = self._processors.get(type(node))
        if processor is None:
            raise TypeError(f"No processor found for node type: {type(node).__name__}")
        processor(node, ctx, render_pass)

    def _render_children(self, children, ctx: RenderContext, render_pass: _RenderPass) -> None:
        for child in children:
            render_pass.check_cancel()
            self._render_node(child, ctx, render_pass)

    def _render_empty(self, node: EmptyNode, ctx: RenderContext, render_pass: _RenderPass) -> None:
        pass

    def _render_container(self, node: GlobalNode, ctx: RenderContext, render_pass: _RenderPass) -> None:
        self._render_children(node.children, ctx, render_pass)

    def _render_text(self, node: TextNode, ctx: RenderContext, render_pass: _RenderPass) -> None:
        if node.text:
            render_pass.out.append(node.text)

    def _render_section(self, node: SectionNode, ctx: RenderContext, render_pass: _RenderPass) -> None:
        value = ctx.lookup(node.name)
        if not is_truthy(value):
            return

        kind = classify(value)
        if kind is ValueKind.SEQUENCE:
            for item in value:
                self._render_children(node.children, ctx.push(item), render_pass)
        elif kind is ValueKind.RECORD:
            self._render_children(node.children, ctx.push(value), render_pass)
        else:
            # Истинный скаляр: контекст не меняется
            self._render_children(node.children, ctx, render_pass)

    def _render_inverted_section(self, node: InvertedSectionNode, ctx: RenderContext, render_pass: _RenderPass) -> None:
        if not is_truthy(ctx.lookup(node.name)):
            self._render_children(node.children, ctx, render_pass)

    def _render_tag(self, node, ctx: RenderContext, render_pass: _RenderPass) -> None:
        name = node.name
        value = ctx.lookup(name)
        if value is MISSING:
            if self.options.missing_name is MissingPolicy.ERROR:
                raise RenderError(f"Unresolved name '{name}'", name=name)
            return

        escaped = isinstance(node, TagNode)
        site = node.attributes
        text = to_text(value)

        if isinstance(text, AttributedText):
            fragment = text.over(site)
            if escaped:
                fragment = fragment.map_text(self._escape)
        else:
            fragment = AttributedText(self._escape(text) if escaped else text, site)

        if fragment:
            render_pass.out.append(fragment)

    def _render_partial(self, node: PartialNode, ctx: RenderContext, render_pass: _RenderPass) -> None:
        name = node.name
        if render_pass.partial_depth >= self.options.max_partial_depth:
            raise RenderError(
                f"Partial '{name}' exceeds maximum nesting depth {self.options.max_partial_depth}",
                name=name,
            )

        try:
            tree = self.partials.resolve(name)
        except (RenderError, RecursionError):
            raise
        except TemplateSyntaxError as e:
            raise RenderError(f"Partial '{name}' failed to parse: {e}", name=name) from e
        except Exception as e:
            raise RenderError(f"Partial resolver failed for '{name}': {e}", name=name) from e

        if tree is None:
            if self.options.missing_partial is MissingPolicy.ERROR:
                raise RenderError(f"Unknown partial '{name}'", name=name)
            logger.warning("Unknown partial '%s', rendering nothing", name)
            return

        render_pass.partial_depth += 1
        try:
            self._render_node(tree, ctx, render_pass)
        finally:
            render_pass.partial_depth -= 1


def render_tree(
    tree: TemplateNode,
    data: Any = None,
    partials: Optional[PartialResolver] = None,
    options: Optional[RenderOptions] = None,
) -> AttributedText:
    """Удобная функция: рендерит готовое дерево."""
    return Renderer(partials, options).render(tree, data)


__all__ = ["Renderer", "CancelCheck", "render_tree"]
