"""
Процессор шаблонов.

Публичный API, объединяющий лексер, парсер и рендерер в удобный интерфейс
с кэшированием разобранных деревьев. Дерево неизменяемо, поэтому один
экземпляр из кэша переиспользуется во всех последующих рендерах.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .nodes import GlobalNode
from .parser import parse_template
from .partials import DirectoryPartialResolver, PARTIAL_SUFFIX, PartialResolver
from .renderer import CancelCheck, Renderer
from .tokens import DEFAULT_DELIMITERS, Delimiters
from ..config.model import RenderOptions
from ..text import AttributedText, TextLike

logger = logging.getLogger(__name__)

CacheKey = Tuple[Any, ...]


def _cache_key(name: str, source: TextLike) -> CacheKey:
    """
    Ключ кэша разбора.

    Атрибуты сравниваются по repr значений: 1, True и 1.0 равны как
    значения словаря, но дают разные деревья.
    """
    if isinstance(source, str):
        return (name, source)
    runs = tuple(
        (run.text, tuple((key, repr(value)) for key, value in run.attributes.items()))
        for run in source.runs
    )
    return (name, source.plain, runs)


class TemplateProcessor:
    """
    Основной процессор шаблонов.
    """

    def __init__(
        self,
        partials: Optional[PartialResolver] = None,
        options: Optional[RenderOptions] = None,
        delimiters: Optional[Delimiters] = None,
    ):
        """
        Args:
            partials: Резолвер включений
            options: Настройки рендеринга
            delimiters: Разделители тегов
        """
        self.options = options or RenderOptions()
        self.delimiters = delimiters or DEFAULT_DELIMITERS
        self.partials = partials
        self.renderer = Renderer(partials, self.options)

        # Кэш разобранных шаблонов: (имя, исходник) -> дерево
        self._template_cache: Dict[CacheKey, GlobalNode] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_directory(
        cls,
        root: Path,
        suffix: str = PARTIAL_SUFFIX,
        options: Optional[RenderOptions] = None,
        delimiters: Optional[Delimiters] = None,
    ) -> TemplateProcessor:
        """
        Создает процессор, который ищет включения в каталоге root.

        Включения разбираются с теми же разделителями и через общий кэш.
        """
        processor = cls(options=options, delimiters=delimiters)
        resolver = DirectoryPartialResolver(root, suffix, parse=lambda source, name: processor.parse(source, name))
        processor.partials = resolver
        processor.renderer = Renderer(resolver, processor.options)
        return processor

    def parse(self, source: TextLike, name: str = "") -> GlobalNode:
        """
        Парсит текст шаблона в AST с кэшированием.

        Raises:
            TemplateSyntaxError: При ошибке разбора (в кэш не попадает)
        """
        key = _cache_key(name, source)
        with self._lock:
            cached = self._template_cache.get(key)
        if cached is not None:
            logger.debug("Template cache hit for '%s'", name)
            return cached

        tree = parse_template(source, self.delimiters, name)
        with self._lock:
            tree = self._template_cache.setdefault(key, tree)
        return tree

    def render(
        self,
        template: Union[TextLike, GlobalNode],
        data: Any = None,
        *,
        name: str = "",
        cancel: Optional[CancelCheck] = None,
    ) -> AttributedText:
        """
        Рендерит шаблон (исходник или готовое дерево) с данными.

        Raises:
            TemplateSyntaxError: Ошибка разбора исходника
            RenderError: Ошибка рендеринга
        """
        tree = template if isinstance(template, GlobalNode) else self.parse(template, name)
        return self.renderer.render(tree, data, cancel=cancel)

    def render_text(self, template: Union[TextLike, GlobalNode], data: Any = None, *, name: str = "") -> str:
        """То же, что render(), но возвращает обычную строку."""
        return self.render(template, data, name=name).plain

    def render_file(self, path: Path, data: Any = None) -> AttributedText:
        """Рендерит шаблон из файла; именем шаблона служит имя файла без суффикса."""
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        return self.render(text, data, name=path.stem)

    def clear_cache(self) -> None:
        """Сбрасывает кэш разобранных шаблонов."""
        with self._lock:
            self._template_cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._template_cache)


def render_template(
    source: TextLike,
    data: Any = None,
    partials: Optional[PartialResolver] = None,
    options: Optional[RenderOptions] = None,
    delimiters: Optional[Delimiters] = None,
) -> AttributedText:
    """
    Удобная функция: разбирает и рендерит шаблон за один вызов.

    Args:
        source: Исходный текст шаблона
        data: Данные корневого фрейма контекста
        partials: Резолвер включений
        options: Настройки рендеринга
        delimiters: Разделители тегов

    Returns:
        Атрибутированный результат
    """
    tree = parse_template(source, delimiters)
    return Renderer(partials, options).render(tree, data)


__all__ = ["TemplateProcessor", "render_template"]
