"""
Контекст рендеринга.

Неизменяемый связный стек фреймов. Каждая секция, входящая в значение,
создает новый контекст поверх текущего; родительские фреймы при этом
не изменяются, так что несколько рендеров могут безопасно делить общих
предков.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from .values import MISSING, lookup_member
from ..errors import RenderError


class RenderContext:
    """
    Фрейм контекста со ссылкой на родителя.

    Поиск имени начинается с самого внутреннего фрейма и поднимается
    к родителям, пока имя не найдено или фреймы не закончились.
    """

    __slots__ = ("_frame", "_parent", "_depth")

    def __init__(self, frame: Any, parent: Optional[RenderContext] = None):
        self._frame = frame
        self._parent = parent
        self._depth = 1 if parent is None else parent._depth + 1

    @classmethod
    def root(cls, data: Any = None) -> RenderContext:
        """Создает корневой контекст; None превращается в пустой словарь."""
        return cls({} if data is None else data)

    def push(self, frame: Any) -> RenderContext:
        """Возвращает новый контекст с frame в качестве внутреннего фрейма."""
        return RenderContext(frame, self)

    @property
    def top(self) -> Any:
        """Значение самого внутреннего фрейма."""
        return self._frame

    @property
    def parent(self) -> Optional[RenderContext]:
        return self._parent

    @property
    def depth(self) -> int:
        return self._depth

    def frames(self) -> Iterator[Any]:
        """Фреймы от внутреннего к внешнему."""
        ctx: Optional[RenderContext] = self
        while ctx is not None:
            yield ctx._frame
            ctx = ctx._parent

    def lookup(self, name: str) -> Any:
        """
        Ищет значение по имени.

        "." означает сам внутренний фрейм. Для составного имени "a.b.c" первый
        сегмент ищется с подъемом по родителям, остальные строго внутри
        найденного значения.

        Returns:
            Найденное значение или MISSING

        Raises:
            RenderError: Если доступ к значению сам завершился ошибкой
        """
        if name == ".":
            return self._frame

        head, *rest = name.split(".")
        try:
            value = self._lookup_chain(head)
            for part in rest:
                if value is MISSING:
                    break
                value = lookup_member(value, part)
        except (RenderError, RecursionError):
            raise
        except Exception as e:
            raise RenderError(f"Failed to resolve '{name}': {e}", name=name) from e
        return value

    def _lookup_chain(self, key: str) -> Any:
        for frame in self.frames():
            value = lookup_member(frame, key)
            if value is not MISSING:
                return value
        return MISSING

    def __repr__(self) -> str:
        return f"RenderContext(depth={self._depth}, top={self._frame!r})"


__all__ = ["RenderContext"]
