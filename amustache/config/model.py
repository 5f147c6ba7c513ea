from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Any

from ..errors import ConfigLoadError


class MissingPolicy(str, enum.Enum):
    """Что делать с неразрешенным именем или включением."""
    IGNORE = "ignore"   # подставить пустоту и продолжить
    ERROR = "error"     # прервать рендеринг с RenderError


DEFAULT_MAX_PARTIAL_DEPTH = 64


@dataclass(frozen=True)
class RenderOptions:
    """
    Настройки рендерера.

    По умолчанию режим снисходительный: отсутствующие имена и включения
    дают пустой вывод.
    """
    escape: str = "html"                                  # имя функции экранирования
    missing_partial: MissingPolicy = MissingPolicy.IGNORE
    missing_name: MissingPolicy = MissingPolicy.IGNORE
    max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH    # предел вложенности {{>...}}

    def __post_init__(self):
        from ..template.escaping import ESCAPERS

        if self.escape not in ESCAPERS:
            raise ConfigLoadError(
                f"escape: unknown escaper '{self.escape}' (available: {', '.join(sorted(ESCAPERS))})"
            )
        for name in ("missing_partial", "missing_name"):
            value = getattr(self, name)
            if not isinstance(value, MissingPolicy):
                try:
                    object.__setattr__(self, name, MissingPolicy(value))
                except ValueError:
                    raise ConfigLoadError(f"{name}: expected one of 'ignore', 'error', got {value!r}") from None
        if isinstance(self.max_partial_depth, bool) or not isinstance(self.max_partial_depth, int):
            raise ConfigLoadError(f"max_partial_depth: expected int, got {type(self.max_partial_depth).__name__}")
        if self.max_partial_depth < 1:
            raise ConfigLoadError(f"max_partial_depth: must be >= 1, got {self.max_partial_depth}")

    @classmethod
    def strict(cls, **overrides: Any) -> RenderOptions:
        """Строгий режим: любое неразрешенное имя или включение считается ошибкой."""
        params: dict = {"missing_partial": MissingPolicy.ERROR, "missing_name": MissingPolicy.ERROR}
        params.update(overrides)
        return cls(**params)

    @property
    def is_strict(self) -> bool:
        return self.missing_partial is MissingPolicy.ERROR and self.missing_name is MissingPolicy.ERROR

    def merged(self, **changes: Any) -> RenderOptions:
        """Копия с измененными полями (None-значения игнорируются)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


__all__ = ["MissingPolicy", "RenderOptions", "DEFAULT_MAX_PARTIAL_DEPTH"]
