"""
Атрибутированный текст.

Минимальная модель «строки с разметкой»: неизменяемая последовательность
прогонов (runs), каждый из которых несёт свой текст и свой набор атрибутов.
Что означают атрибуты (шрифт, цвет, ссылка...), движку шаблонов неизвестно:
он только режет, склеивает и опрашивает диапазоны.

Обычная строка является частным случаем без атрибутов.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

Attributes = Mapping[str, Any]

NO_ATTRIBUTES: Attributes = MappingProxyType({})


def freeze_attributes(attributes: Optional[Mapping[str, Any]]) -> Attributes:
    """Возвращает неизменяемую копию набора атрибутов."""
    if not attributes:
        return NO_ATTRIBUTES
    return MappingProxyType(dict(attributes))


@dataclass(frozen=True)
class Run:
    """
    Участок текста с единым набором атрибутов.
    """
    text: str
    attributes: Attributes = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "attributes", freeze_attributes(self.attributes))

    def __hash__(self) -> int:
        # Значения атрибутов могут быть нехэшируемыми, хэшируем только ключи
        return hash((self.text, frozenset(self.attributes)))

    def __repr__(self) -> str:
        return f"Run({self.text!r}, {dict(self.attributes)!r})"


TextLike = Union[str, "AttributedText"]


class AttributedText:
    """
    Неизменяемая строка, размеченная прогонами атрибутов.

    Конкатенация структурно добавляет списки прогонов: соседние прогоны
    никогда не сливаются, поэтому границы диапазонов обоих операндов
    сохраняются как есть.
    """

    __slots__ = ("_runs", "_starts", "_length")

    def __init__(self, text: str = "", attributes: Optional[Mapping[str, Any]] = None):
        runs = (Run(text, attributes or NO_ATTRIBUTES),) if text else ()
        self._init_runs(runs)

    def _init_runs(self, runs: Tuple[Run, ...]) -> None:
        starts: List[int] = []
        offset = 0
        for run in runs:
            starts.append(offset)
            offset += len(run.text)
        self._runs = runs
        self._starts = tuple(starts)
        self._length = offset

    # ---- Конструкторы ----

    @classmethod
    def from_runs(cls, runs: Iterable[Union[Run, Tuple[str, Optional[Mapping[str, Any]]]]]) -> AttributedText:
        """
        Создает текст из прогонов или пар (text, attributes).

        Пустые прогоны отбрасываются.
        """
        normalized: List[Run] = []
        for item in runs:
            run = item if isinstance(item, Run) else Run(item[0], item[1] or NO_ATTRIBUTES)
            if run.text:
                normalized.append(run)
        result = cls.__new__(cls)
        result._init_runs(tuple(normalized))
        return result

    @classmethod
    def coerce(cls, value: TextLike) -> AttributedText:
        """Приводит строку к AttributedText; AttributedText возвращается как есть."""
        if isinstance(value, AttributedText):
            return value
        if isinstance(value, str):
            return cls(value)
        raise TypeError(f"Expected str or AttributedText, got {type(value).__name__}")

    @classmethod
    def join(cls, parts: Iterable[TextLike]) -> AttributedText:
        """Склеивает фрагменты в порядке следования."""
        runs: List[Run] = []
        for part in parts:
            runs.extend(cls.coerce(part)._runs)
        return cls.from_runs(runs)

    # ---- Доступ ----

    @property
    def runs(self) -> Tuple[Run, ...]:
        return self._runs

    @property
    def plain(self) -> str:
        """Текст без атрибутов."""
        return "".join(run.text for run in self._runs)

    def iter_ranges(self) -> Iterator[Tuple[int, int, Attributes]]:
        """Итерирует (start, end, attributes) для каждого прогона."""
        for start, run in zip(self._starts, self._runs):
            yield start, start + len(run.text), run.attributes

    def attributes_at(self, offset: int) -> Attributes:
        """
        Возвращает атрибуты символа в указанной позиции.

        Raises:
            IndexError: Если позиция вне диапазона [0, len)
        """
        if not 0 <= offset < self._length:
            raise IndexError(f"Offset {offset} out of range for text of length {self._length}")
        index = bisect_right(self._starts, offset) - 1
        return self._runs[index].attributes

    # ---- Операции ----

    def slice(self, start: int, end: Optional[int] = None) -> AttributedText:
        """
        Возвращает подстроку [start, end) с сохранением атрибутов.

        Индексы нормализуются как при обычном срезе строки.
        """
        start, end, _ = slice(start, end).indices(self._length)
        if start >= end:
            return AttributedText()

        pieces: List[Run] = []
        for run_start, run in zip(self._starts, self._runs):
            run_end = run_start + len(run.text)
            if run_end <= start:
                continue
            if run_start >= end:
                break
            lo = max(start, run_start) - run_start
            hi = min(end, run_end) - run_start
            pieces.append(Run(run.text[lo:hi], run.attributes))
        return AttributedText.from_runs(pieces)

    def concat(self, other: TextLike) -> AttributedText:
        """Структурно добавляет прогоны other в конец."""
        other = AttributedText.coerce(other)
        if not other._runs:
            return self
        if not self._runs:
            return other
        return AttributedText.from_runs(self._runs + other._runs)

    def map_text(self, transform: Callable[[str], str]) -> AttributedText:
        """Применяет преобразование текста к каждому прогону отдельно."""
        return AttributedText.from_runs(Run(transform(run.text), run.attributes) for run in self._runs)

    def with_attributes(self, attributes: Optional[Mapping[str, Any]]) -> AttributedText:
        """Тот же текст одним прогоном с заданными атрибутами."""
        return AttributedText(self.plain, attributes)

    def over(self, base: Optional[Mapping[str, Any]]) -> AttributedText:
        """
        Накладывает собственные атрибуты прогонов поверх base.

        Ключи прогона имеют приоритет над ключами base.
        """
        if not base:
            return self
        runs = []
        for run in self._runs:
            merged: Dict[str, Any] = dict(base)
            merged.update(run.attributes)
            runs.append(Run(run.text, merged))
        return AttributedText.from_runs(runs)

    def to_json(self) -> List[Dict[str, Any]]:
        """Сериализуемое представление: список прогонов."""
        return [{"text": run.text, "attributes": dict(run.attributes)} for run in self._runs]

    # ---- Протоколы ----

    def __str__(self) -> str:
        return self.plain

    def __len__(self) -> int:
        return self._length

    def __bool__(self) -> bool:
        return self._length > 0

    def __getitem__(self, key: Union[int, slice]) -> AttributedText:
        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise ValueError("AttributedText slicing does not support steps")
            return self.slice(0 if key.start is None else key.start, key.stop)
        if key < 0:
            key += self._length
        if not 0 <= key < self._length:
            raise IndexError("AttributedText index out of range")
        return self.slice(key, key + 1)

    def __add__(self, other: TextLike) -> AttributedText:
        if not isinstance(other, (str, AttributedText)):
            return NotImplemented
        return self.concat(other)

    def __radd__(self, other: TextLike) -> AttributedText:
        if not isinstance(other, str):
            return NotImplemented
        return AttributedText(other).concat(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributedText):
            return NotImplemented
        return self._runs == other._runs

    def __hash__(self) -> int:
        return hash(self._runs)

    def __repr__(self) -> str:
        if len(self._runs) == 1 and not self._runs[0].attributes:
            return f"AttributedText({self._runs[0].text!r})"
        return f"AttributedText.from_runs({list(self._runs)!r})"


__all__ = ["Attributes", "NO_ATTRIBUTES", "Run", "AttributedText", "TextLike", "freeze_attributes"]
