from __future__ import annotations

import json
import logging
import sys
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, get_type_hints

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .model import MissingPolicy, RenderOptions
from ..errors import ConfigLoadError

_LOG = logging.getLogger(__name__)

_yaml = YAML(typ="safe")


def _err(path: str, msg: str) -> ConfigLoadError:
    _LOG.debug("RAISE at %s: %s", path, msg)
    return ConfigLoadError(f"{path}: {msg}")


def _coerce_field(val: Any, tp: Any, path: str) -> Any:
    if tp is MissingPolicy:
        if isinstance(val, MissingPolicy):
            return val
        if isinstance(val, str):
            try:
                return MissingPolicy(val.strip().lower())
            except ValueError:
                pass
        raise _err(path, f"expected one of {[p.value for p in MissingPolicy]}, got {val!r}")
    if tp is int:
        if isinstance(val, bool) or not isinstance(val, int):
            raise _err(path, f"expected int, got {type(val).__name__}")
        return val
    if tp is str:
        if not isinstance(val, str):
            raise _err(path, f"expected str, got {type(val).__name__}")
        return val
    return val


def options_from_dict(data: Optional[Mapping[str, Any]], *, path: str = "options",
                      base: Optional[RenderOptions] = None) -> RenderOptions:
    """
    Собирает RenderOptions из словаря.

    Неизвестные ключи и значения неверного типа дают ConfigLoadError
    с указанием пути поля.
    """
    base = base or RenderOptions()
    if data is None:
        return base
    if not isinstance(data, Mapping):
        raise _err(path, f"expected mapping, got {type(data).__name__}")

    hints = get_type_hints(RenderOptions)
    known = {f.name for f in fields(RenderOptions)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise _err(path, f"unknown keys: {', '.join(map(str, unknown))}")

    values: Dict[str, Any] = {}
    for name, raw in data.items():
        values[name] = _coerce_field(raw, hints[name], f"{path}.{name}")
        _LOG.debug("Option %s.%s = %r", path, name, values[name])

    try:
        return base.merged(**values)
    except ConfigLoadError as e:
        raise _err(path, str(e)) from None


def _read_text(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f"Failed to read {path}: {e}") from e


def load_yaml(path: Path) -> Any:
    """Читает YAML-файл (безопасный загрузчик)."""
    text = _read_text(path)
    try:
        return _yaml.load(text)
    except YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {path}: {e}") from e


def load_options(path: Path) -> RenderOptions:
    """
    Загружает настройки рендерера из YAML.

    Поддерживается как плоский файл, так и вложенный ключ `render:`.

        escape: html
        missing_partial: error
        max_partial_depth: 16
    """
    data = load_yaml(path) or {}
    if isinstance(data, Mapping) and "render" in data and len(data) == 1:
        return options_from_dict(data["render"], path=f"{path.name}:render")
    return options_from_dict(data, path=path.name)


def load_data(path: Path) -> Any:
    """
    Загружает данные для шаблона: JSON для *.json, иначе YAML.

    "-" читает YAML/JSON из stdin (JSON является подмножеством YAML).
    """
    if path.suffix.lower() == ".json":
        text = _read_text(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigLoadError(f"Invalid JSON in {path}: {e}") from e
    return load_yaml(path)


__all__ = ["load_options", "load_data", "load_yaml", "options_from_dict"]
