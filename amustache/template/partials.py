"""
Partial resolvers.

A partial ({{>name}}) is resolved through the PartialResolver protocol:
resolve(name) returns a parsed tree, or None when the name is unknown.
What happens with an unknown name is decided by the renderer's policy,
not by the resolver.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Protocol, Union, runtime_checkable

from .nodes import GlobalNode, TemplateNode
from .parser import parse_template
from ..errors import RenderError
from ..text import AttributedText, TextLike

logger = logging.getLogger(__name__)

# Unified partial file suffix
PARTIAL_SUFFIX = ".mustache"

ParseFunc = Callable[[TextLike, str], GlobalNode]
PartialSource = Union[TemplateNode, str, AttributedText]


def _default_parse(source: TextLike, name: str) -> GlobalNode:
    return parse_template(source, template_name=name)


@runtime_checkable
class PartialResolver(Protocol):
    """Resolves a partial name into a tree."""

    def resolve(self, name: str) -> Optional[TemplateNode]:
        ...


class NullPartialResolver:
    """Knows no partials."""

    def resolve(self, name: str) -> Optional[TemplateNode]:
        return None


class MappingPartialResolver:
    """
    Partials from an in-memory mapping.

    Values are either ready trees or template source (str / AttributedText),
    which is parsed on first use and memoised.
    """

    def __init__(self, partials: Mapping[str, PartialSource], parse: Optional[ParseFunc] = None):
        self._sources: Dict[str, PartialSource] = dict(partials)
        self._parse = parse or _default_parse
        self._parsed: Dict[str, TemplateNode] = {}
        self._lock = threading.Lock()

    def resolve(self, name: str) -> Optional[TemplateNode]:
        source = self._sources.get(name)
        if source is None:
            return None
        if isinstance(source, TemplateNode):
            return source
        with self._lock:
            tree = self._parsed.get(name)
            if tree is None:
                tree = self._parse(source, name)
                self._parsed[name] = tree
            return tree


class DirectoryPartialResolver:
    """
    Partials loaded from files: <root>/<name><suffix>.

    Names may contain "/" to address subdirectories but must stay inside
    the root. Parsed trees are cached per name.
    """

    def __init__(self, root: Path, suffix: str = PARTIAL_SUFFIX, parse: Optional[ParseFunc] = None):
        self.root = Path(root).resolve()
        self.suffix = suffix
        self._parse = parse or _default_parse
        self._cache: Dict[str, GlobalNode] = {}
        self._lock = threading.Lock()

    def path_for(self, name: str) -> Path:
        """
        Maps a partial name to a file path.

        Raises:
            RenderError: If the resolved path escapes the root directory
        """
        path = (self.root / f"{name}{self.suffix}").resolve()
        try:
            path.relative_to(self.root)
        except ValueError:
            raise RenderError(f"Partial '{name}' resolves outside of {self.root}", name=name) from None
        return path

    def resolve(self, name: str) -> Optional[TemplateNode]:
        with self._lock:
            cached = self._cache.get(name)
        if cached is not None:
            return cached

        path = self.path_for(name)
        if not path.is_file():
            logger.debug("Partial '%s' not found at %s", name, path)
            return None

        text = path.read_text(encoding="utf-8")
        tree = self._parse(text, name)
        with self._lock:
            tree = self._cache.setdefault(name, tree)
        logger.debug("Loaded partial '%s' from %s", name, path)
        return tree

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()


class ChainPartialResolver:
    """Asks several resolvers in order; the first hit wins."""

    def __init__(self, *resolvers: PartialResolver):
        self.resolvers = list(resolvers)

    def resolve(self, name: str) -> Optional[TemplateNode]:
        for resolver in self.resolvers:
            tree = resolver.resolve(name)
            if tree is not None:
                return tree
        return None


__all__ = [
    "PARTIAL_SUFFIX",
    "PartialResolver",
    "NullPartialResolver",
    "MappingPartialResolver",
    "DirectoryPartialResolver",
    "ChainPartialResolver",
]
