from __future__ import annotations

from .model import MissingPolicy, RenderOptions, DEFAULT_MAX_PARTIAL_DEPTH
from .load import load_options, load_data, options_from_dict

__all__ = [
    "MissingPolicy",
    "RenderOptions",
    "DEFAULT_MAX_PARTIAL_DEPTH",
    "load_options",
    "load_data",
    "options_from_dict",
]
