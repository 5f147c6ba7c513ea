"""
Атрибутированный текст для шаблонизатора.
"""

from __future__ import annotations

from .attributed import AttributedText, Run, Attributes, NO_ATTRIBUTES, TextLike

__all__ = ["AttributedText", "Run", "Attributes", "NO_ATTRIBUTES", "TextLike"]
