"""
Тесты классификации значений контекста и правила истинности.
"""

from collections import OrderedDict
from types import SimpleNamespace

import pytest

from amustache.template.values import (
    MISSING, ValueKind, classify, is_sequence, is_truthy, lookup_member, to_text,
)
from amustache.text import AttributedText


class TestClassify:

    @pytest.mark.parametrize("value,kind", [
        (MISSING, ValueKind.ABSENT),
        (None, ValueKind.ABSENT),
        (True, ValueKind.BOOLEAN),
        (False, ValueKind.BOOLEAN),
        (0, ValueKind.SCALAR),
        (2.5, ValueKind.SCALAR),
        ("", ValueKind.SCALAR),
        (b"raw", ValueKind.SCALAR),
        (AttributedText("x"), ValueKind.SCALAR),
        ([], ValueKind.SEQUENCE),
        ((1, 2), ValueKind.SEQUENCE),
        ({}, ValueKind.RECORD),
        (OrderedDict(a=1), ValueKind.RECORD),
        (SimpleNamespace(a=1), ValueKind.RECORD),
    ])
    def test_kinds(self, value, kind):
        assert classify(value) is kind

    def test_sets_and_generators_are_not_sequences(self):
        assert not is_sequence({1, 2})
        assert not is_sequence(x for x in [1])
        assert not is_sequence("abc")


class TestTruthiness:
    """Правило истинности секций."""

    @pytest.mark.parametrize("value", [MISSING, None, False, "", b"", bytearray(), [], (), AttributedText()])
    def test_falsy(self, value):
        assert is_truthy(value) is False

    @pytest.mark.parametrize("value", [True, 0, 0.0, "0", " ", [0], {}, {"a": 1}, SimpleNamespace()])
    def test_truthy(self, value):
        """0 и пустой словарь истинны."""
        assert is_truthy(value) is True

    def test_missing_is_singleton(self):
        assert type(MISSING)() is MISSING
        assert repr(MISSING) == "MISSING"


class TestToText:

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        (MISSING, ""),
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (1.5, "1.5"),
        ("s", "s"),
        (b"caf\xc3\xa9", "café"),
        ([1, 2], "[1, 2]"),
    ])
    def test_plain_values(self, value, expected):
        assert to_text(value) == expected

    def test_attributed_passthrough(self):
        value = AttributedText("x", {"a": 1})

        assert to_text(value) is value


class TestLookupMember:

    def test_mapping(self):
        assert lookup_member({"a": None}, "a") is None
        assert lookup_member({"a": 1}, "b") is MISSING

    def test_sequence_index(self):
        assert lookup_member(["x", "y"], "1") == "y"
        assert lookup_member(["x"], "5") is MISSING
        assert lookup_member(["x"], "first") is MISSING

    def test_non_ascii_digits_are_not_indexes(self):
        assert lookup_member(["x", "y"], "\u00b2") is MISSING
        assert lookup_member(["x", "y"], "\u0661") is MISSING

    def test_object_attributes(self):
        obj = SimpleNamespace(name="n", _secret="s")

        assert lookup_member(obj, "name") == "n"
        assert lookup_member(obj, "_secret") is MISSING
        assert lookup_member(obj, "other") is MISSING

    def test_scalars_have_no_members(self):
        assert lookup_member("text", "upper") is MISSING
        assert lookup_member(5, "real") is MISSING
