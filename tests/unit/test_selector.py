"""Tests for selector normalization and the canonical selector value."""

import pytest

from harness_electron.domains.selector import (
    CanonicalSelector,
    SelectorStrategy,
    normalize_optional,
    normalize_required,
)
from harness_electron.errors import ErrorCode, HarnessError


# ── normalize_optional / normalize_required ──────────────────────────


class TestNormalization:
    def test_optional_with_nothing_is_none(self):
        assert normalize_optional({}) is None

    def test_required_with_nothing_fails_exactly_one(self):
        with pytest.raises(HarnessError) as info:
            normalize_required({})
        assert info.value.code is ErrorCode.INVALID_SELECTOR
        assert "exactly one" in info.value.message

    @pytest.mark.parametrize(
        "raw",
        [
            {"css": "#a", "xpath": "//a"},
            {"text": "Save", "role": "button"},
            {"css": "#a", "xpath": "//a", "testid": "x"},
        ],
    )
    def test_optional_with_many_fails_at_most_one(self, raw):
        with pytest.raises(HarnessError) as info:
            normalize_optional(raw)
        assert info.value.code is ErrorCode.INVALID_SELECTOR
        assert info.value.message == "Provide at most one of --css, --xpath, --text, --role, --testid"

    def test_required_with_many_fails_exactly_one(self):
        with pytest.raises(HarnessError) as info:
            normalize_required({"css": "#a", "testid": "x"})
        assert info.value.code is ErrorCode.INVALID_SELECTOR
        assert "exactly one" in info.value.message

    def test_single_strategy(self):
        assert normalize_required({"css": "#app"}) == CanonicalSelector.css("#app")

    def test_multi_word_values_are_joined(self):
        selector = normalize_required({"text": ["Save", "all", "changes"]})
        assert selector == CanonicalSelector.text("Save all changes")

    def test_empty_and_non_string_values_are_not_supplied(self):
        assert normalize_optional({"css": "", "xpath": None, "text": 5, "role": []}) is None

    def test_name_kept_with_role(self):
        selector = normalize_required({"role": "button", "name": ["Save", "file"]})
        assert selector.to_wire() == {"role": "button", "name": "Save file"}

    def test_name_ignored_without_role(self):
        selector = normalize_required({"css": "button", "name": "Save"})
        assert selector.name is None
        assert selector.to_wire() == {"css": "button"}


# ── CanonicalSelector ────────────────────────────────────────────────


class TestCanonicalSelector:
    def test_empty_value_rejected(self):
        with pytest.raises(ValueError):
            CanonicalSelector(SelectorStrategy.CSS, "")

    def test_from_wire_round_trip(self):
        selector = CanonicalSelector.role("button", name="Save")
        assert CanonicalSelector.from_wire(selector.to_wire()) == selector

    @pytest.mark.parametrize("wire", [{}, {"css": "#a", "text": "b"}, {"name": "Save"}])
    def test_from_wire_requires_exactly_one(self, wire):
        with pytest.raises(HarnessError) as info:
            CanonicalSelector.from_wire(wire)
        assert info.value.code is ErrorCode.INVALID_SELECTOR
