"""Tests for TargetResolver policies against a fake page."""

import pytest

from harness_electron.domains.resolver import ResolutionTarget, TargetResolver
from harness_electron.domains.selector import CanonicalSelector
from harness_electron.domains.session import ElementReference
from harness_electron.errors import ErrorCode, HarnessError
from tests.helpers.fake_page import FakeElement


@pytest.fixture
def resolver(store, connected):
    return TargetResolver(store)


def _buttons(count):
    return [FakeElement(tag="button", text=f"Button {i}") for i in range(count)]


# ── ResolutionTarget ─────────────────────────────────────────────────


class TestResolutionTarget:
    def test_negative_index(self):
        with pytest.raises(HarnessError) as info:
            ResolutionTarget(selector=CanonicalSelector.css("a"), index=-1)
        assert info.value.code is ErrorCode.INVALID_INPUT

    def test_strict_single_with_index_rejected_up_front(self):
        with pytest.raises(HarnessError) as info:
            ResolutionTarget(selector=CanonicalSelector.css("a"), index=1, strict_single=True)
        assert info.value.code is ErrorCode.INVALID_INPUT

    def test_selector_and_element_id_rejected(self):
        with pytest.raises(HarnessError) as info:
            ResolutionTarget(selector=CanonicalSelector.css("a"), element_id="e1")
        assert info.value.code is ErrorCode.INVALID_INPUT

    def test_strict_single_with_index_zero_allowed(self):
        target = ResolutionTarget(selector=CanonicalSelector.css("a"), index=0, strict_single=True)
        assert target.strict_single


# ── TargetResolver ───────────────────────────────────────────────────


class TestTargetResolver:
    async def test_requires_selector_or_element_id(self, resolver, page):
        with pytest.raises(HarnessError) as info:
            await resolver.resolve(page, "default", ResolutionTarget(), 100)
        assert info.value.code is ErrorCode.INVALID_SELECTOR

    async def test_loose_takes_first_match(self, resolver, page):
        page.add("button", *_buttons(3))
        resolved = await resolver.resolve(
            page, "default", ResolutionTarget(selector=CanonicalSelector.css("button")), 100
        )
        assert resolved.index == 0
        assert resolved.describe() == {"strategy": "selector", "index": 0}

    async def test_strict_single_with_two_matches(self, resolver, page):
        page.add("button", *_buttons(2))
        target = ResolutionTarget(selector=CanonicalSelector.css("button"), strict_single=True)
        with pytest.raises(HarnessError) as info:
            await resolver.resolve(page, "default", target, 100)
        error = info.value
        assert error.code is ErrorCode.INVALID_SELECTOR
        assert error.details["count"] == 2
        assert error.details["selector"] == {"css": "button"}

    async def test_strict_single_with_no_matches(self, resolver, page):
        target = ResolutionTarget(selector=CanonicalSelector.css("#missing"), strict_single=True)
        with pytest.raises(HarnessError) as info:
            await resolver.resolve(page, "default", target, 50)
        assert info.value.code is ErrorCode.INVALID_SELECTOR
        assert info.value.details["count"] == 0

    async def test_strict_single_with_one_match(self, resolver, page):
        page.add("role=button[name=Save]", FakeElement(tag="button", text="Save"))
        target = ResolutionTarget(selector=CanonicalSelector.role("button", "Save"), strict_single=True)
        resolved = await resolver.resolve(page, "default", target, 100)
        assert resolved.describe() == {"strategy": "selector", "index": 0, "matchCount": 1}

    async def test_index_out_of_range(self, resolver, page):
        page.add("button", *_buttons(2))
        target = ResolutionTarget(selector=CanonicalSelector.css("button"), index=3)
        with pytest.raises(HarnessError) as info:
            await resolver.resolve(page, "default", target, 50)
        error = info.value
        assert error.code is ErrorCode.INVALID_SELECTOR
        assert error.details["count"] == 2
        assert error.details["index"] == 3
        assert "index out of range" in error.message

    async def test_index_in_range(self, resolver, page):
        page.add("button", *_buttons(5))
        target = ResolutionTarget(selector=CanonicalSelector.css("button"), index=3)
        resolved = await resolver.resolve(page, "default", target, 100)
        assert resolved.index == 3
        assert resolved.match_count == 5
        assert await resolved.locator.text_content() == "Button 3"

    async def test_element_id_uses_stored_reference(self, resolver, page, store):
        page.add("testid=save", *_buttons(2))
        store.save_element(
            "default", "e7", ElementReference.for_selector(CanonicalSelector.testid("save"), 1, "button")
        )
        resolved = await resolver.resolve(page, "default", ResolutionTarget(element_id="e7"), 100)
        assert resolved.describe() == {"strategy": "element-id", "index": 1, "elementId": "e7"}
        assert await resolved.locator.text_content() == "Button 1"

    async def test_unknown_element_id(self, resolver, page):
        with pytest.raises(HarnessError) as info:
            await resolver.resolve(page, "default", ResolutionTarget(element_id="e42"), 100)
        assert info.value.details["reason"] == "ELEMENT_NOT_FOUND"
