"""
Tests for core.models.pages

Test Coverage:
- can_transition(): Forward, skip, same-state, FAILED rules
- transition(): Strict changes
- advance(): Monotonic changes used by content recorders
- Page accessors: Null-safe content access and placeholder titles
"""

import pytest

from deck_toolkit.core.errors import InvalidTransitionError
from deck_toolkit.core.models import (
    DescriptionContent,
    OutlineContent,
    Page,
    PageStatus,
    advance,
    can_transition,
    transition,
)

S = PageStatus


class TestCanTransition:
    @pytest.mark.parametrize(
        "current,target",
        [
            (S.DRAFT, S.OUTLINE_GENERATED),
            (S.OUTLINE_GENERATED, S.DESCRIPTION_GENERATED),
            (S.DESCRIPTION_GENERATED, S.IMAGE_GENERATED),
            (S.IMAGE_GENERATED, S.COMPLETED),
            (S.DRAFT, S.IMAGE_GENERATED),
        ],
    )
    def test_can_transition_when_forward_then_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("status", list(PageStatus))
    def test_can_transition_when_same_state_then_allowed(self, status):
        assert can_transition(status, status)

    @pytest.mark.parametrize(
        "current,target",
        [
            (S.OUTLINE_GENERATED, S.DRAFT),
            (S.IMAGE_GENERATED, S.DESCRIPTION_GENERATED),
            (S.COMPLETED, S.IMAGE_GENERATED),
        ],
    )
    def test_can_transition_when_backward_then_rejected(self, current, target):
        assert not can_transition(current, target)

    def test_can_transition_when_completed_to_failed_then_rejected(self):
        assert not can_transition(S.COMPLETED, S.FAILED)

    @pytest.mark.parametrize("status", [S.DRAFT, S.OUTLINE_GENERATED, S.IMAGE_GENERATED])
    def test_can_transition_when_non_terminal_to_failed_then_allowed(self, status):
        assert can_transition(status, S.FAILED)

    def test_can_transition_when_failed_retry_attempted_stage_then_allowed(self):
        assert can_transition(S.FAILED, S.DESCRIPTION_GENERATED, S.DESCRIPTION_GENERATED)

    def test_can_transition_when_failed_to_lower_stage_then_rejected(self):
        assert not can_transition(S.FAILED, S.OUTLINE_GENERATED, S.DESCRIPTION_GENERATED)

    def test_can_transition_when_failed_to_later_stage_then_allowed(self):
        assert can_transition(S.FAILED, S.IMAGE_GENERATED, S.DESCRIPTION_GENERATED)


class TestTransition:
    def test_transition_when_allowed_then_new_status(self):
        # Arrange
        page = Page.new("p1", 0)

        # Act
        moved = transition(page, S.OUTLINE_GENERATED)

        # Assert
        assert moved.status is S.OUTLINE_GENERATED
        assert page.status is S.DRAFT  # original untouched

    def test_transition_when_backward_then_raises(self):
        page = transition(Page.new("p1", 0), S.IMAGE_GENERATED)

        with pytest.raises(InvalidTransitionError):
            transition(page, S.DRAFT)

    def test_mark_failed_when_completed_then_raises(self):
        page = Page.new("p1", 0).with_image("p1/pages/a.png").mark_completed()

        with pytest.raises(InvalidTransitionError):
            page.mark_failed(S.IMAGE_GENERATED)

    def test_mark_failed_then_retry_goes_to_attempted_stage(self):
        # Arrange
        page = Page.new("p1", 0).with_outline(OutlineContent("Intro"))
        failed = page.mark_failed(S.DESCRIPTION_GENERATED)

        # Act
        retried = failed.with_description(DescriptionContent("Body"))

        # Assert
        assert failed.status is S.FAILED
        assert failed.failed_target is S.DESCRIPTION_GENERATED
        assert retried.status is S.DESCRIPTION_GENERATED
        assert retried.failed_target is None

    def test_retry_when_below_attempted_stage_then_raises(self):
        failed = Page.new("p1", 0).mark_failed(S.DESCRIPTION_GENERATED)

        with pytest.raises(InvalidTransitionError):
            failed.with_outline(OutlineContent("Intro"))


class TestAdvance:
    def test_advance_when_already_past_target_then_status_kept(self):
        # Arrange - regenerating an outline on an imaged page
        page = Page.new("p1", 0).with_image("p1/pages/a.png")

        # Act
        updated = page.with_outline(OutlineContent("New title"))

        # Assert
        assert updated.status is S.IMAGE_GENERATED
        assert updated.outline_content.title == "New title"

    def test_advance_when_behind_target_then_moves_forward(self):
        page = advance(Page.new("p1", 0), S.DESCRIPTION_GENERATED)
        assert page.status is S.DESCRIPTION_GENERATED

    def test_with_image_when_draft_then_skips_to_image_generated(self):
        page = Page.new("p1", 0).with_image("p1/pages/a.png")

        assert page.status is S.IMAGE_GENERATED
        assert page.has_image

    def test_with_image_when_empty_path_then_raises(self):
        with pytest.raises(ValueError):
            Page.new("p1", 0).with_image("")


class TestAccessors:
    def test_display_title_when_no_outline_then_placeholder(self):
        page = Page.new("p1", 2)

        assert page.outline_content is None
        assert page.display_title == "Page 3"
        assert page.outline_points == ()
        assert page.description_text == ""

    def test_display_title_when_blank_outline_title_then_placeholder(self):
        page = Page.new("p1", 0).with_outline(OutlineContent("   ", ("point",)))
        assert page.display_title == "Page 1"

    def test_display_title_when_outline_title_then_used(self):
        page = Page.new("p1", 0).with_outline(OutlineContent("Roadmap", ("Q1", "Q2")))

        assert page.display_title == "Roadmap"
        assert page.outline_points == ("Q1", "Q2")


class TestContentParsing:
    def test_outline_from_dict_when_none_then_none(self):
        assert OutlineContent.from_dict(None) is None

    def test_outline_from_dict_when_not_mapping_then_raises(self):
        with pytest.raises(ValueError):
            OutlineContent.from_dict(["title"])

    @pytest.mark.parametrize(
        "payload",
        [{"title": "t", "points": 5}, {"title": 7}, {"points": ["ok", {"nested": 1}]}],
    )
    def test_outline_from_dict_when_field_types_wrong_then_value_error(self, payload):
        with pytest.raises(ValueError):
            OutlineContent.from_dict(payload)

    def test_outline_from_dict_when_single_point_string_then_tuple(self):
        content = OutlineContent.from_dict({"title": "Agenda", "points": "Only point"})

        assert content.points == ("Only point",)

    def test_description_from_dict_when_extra_fields_then_kept(self):
        content = DescriptionContent.from_dict({"text": "Body", "layout": "hero"})

        assert content.text == "Body"
        assert content.to_dict() == {"layout": "hero", "text": "Body"}
