"""
Tests for core.models.aspect_ratio

Test Coverage:
- validate_ratio(): Token normalization and rejection
- dimensions_for(): Points and EMU sizes, exact ratios
- is_locked(): Lock derivation from pages
- AspectRatioPolicy.options(): Disabled flags for the settings form
"""

from fractions import Fraction

import pytest

from deck_toolkit.core.errors import InvalidRatioError
from deck_toolkit.core.models import (
    AspectRatio,
    AspectRatioPolicy,
    Page,
    UnitSystem,
    dimensions_for,
    is_locked,
    validate_ratio,
)

ALL_TOKENS = ["16:9", "4:3", "1:1", "9:16", "3:2"]


class TestValidateRatio:
    @pytest.mark.parametrize("token", ALL_TOKENS)
    def test_validate_when_supported_token_then_returns_member(self, token):
        assert validate_ratio(token).value == token

    def test_validate_when_whitespace_around_token_then_stripped(self):
        assert validate_ratio("  4:3 ") is AspectRatio.STANDARD

    def test_validate_when_member_given_then_returned_unchanged(self):
        assert validate_ratio(AspectRatio.SQUARE) is AspectRatio.SQUARE

    @pytest.mark.parametrize("bad", ["5:4", "16x9", "", "4:3:1", None, 43, 1.33, ["4:3"]])
    def test_validate_when_unsupported_then_raises(self, bad):
        with pytest.raises(InvalidRatioError) as exc_info:
            validate_ratio(bad)

        # Message lists allowed tokens
        for token in ALL_TOKENS:
            assert token in exc_info.value.message


class TestDimensionsFor:
    def test_dimensions_when_4_3_points_then_720_by_540(self):
        assert dimensions_for("4:3", UnitSystem.POINTS) == (720.0, 540.0)

    def test_dimensions_when_16_9_points_then_720_by_405(self):
        assert dimensions_for("16:9", UnitSystem.POINTS) == (720.0, 405.0)

    def test_dimensions_when_portrait_then_long_side_is_height(self):
        width, height = dimensions_for("9:16", UnitSystem.POINTS)
        assert height == 720.0
        assert width == 405.0

    def test_dimensions_when_4_3_emu_then_standard_slide_size(self):
        assert dimensions_for("4:3", UnitSystem.EMU) == (9_144_000, 6_858_000)

    def test_dimensions_when_16_9_emu_then_widescreen_slide_size(self):
        assert dimensions_for("16:9", UnitSystem.EMU) == (9_144_000, 5_143_500)

    @pytest.mark.parametrize("token", ALL_TOKENS)
    def test_dimensions_when_emu_then_integers_with_exact_ratio(self, token):
        # Arrange
        w_units, h_units = (int(x) for x in token.split(":"))

        # Act
        width, height = dimensions_for(token, UnitSystem.EMU)

        # Assert
        assert isinstance(width, int) and isinstance(height, int)
        assert Fraction(width, height) == Fraction(w_units, h_units)
        assert max(width, height) == 9_144_000

    @pytest.mark.parametrize("token", ALL_TOKENS)
    def test_dimensions_when_points_then_ratio_matches(self, token):
        w_units, h_units = (int(x) for x in token.split(":"))
        width, height = dimensions_for(token, UnitSystem.POINTS)
        assert width * h_units == pytest.approx(height * w_units)
        assert max(width, height) == 720.0

    def test_dimensions_when_long_side_override_then_scaled(self):
        assert dimensions_for("3:2", UnitSystem.POINTS, long_side=300) == (300.0, 200.0)

    def test_dimensions_when_long_side_not_positive_then_raises(self):
        with pytest.raises(ValueError):
            dimensions_for("3:2", UnitSystem.EMU, long_side=0)

    def test_dimensions_when_invalid_ratio_then_raises(self):
        with pytest.raises(InvalidRatioError):
            dimensions_for("2:1", UnitSystem.POINTS)


class TestIsLocked:
    def test_is_locked_when_no_pages_then_false(self):
        assert is_locked([]) is False

    def test_is_locked_when_no_images_then_false(self):
        pages = [Page.new("p1", 0), Page.new("p1", 1)]
        assert is_locked(pages) is False

    def test_is_locked_when_any_page_has_image_then_true(self):
        pages = [Page.new("p1", 0), Page.new("p1", 1).with_image("p1/pages/b.png")]
        assert is_locked(pages) is True


class TestOptions:
    def test_options_when_unlocked_then_all_enabled(self):
        options = AspectRatioPolicy.options([Page.new("p1", 0)])

        assert [o["value"] for o in options] == ALL_TOKENS
        assert not any(o["disabled"] for o in options)

    def test_options_when_page_has_image_then_all_disabled(self):
        options = AspectRatioPolicy.options([Page.new("p1", 0).with_image("p1/pages/a.png")])
        assert all(o["disabled"] for o in options)

    def test_options_when_latch_set_then_all_disabled(self):
        options = AspectRatioPolicy.options([], locked=True)
        assert all(o["disabled"] for o in options)
