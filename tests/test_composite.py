"""
Tests for the composite module.

Tests cover:
- Wavelength-based channel assignment
- Composite construction, per-channel parameters and shape checks
- Per-pixel display colors

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

import numpy as np
import pytest

from miricomp.composite import (
    ChannelRole,
    CompositeImage,
    assign_roles,
    build_composite,
    composite_from_records,
)
from miricomp.errors import ShapeMismatchError
from miricomp.stretch import preprocess_channel


@pytest.fixture
def three_records(make_record, correlated_images):
    return [make_record(name, image) for name, image in correlated_images.items()]


class TestAssignRoles:
    """Tests for channel assignment."""

    def test_longest_is_red(self, three_records):
        """Longest wavelength -> red, shortest -> blue."""
        roles = assign_roles(three_records)
        assert roles[ChannelRole.RED].name == "f1500w"
        assert roles[ChannelRole.GREEN].name == "f1130w"
        assert roles[ChannelRole.BLUE].name == "f770w"

    def test_order_independent(self, three_records):
        """Input order does not matter."""
        roles = assign_roles(list(reversed(three_records)))
        assert roles[ChannelRole.RED].name == "f1500w"
        assert roles[ChannelRole.BLUE].name == "f770w"

    def test_numeric_not_lexical_order(self, make_record):
        """f770w is shorter than f1130w despite sorting after it as text."""
        records = [
            make_record("f770w", np.zeros((2, 2))),
            make_record("f2100w", np.zeros((2, 2))),
            make_record("f1130w", np.zeros((2, 2))),
        ]
        roles = assign_roles(records)
        assert roles[ChannelRole.RED].name == "f2100w"
        assert roles[ChannelRole.GREEN].name == "f1130w"
        assert roles[ChannelRole.BLUE].name == "f770w"

    def test_requires_three(self, three_records):
        """Two filters cannot make a composite."""
        with pytest.raises(ValueError, match="exactly 3"):
            assign_roles(three_records[:2])


class TestBuildComposite:
    """Tests for composite construction."""

    def test_shape_and_range(self, three_records):
        """Composite is (H, W, 3) in [0, 1] with no NaN."""
        composite = composite_from_records(three_records)
        assert composite.rgb.shape == (64, 64, 3)
        assert composite.shape == (64, 64)
        assert np.all(np.isfinite(composite.rgb))
        assert composite.rgb.min() >= 0
        assert composite.rgb.max() <= 1

    def test_channels_match_preprocessing(self, three_records):
        """Each channel is the preprocessed image of its filter."""
        roles = assign_roles(three_records)
        composite = build_composite(
            roles[ChannelRole.RED], roles[ChannelRole.GREEN], roles[ChannelRole.BLUE],
            gamma=0.8, contrast=0.3,
        )
        for index, role in enumerate((ChannelRole.RED, ChannelRole.GREEN, ChannelRole.BLUE)):
            expected = preprocess_channel(roles[role].image, gamma=0.8, contrast=0.3)
            np.testing.assert_allclose(composite.rgb[..., index], expected)

    def test_per_channel_parameters(self, three_records):
        """Gamma and contrast can differ per channel."""
        roles = assign_roles(three_records)
        red, green, blue = roles[ChannelRole.RED], roles[ChannelRole.GREEN], roles[ChannelRole.BLUE]
        composite = build_composite(red, green, blue, gamma=(0.4, 0.8, 1.0), contrast=(0.1, 0.2, 0.3))
        np.testing.assert_allclose(
            composite.rgb[..., 0], preprocess_channel(red.image, gamma=0.4, contrast=0.1)
        )
        np.testing.assert_allclose(
            composite.rgb[..., 2], preprocess_channel(blue.image, gamma=1.0, contrast=0.3)
        )

    def test_numpy_scalar_parameters(self, three_records):
        """numpy scalar gamma and contrast behave like floats."""
        expected = composite_from_records(three_records, gamma=0.8, contrast=0.5)
        composite = composite_from_records(
            three_records, gamma=np.float32(0.8), contrast=np.float32(0.5)
        )
        np.testing.assert_allclose(composite.rgb, expected.rgb, atol=1e-6)

    def test_bad_parameter_count(self, three_records):
        """Two gamma values are rejected."""
        with pytest.raises(ValueError):
            composite_from_records(three_records, gamma=(0.4, 0.8))

    def test_shape_mismatch(self, make_record):
        """Differently shaped channels raise ShapeMismatchError."""
        red = make_record("f1500w", np.ones((10, 10)))
        green = make_record("f1130w", np.ones((10, 10)))
        blue = make_record("f770w", np.ones((10, 12)))
        with pytest.raises(ShapeMismatchError, match="f770w") as excinfo:
            build_composite(red, green, blue)
        assert isinstance(excinfo.value, ValueError)
        assert (10, 12) in excinfo.value.shapes.values()

    def test_constant_images_are_black(self, make_record):
        """Degenerate channels give a uniformly black composite."""
        records = [
            make_record("f770w", np.full((6, 6), 5.0)),
            make_record("f1130w", np.full((6, 6), 18.0)),
            make_record("f1500w", np.full((6, 6), 42.0)),
        ]
        composite = composite_from_records(records)
        assert np.all(composite.rgb == 0)
        assert set(composite.hex_colors().ravel()) == {"#000000"}

    def test_pure_function(self, three_records):
        """Same inputs, same output; inputs are not modified."""
        before = [r.image.copy() for r in three_records]
        first = composite_from_records(three_records)
        second = composite_from_records(three_records)
        np.testing.assert_array_equal(first.rgb, second.rgb)
        for record, image in zip(three_records, before):
            np.testing.assert_array_equal(record.image, image)

    def test_roles_recorded(self, three_records):
        """The composite remembers which filter feeds each channel."""
        composite = composite_from_records(three_records)
        assert composite.roles == {
            ChannelRole.RED: "f1500w",
            ChannelRole.GREEN: "f1130w",
            ChannelRole.BLUE: "f770w",
        }


class TestCompositeImage:
    """Tests for per-pixel colors and orientation."""

    def test_white(self):
        """All-one channels render white."""
        composite = CompositeImage(rgb=np.ones((3, 4, 3)), red="r", green="g", blue="b")
        colors = composite.hex_colors()
        assert colors.shape == (3, 4)
        assert set(colors.ravel()) == {"#FFFFFF"}

    def test_pixel_color(self):
        """Each pixel's triple maps to its hex color."""
        rgb = np.zeros((2, 2, 3))
        rgb[0, 1] = [1.0, 0.0, 0.0]
        rgb[1, 0] = [0.0, 0.5, 1.0]
        colors = CompositeImage(rgb=rgb, red="r", green="g", blue="b").hex_colors()
        assert colors[0, 1] == "#FF0000"
        assert colors[1, 0] == "#0080FF"
        assert colors[0, 0] == "#000000"

    def test_origin_upper(self):
        """Row 0 is drawn at the top."""
        assert CompositeImage.origin == "upper"
