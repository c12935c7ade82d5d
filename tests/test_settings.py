"""Unit tests for render settings."""

import pytest


class TestRenderSettings:
    """Tests for RenderSettings defaults, derived values and validation."""

    def test_defaults(self):
        """Test the defaults describe the reference render."""
        from pathtracer.core.settings import RenderSettings

        settings = RenderSettings()

        assert settings.image_width == 400
        assert settings.aspect_ratio == pytest.approx(16.0 / 9.0)
        assert settings.samples_per_pixel == 100
        assert settings.max_depth == 50
        assert settings.seed == 0
        assert settings.image_height == 225

    @pytest.mark.parametrize(
        "width,aspect_ratio,expected",
        [
            (200, 16.0 / 9.0, 112),
            (100, 1.0, 100),
            (101, 2.0, 50),
            (3, 4.0, 1),
        ],
    )
    def test_image_height_truncates(self, width, aspect_ratio, expected):
        """Test the height truncates toward zero and never drops below one."""
        from pathtracer.core.settings import RenderSettings

        settings = RenderSettings(image_width=width, aspect_ratio=aspect_ratio)
        assert settings.image_height == expected

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"image_width": 0}, "image_width"),
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"aspect_ratio": -1.0}, "aspect_ratio"),
            ({"samples_per_pixel": 0}, "samples_per_pixel"),
            ({"max_depth": -1}, "max_depth"),
        ],
    )
    def test_validation(self, kwargs, match):
        """Test invalid settings are rejected at construction."""
        from pathtracer.core.settings import RenderSettings

        with pytest.raises(ValueError, match=match):
            RenderSettings(**kwargs)

    def test_zero_depth_allowed(self):
        """Test a zero depth limit is valid (renders black)."""
        from pathtracer.core.settings import RenderSettings

        assert RenderSettings(max_depth=0).max_depth == 0
