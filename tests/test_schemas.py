"""Tests for Pydantic schema models."""

import pytest
from pydantic import ValidationError

from src.schemas.background import (
    Anchor,
    DEFAULT_SLIDE_BACKGROUND,
    Direction,
    Gradient,
    GradientColor,
    MediaLayer,
    Sizing,
    SlideBackground,
    SolidColor,
)
from src.schemas.engine_config import EngineConfig


class TestBackgroundSchema:
    def test_enum_values(self):
        assert Direction.RADIAL == "radial"
        assert Sizing.FILL == "fill"
        assert Anchor.BOTTOM_CENTER == "bottom-center"

    def test_default_background(self):
        assert DEFAULT_SLIDE_BACKGROUND.to_dict() == {
            "color": {"type": "solid", "solid": "#FFFFFF"},
            "media": None,
        }

    def test_wire_keys(self):
        bg = SlideBackground(
            color=GradientColor(gradient=Gradient(from_="#112233", to="#445566", direction=Direction.LEFT)),
            media=MediaLayer(media_url="https://cdn.example.com/a.png", sizing=Sizing.FILL),
        )
        data = bg.to_dict()
        assert data["color"]["gradient"]["from"] == "#112233"
        assert data["media"] == {
            "mediaUrl": "https://cdn.example.com/a.png",
            "sizing": "fill",
            "position": "bottom-center",
        }

    def test_validates_from_wire_shape(self):
        bg = SlideBackground.model_validate(
            {"color": {"type": "gradient", "gradient": {"from": "#000000", "to": "#FFFFFF"}}}
        )
        assert isinstance(bg.color, GradientColor)
        assert bg.color.gradient.direction == Direction.TOP

    def test_strict_hex(self):
        with pytest.raises(ValidationError):
            SolidColor(solid="#fff")

    def test_empty_media_url_rejected(self):
        with pytest.raises(ValidationError):
            MediaLayer(media_url="")

    def test_frozen(self):
        bg = SlideBackground()
        with pytest.raises(ValidationError):
            bg.media = None

    def test_value_equality(self):
        assert SlideBackground(color=SolidColor(solid="#123456")) == SlideBackground(
            color=SolidColor(solid="#123456")
        )


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.default_color == "#FFFFFF"
        assert config.fallback_canvas.width == 100
        assert config.radial_radius == "70%"
        assert config.media_role == "background-media"

    def test_yaml_roundtrip(self, tmp_path):
        config = EngineConfig(default_color="#000000", http_timeout=2.5)
        path = tmp_path / "engine.yaml"
        config.to_yaml(path)
        restored = EngineConfig.from_yaml(path)
        assert restored == config

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert EngineConfig.from_yaml(path) == EngineConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_color(self):
        with pytest.raises(ValidationError):
            EngineConfig(default_color="white")
