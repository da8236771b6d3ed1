from .background import (
    Anchor, Direction, Sizing, SolidColor, Gradient, GradientColor,
    MediaLayer, SlideBackground, DEFAULT_SLIDE_BACKGROUND,
)
from .engine_config import CanvasSize, EngineConfig, DEFAULT_CONFIG

__all__ = [
    "Anchor",
    "Direction",
    "Sizing",
    "SolidColor",
    "Gradient",
    "GradientColor",
    "MediaLayer",
    "SlideBackground",
    "DEFAULT_SLIDE_BACKGROUND",
    "CanvasSize",
    "EngineConfig",
    "DEFAULT_CONFIG",
]
