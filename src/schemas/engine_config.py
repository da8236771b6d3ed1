"""Pydantic model for background engine configuration.

Loaded from YAML the same way design systems are.  Every field has a
default, so an empty file (or no file) yields the stock behaviour.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from .background import (
    DEFAULT_COLOR,
    DEFAULT_GRADIENT_FROM,
    DEFAULT_GRADIENT_TO,
    HEX_PATTERN,
)


class CanvasSize(BaseModel):
    """Pixel dimensions used when a page size is unavailable."""

    width: float = Field(default=100, gt=0)
    height: float = Field(default=100, gt=0)


class EngineConfig(BaseModel):
    """Tunable defaults for normalization, compositing, and media loading."""

    default_color: str = Field(
        default=DEFAULT_COLOR,
        pattern=HEX_PATTERN,
        description="Solid color used when input is missing or invalid",
    )
    default_gradient_from: str = Field(default=DEFAULT_GRADIENT_FROM, pattern=HEX_PATTERN)
    default_gradient_to: str = Field(default=DEFAULT_GRADIENT_TO, pattern=HEX_PATTERN)
    fallback_canvas: CanvasSize = Field(
        default_factory=CanvasSize,
        description="SVG canvas size when the page size is unknown",
    )
    radial_radius: str = Field(
        default="70%",
        description="Radius of the centered radial gradient",
    )
    http_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait when fetching remote media for size lookup",
    )
    media_role: str = Field(
        default="background-media",
        description="Role marker identifying the background-media element on a page",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "EngineConfig":
        """Load engine configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Engine config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    def to_yaml(self, path: str | Path) -> None:
        """Save engine configuration to a YAML file."""
        path = Path(path)
        data = self.model_dump(exclude_none=True)
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


DEFAULT_CONFIG = EngineConfig()
