"""Pydantic models for the canonical two-layer slide background.

A slide background is a color layer (solid or gradient) with an optional
media layer (an image) on top of it.  Every historical representation is
normalized into :class:`SlideBackground` by
``src.background_engine.normalizer.normalize`` before anything renders it.

The JSON form uses the editor's wire keys (``mediaUrl``, ``from``) so the
stored value round-trips through page metadata unchanged:

    {"color": {"type": "gradient",
               "gradient": {"from": "#FF0000", "to": "#0000FF", "direction": "top"}},
     "media": {"mediaUrl": "https://...", "sizing": "fill", "position": "center"}}

Colors are 6-digit upper-case hex RGB strings (e.g., "#FFFFFF").
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

HEX_PATTERN = r"^#[0-9A-F]{6}$"

DEFAULT_COLOR = "#FFFFFF"
DEFAULT_GRADIENT_FROM = "#FF0000"
DEFAULT_GRADIENT_TO = "#0000FF"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Direction(str, Enum):
    """Gradient direction ("to top" means the color runs bottom → top)."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    RADIAL = "radial"


class Sizing(str, Enum):
    """How the media layer is scaled into the page."""

    FIT = "fit"    # contain: whole image visible
    FILL = "fill"  # cover: page filled, image cropped


class Anchor(str, Enum):
    """Placement anchor for the media layer.

    Used both for the fit offset and for the fill crop window.  Kept local
    to the background engine; it is not a text-alignment concept.
    """

    CENTER = "center"
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM_CENTER = "bottom-center"


DEFAULT_DIRECTION = Direction.TOP
DEFAULT_SIZING = Sizing.FIT
DEFAULT_ANCHOR = Anchor.BOTTOM_CENTER


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ---------------------------------------------------------------------------
# Color layer
# ---------------------------------------------------------------------------

class SolidColor(_Frozen):
    """Flat color fill."""

    type: Literal["solid"] = "solid"
    solid: str = Field(default=DEFAULT_COLOR, pattern=HEX_PATTERN)


class Gradient(_Frozen):
    """Two-stop gradient definition."""

    from_: str = Field(default=DEFAULT_GRADIENT_FROM, alias="from", pattern=HEX_PATTERN)
    to: str = Field(default=DEFAULT_GRADIENT_TO, pattern=HEX_PATTERN)
    direction: Direction = DEFAULT_DIRECTION

    @property
    def is_radial(self) -> bool:
        return self.direction == Direction.RADIAL


class GradientColor(_Frozen):
    """Gradient color fill."""

    type: Literal["gradient"] = "gradient"
    gradient: Gradient = Field(default_factory=Gradient)


ColorLayer = Annotated[Union[SolidColor, GradientColor], Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Media layer
# ---------------------------------------------------------------------------

class MediaLayer(_Frozen):
    """Image drawn above the color layer.

    An empty URL is never stored; the normalizer maps it to ``media=None``.
    """

    media_url: str = Field(alias="mediaUrl", min_length=1)
    sizing: Sizing = DEFAULT_SIZING
    position: Anchor = DEFAULT_ANCHOR


# ---------------------------------------------------------------------------
# Full background
# ---------------------------------------------------------------------------

class SlideBackground(_Frozen):
    """Canonical slide background: color layer plus optional media layer."""

    color: ColorLayer = Field(default_factory=SolidColor)
    media: Optional[MediaLayer] = None

    @property
    def has_media(self) -> bool:
        return self.media is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible wire shape."""
        return self.model_dump(mode="json", by_alias=True)


DEFAULT_SLIDE_BACKGROUND = SlideBackground()
