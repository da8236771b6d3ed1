"""Fit / fill geometry for the background-media element.

All functions are pure.  Positions and sizes are in page pixels; crop values
are fractions of the source image (0..1), matching the host element fields.

- **fit** (contain): the element shrinks to the image aspect ratio inside the
  page; leftover slack on each axis is split by the anchor weight.
- **fill** (cover): the element covers the page and a crop window with the
  page aspect ratio is cut from the image along its longer axis, placed by
  the anchor weight.
"""

import math
from typing import Optional

from pydantic import BaseModel

from src.schemas.background import Anchor, MediaLayer, Sizing
from .image_size import ImageSize

# (ax, ay): 0 = start of the axis, 0.5 = middle, 1 = end
ANCHOR_WEIGHTS: dict[Anchor, tuple[float, float]] = {
    Anchor.TOP_LEFT: (0.0, 0.0),
    Anchor.TOP: (0.5, 0.0),
    Anchor.TOP_RIGHT: (1.0, 0.0),
    Anchor.LEFT: (0.0, 0.5),
    Anchor.CENTER: (0.5, 0.5),
    Anchor.RIGHT: (1.0, 0.5),
    Anchor.BOTTOM_LEFT: (0.0, 1.0),
    Anchor.BOTTOM: (0.5, 1.0),
    Anchor.BOTTOM_RIGHT: (1.0, 1.0),
    Anchor.BOTTOM_CENTER: (0.5, 1.0),
}


class ElementGeometry(BaseModel):
    """Position, size, and crop window for the background-media element."""

    x: float = 0.0
    y: float = 0.0
    width: float
    height: float
    crop_x: float = 0.0
    crop_y: float = 0.0
    crop_width: float = 1.0
    crop_height: float = 1.0

    def as_props(self) -> dict[str, float]:
        return self.model_dump()


def anchor_weights(anchor: Anchor) -> tuple[float, float]:
    return ANCHOR_WEIGHTS.get(anchor, (0.5, 0.5))


def valid_dimensions(width, height) -> bool:
    try:
        w, h = float(width), float(height)
    except (TypeError, ValueError):
        return False
    return math.isfinite(w) and math.isfinite(h) and w > 0 and h > 0


def full_bleed(page_w: float, page_h: float) -> ElementGeometry:
    """Whole page, no crop."""
    return ElementGeometry(width=page_w, height=page_h)


def fit_geometry(page_w: float, page_h: float, img_w: float, img_h: float,
                 anchor: Anchor) -> ElementGeometry:
    img_ratio = img_w / img_h
    page_ratio = page_w / page_h

    if page_ratio >= img_ratio:
        # Page is wider than the image: height-bound.
        h = page_h
        w = page_h * img_ratio
    else:
        w = page_w
        h = page_w / img_ratio

    ax, ay = anchor_weights(anchor)
    return ElementGeometry(
        x=(page_w - w) * ax,
        y=(page_h - h) * ay,
        width=w,
        height=h,
    )


def fill_geometry(page_w: float, page_h: float, img_w: float, img_h: float,
                  anchor: Anchor) -> ElementGeometry:
    img_ratio = img_w / img_h
    page_ratio = page_w / page_h

    crop_w = 1.0
    crop_h = 1.0
    if page_ratio >= img_ratio:
        # Page is wider: keep full width, crop height.
        crop_h = min(1.0, max(0.0, img_ratio / page_ratio))
    else:
        crop_w = min(1.0, max(0.0, page_ratio / img_ratio))

    ax, ay = anchor_weights(anchor)
    return ElementGeometry(
        width=page_w,
        height=page_h,
        crop_x=max(0.0, 1.0 - crop_w) * ax,
        crop_y=max(0.0, 1.0 - crop_h) * ay,
        crop_width=crop_w,
        crop_height=crop_h,
    )


def compute_geometry(page_w: float, page_h: float, natural: Optional[ImageSize],
                     media: MediaLayer) -> ElementGeometry:
    """Geometry for ``media`` on a ``page_w`` x ``page_h`` page.

    Falls back to full bleed when the natural size is unknown.
    """
    if natural is None or not valid_dimensions(natural.width, natural.height):
        return full_bleed(page_w, page_h)
    if media.sizing == Sizing.FIT:
        return fit_geometry(page_w, page_h, natural.width, natural.height, media.position)
    return fill_geometry(page_w, page_h, natural.width, natural.height, media.position)
