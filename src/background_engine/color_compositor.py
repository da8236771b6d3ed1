"""Render the color layer of a SlideBackground.

Linear gradients are rendered as a short CSS ``linear-gradient(...)`` string
because hosts paint those natively.  Radial gradients (and any caller that
needs one self-contained string) get a generated SVG wrapped in a data URI.
"""

import logging
from typing import Literal, Optional

from pydantic import BaseModel

from src.schemas.background import Direction, Gradient, GradientColor, SolidColor
from src.schemas.engine_config import DEFAULT_CONFIG, EngineConfig
from .svg import (
    PageSize,
    add_element,
    add_full_rect,
    new_document,
    resolve_canvas,
    serialize,
    to_data_uri,
)

logger = logging.getLogger(__name__)

DIRECTION_DEGREES = {
    Direction.TOP: 0,
    Direction.RIGHT: 90,
    Direction.BOTTOM: 180,
    Direction.LEFT: 270,
}

# "to top" runs bottom -> top, etc.
DIRECTION_VECTORS = {
    Direction.TOP: ("0%", "100%", "0%", "0%"),
    Direction.BOTTOM: ("0%", "0%", "0%", "100%"),
    Direction.LEFT: ("100%", "0%", "0%", "0%"),
    Direction.RIGHT: ("0%", "0%", "100%", "0%"),
}


class RenderedColor(BaseModel):
    """A renderable color layer.

    ``kind="css"`` values are a hex color or CSS gradient; ``kind="svg"``
    values are a data URI, with the raw markup kept in ``markup``.
    """

    kind: Literal["css", "svg"]
    value: str
    markup: Optional[str] = None


def linear_gradient_css(gradient: Gradient) -> str:
    """CSS linear gradient for a non-radial gradient."""
    deg = DIRECTION_DEGREES.get(gradient.direction, 0)
    return f"linear-gradient({deg}deg, {gradient.from_} 0%, {gradient.to} 100%)"


def linear_gradient_svg(gradient: Gradient, page_size: PageSize | None = None,
                        config: EngineConfig | None = None) -> str:
    w, h = resolve_canvas(page_size, config)
    x1, y1, x2, y2 = DIRECTION_VECTORS.get(gradient.direction, DIRECTION_VECTORS[Direction.TOP])

    root = new_document(w, h)
    defs = add_element(root, "defs")
    grad = add_element(defs, "linearGradient", id="g", x1=x1, y1=y1, x2=x2, y2=y2)
    add_element(grad, "stop", offset="0%", stop_color=gradient.from_)
    add_element(grad, "stop", offset="100%", stop_color=gradient.to)
    add_full_rect(root, w, h, "url(#g)")
    return serialize(root)


def radial_gradient_svg(gradient: Gradient, page_size: PageSize | None = None,
                        config: EngineConfig | None = None) -> str:
    config = config or DEFAULT_CONFIG
    w, h = resolve_canvas(page_size, config)

    root = new_document(w, h)
    defs = add_element(root, "defs")
    grad = add_element(defs, "radialGradient", id="g", cx="50%", cy="50%", r=config.radial_radius)
    add_element(grad, "stop", offset="0%", stop_color=gradient.from_)
    add_element(grad, "stop", offset="100%", stop_color=gradient.to)
    add_full_rect(root, w, h, "url(#g)")
    return serialize(root)


def solid_svg(color: SolidColor, page_size: PageSize | None = None,
              config: EngineConfig | None = None) -> str:
    w, h = resolve_canvas(page_size, config)
    root = new_document(w, h)
    add_full_rect(root, w, h, color.solid)
    return serialize(root)


def render_color_svg(color: SolidColor | GradientColor, page_size: PageSize | None = None,
                     config: EngineConfig | None = None) -> str:
    """Render any color layer as standalone SVG markup."""
    if isinstance(color, GradientColor):
        g = color.gradient
        if g.is_radial:
            return radial_gradient_svg(g, page_size, config)
        return linear_gradient_svg(g, page_size, config)
    return solid_svg(color, page_size, config)


def render_color(color: SolidColor | GradientColor, page_size: PageSize | None = None,
                 config: EngineConfig | None = None) -> RenderedColor:
    """Render a color layer, preferring the cheap CSS form where one exists."""
    if isinstance(color, SolidColor):
        return RenderedColor(kind="css", value=color.solid)

    g = color.gradient
    if not g.is_radial:
        return RenderedColor(kind="css", value=linear_gradient_css(g))

    markup = radial_gradient_svg(g, page_size, config)
    logger.debug(f"Rendered radial gradient {g.from_} -> {g.to} as SVG data URI")
    return RenderedColor(kind="svg", value=to_data_uri(markup), markup=markup)


def native_background(color: SolidColor | GradientColor, page_size: PageSize | None = None,
                      config: EngineConfig | None = None) -> str:
    """String to write to a page's flat native background field."""
    rendered = render_color(color, page_size, config)
    return rendered.value or (config or DEFAULT_CONFIG).default_color
