"""Render the media layer as an SVG wrapper around an image reference.

Only used where a host cannot carry a separate synchronized element (for
example a flattened single-string export).  The normal path is the
background-media element managed by the synchronizer.
"""

from src.schemas.background import Anchor, MediaLayer, Sizing
from src.schemas.engine_config import EngineConfig
from .svg import (
    XLINK_NS,
    PageSize,
    fmt_length,
    add_element,
    add_full_rect,
    new_document,
    resolve_canvas,
    serialize,
    xml_safe,
)

ANCHOR_ALIGN = {
    Anchor.TOP_LEFT: "xMinYMin",
    Anchor.TOP: "xMidYMin",
    Anchor.TOP_RIGHT: "xMaxYMin",
    Anchor.LEFT: "xMinYMid",
    Anchor.CENTER: "xMidYMid",
    Anchor.RIGHT: "xMaxYMid",
    Anchor.BOTTOM_LEFT: "xMinYMax",
    Anchor.BOTTOM: "xMidYMax",
    Anchor.BOTTOM_RIGHT: "xMaxYMax",
    Anchor.BOTTOM_CENTER: "xMidYMax",
}


def preserve_aspect_ratio(media: MediaLayer) -> str:
    """SVG ``preserveAspectRatio`` value: fill slices (cover), fit meets (contain)."""
    align = ANCHOR_ALIGN.get(media.position, "xMidYMid")
    meet_or_slice = "slice" if media.sizing == Sizing.FILL else "meet"
    return f"{align} {meet_or_slice}"


def render_media(media: MediaLayer, page_size: PageSize | None = None,
                 config: EngineConfig | None = None) -> str:
    """SVG markup that draws ``media.media_url`` across the page box."""
    w, h = resolve_canvas(page_size, config)
    href = xml_safe(media.media_url)

    root = new_document(w, h, with_xlink=True)
    add_full_rect(root, w, h, "transparent")
    image = add_element(
        root, "image",
        x="0", y="0", width=fmt_length(w), height=fmt_length(h),
        href=href,
    )
    # Older renderers only understand xlink:href.
    image.set(f"{{{XLINK_NS}}}href", href)
    image.set("preserveAspectRatio", preserve_aspect_ratio(media))
    return serialize(root)
