"""Flatten a background into a single data-URI string.

For consumers that accept one image/background URL and cannot host a
separate media element (thumbnails, legacy single-field export).
"""

from typing import Any

from src.schemas.background import GradientColor
from src.schemas.engine_config import EngineConfig
from .color_compositor import render_color_svg
from .media_compositor import render_media
from .normalizer import normalize
from .svg import PageSize, to_data_uri


def background_data_uri(raw: Any, page_size: PageSize | None = None,
                        config: EngineConfig | None = None) -> str:
    """Return a ``data:image/svg+xml`` URI for ``raw``, or ``""``.

    A gradient color layer wins over media; a solid color with no media has
    no image form and yields an empty string.
    """
    bg = normalize(raw, config)

    if isinstance(bg.color, GradientColor):
        return to_data_uri(render_color_svg(bg.color, page_size, config))

    if bg.media is not None:
        return to_data_uri(render_media(bg.media, page_size, config))

    return ""
