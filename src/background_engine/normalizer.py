"""Normalize arbitrary background values into a canonical SlideBackground.

Three input generations are recognized, in priority order:

1. Layered schema   -- ``{"color": {...}, "media": {...}}``
2. Legacy union     -- ``{"type": "gradient", "gradient": {...}}`` or
                       ``{"type": "media", "mediaUrl": ..., ...}``
3. Legacy solid     -- ``{"color": "#RRGGBB"}`` / ``None`` / anything else

Normalization never raises.  Each malformed field is replaced by its own
default, so a partially valid value keeps its valid parts.

``infer_from_native`` bootstraps a background from a page's flat native
field (hex, CSS gradient, or image URL).  It is a lossy heuristic: only the
first two colors of a CSS gradient survive and the direction is always
``top``.
"""

import logging
import re
from typing import Any, Optional

from src.schemas.background import (
    Anchor,
    DEFAULT_ANCHOR,
    DEFAULT_DIRECTION,
    DEFAULT_SIZING,
    Direction,
    Gradient,
    GradientColor,
    MediaLayer,
    Sizing,
    SlideBackground,
    SolidColor,
)
from src.schemas.engine_config import DEFAULT_CONFIG, EngineConfig

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")
_HEX_SEARCH_RE = re.compile(r"#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})(?![0-9a-fA-F])")
_URL_LIKE_RE = re.compile(r"^(data:|blob:|https?://)", re.IGNORECASE)
_CSS_URL_RE = re.compile(r"^url\(\s*(['\"]?)(.*?)\1\s*\)$", re.IGNORECASE | re.DOTALL)

_DIRECTIONS = {d.value: d for d in Direction}
_SIZINGS = {s.value: s for s in Sizing}
_ANCHORS = {a.value: a for a in Anchor}


# ---------------------------------------------------------------------------
# Field clamps
# ---------------------------------------------------------------------------

def clamp_hex(value: Any, fallback: str) -> str:
    """Return ``value`` as ``#RRGGBB`` upper-case, or ``fallback``.

    Accepts ``#RGB`` and ``#RRGGBB`` with surrounding whitespace.
    """
    if not isinstance(value, str):
        return fallback
    v = value.strip()
    if not _HEX_RE.match(v):
        return fallback
    digits = v[1:]
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits.upper()}"


def normalize_direction(value: Any) -> Direction:
    if isinstance(value, Direction):
        return value
    return _DIRECTIONS.get(value, DEFAULT_DIRECTION) if isinstance(value, str) else DEFAULT_DIRECTION


def normalize_sizing(value: Any) -> Sizing:
    # Anything other than an explicit "fill" is treated as contain.
    return Sizing.FILL if value == Sizing.FILL.value else DEFAULT_SIZING


def normalize_position(value: Any) -> Anchor:
    if isinstance(value, Anchor):
        return value
    return _ANCHORS.get(value, DEFAULT_ANCHOR) if isinstance(value, str) else DEFAULT_ANCHOR


# ---------------------------------------------------------------------------
# Layer builders
# ---------------------------------------------------------------------------

def _as_mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _gradient_color(raw: Any, config: EngineConfig) -> GradientColor:
    g = _as_mapping(raw)
    return GradientColor(
        gradient=Gradient(
            from_=clamp_hex(g.get("from"), config.default_gradient_from),
            to=clamp_hex(g.get("to"), config.default_gradient_to),
            direction=normalize_direction(g.get("direction")),
        )
    )


def _media_layer(raw: dict) -> Optional[MediaLayer]:
    url = raw.get("mediaUrl")
    if not isinstance(url, str) or not url.strip():
        return None
    return MediaLayer(
        media_url=url,
        sizing=normalize_sizing(raw.get("sizing")),
        position=normalize_position(raw.get("position")),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize(raw: Any, config: EngineConfig | None = None) -> SlideBackground:
    """Convert any background representation into a canonical SlideBackground.

    Args:
        raw: A SlideBackground, a JSON-like dict in any supported generation,
            or anything else (which yields the default background).
        config: Optional engine configuration supplying field defaults.

    Returns:
        A fresh SlideBackground.  Idempotent: ``normalize(normalize(x)) ==
        normalize(x)``.
    """
    config = config or DEFAULT_CONFIG

    if isinstance(raw, SlideBackground):
        raw = raw.to_dict()
    bg = raw if isinstance(raw, dict) else {}

    # 1) Layered schema
    color = bg.get("color")
    if isinstance(color, dict):
        if color.get("type") == "gradient":
            color_layer = _gradient_color(color.get("gradient"), config)
        else:
            color_layer = SolidColor(solid=clamp_hex(color.get("solid"), config.default_color))
        media = bg.get("media")
        media_layer = _media_layer(media) if isinstance(media, dict) else None
        return SlideBackground(color=color_layer, media=media_layer)

    # 2) Legacy tagged union
    legacy_type = bg.get("type")
    if legacy_type == "gradient":
        return SlideBackground(color=_gradient_color(bg.get("gradient"), config))

    if legacy_type == "media":
        # The legacy schema had no simultaneous color + media.
        return SlideBackground(
            color=SolidColor(solid=config.default_color),
            media=_media_layer(bg),
        )

    # 3) Legacy solid / default
    return SlideBackground(color=SolidColor(solid=clamp_hex(color, config.default_color)))


def infer_from_native(native: Any, config: EngineConfig | None = None) -> SlideBackground:
    """Best-effort SlideBackground from a page's flat native background value."""
    config = config or DEFAULT_CONFIG
    raw = native.strip() if isinstance(native, str) else ""

    if "linear-gradient" in raw or "radial-gradient" in raw:
        colors = _HEX_SEARCH_RE.findall(raw)
        if len(colors) > 2:
            logger.debug(f"Dropping {len(colors) - 2} extra gradient stops from '{raw}'")
        return SlideBackground(
            color=GradientColor(
                gradient=Gradient(
                    from_=clamp_hex(colors[0] if colors else None, config.default_gradient_from),
                    to=clamp_hex(colors[1] if len(colors) > 1 else None, config.default_gradient_to),
                    direction=Direction.TOP,
                )
            )
        )

    css_url = _CSS_URL_RE.match(raw)
    if css_url:
        raw = css_url.group(2).strip()

    if raw and _URL_LIKE_RE.match(raw):
        return SlideBackground(
            color=SolidColor(solid=config.default_color),
            media=MediaLayer(media_url=raw, sizing=Sizing.FILL, position=Anchor.CENTER),
        )

    return SlideBackground(color=SolidColor(solid=clamp_hex(raw, config.default_color)))


def infer_from_page(page: Any, config: EngineConfig | None = None) -> SlideBackground:
    """Infer a SlideBackground from ``page.background``; default for no page."""
    if page is None:
        return SlideBackground(color=SolidColor(solid=(config or DEFAULT_CONFIG).default_color))
    return infer_from_native(getattr(page, "background", None), config)
