"""SVG document helpers shared by the color and media compositors.

Documents are built with lxml so attribute values (notably media URLs) are
escaped by the serializer rather than by string formatting.
"""

import math
import re
from urllib.parse import quote

from lxml import etree

from src.schemas.engine_config import DEFAULT_CONFIG, EngineConfig

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
DATA_URI_PREFIX = "data:image/svg+xml;charset=utf-8,"

PageSize = tuple[float, float]

# Code points XML 1.0 cannot carry, even escaped.
_XML_INVALID_RE = re.compile(r"[^\t\n\r\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def _positive(value) -> float | None:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(v) or v <= 0:
        return None
    return v


def resolve_canvas(page_size: PageSize | None, config: EngineConfig | None = None) -> tuple[float, float]:
    """Return a usable (width, height), falling back per axis to the config canvas."""
    config = config or DEFAULT_CONFIG
    width, height = page_size if page_size else (None, None)
    w = _positive(width)
    h = _positive(height)
    return (
        w if w is not None else config.fallback_canvas.width,
        h if h is not None else config.fallback_canvas.height,
    )


def xml_safe(value: str) -> str:
    """Percent-encode code points that cannot appear in an XML attribute."""
    return _XML_INVALID_RE.sub(lambda m: quote(m.group().encode("utf-8", "surrogatepass")), value)


def fmt_length(value: float) -> str:
    """Format a dimension without a trailing '.0' for whole numbers."""
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def new_document(width: float, height: float, with_xlink: bool = False) -> etree._Element:
    """Create an ``<svg>`` root that stretches to whatever box it is drawn in."""
    nsmap = {None: SVG_NS}
    if with_xlink:
        nsmap["xlink"] = XLINK_NS
    root = etree.Element(f"{{{SVG_NS}}}svg", nsmap=nsmap)
    root.set("width", fmt_length(width))
    root.set("height", fmt_length(height))
    root.set("viewBox", f"0 0 {fmt_length(width)} {fmt_length(height)}")
    root.set("preserveAspectRatio", "none")
    return root


def add_element(parent: etree._Element, tag: str, **attrs: str) -> etree._Element:
    """Append an SVG child element; ``stop_color`` style kwargs become ``stop-color``."""
    el = etree.SubElement(parent, f"{{{SVG_NS}}}{tag}")
    for key, value in attrs.items():
        el.set(key.replace("_", "-"), value)
    return el


def add_full_rect(root: etree._Element, width: float, height: float, fill: str) -> etree._Element:
    return add_element(
        root, "rect", x="0", y="0", width=fmt_length(width), height=fmt_length(height), fill=fill
    )


def serialize(root: etree._Element) -> str:
    """Serialize an SVG document with an XML declaration."""
    body = etree.tostring(root, encoding="unicode", pretty_print=True)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body


def to_data_uri(svg_markup: str) -> str:
    """Wrap SVG markup as a percent-encoded ``data:image/svg+xml`` URI."""
    # Same safe set as encodeURIComponent so browsers and parsers agree.
    return DATA_URI_PREFIX + quote(svg_markup, safe="-_.!~*'()")
