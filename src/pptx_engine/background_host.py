"""python-pptx adapter exposing a slide as a background host page.

Maps the engine's page capabilities onto PresentationML:

- native background  -> ``p:cSld/p:bg/p:bgPr`` solid or gradient fill
  (hex, CSS ``linear-gradient(...)``, or a radial-gradient SVG data URI)
- metadata           -> JSON stored in a slide-level ``p:extLst/p:ext``
- background-media   -> a picture shape named after the media role, cropped
  with ``crop_left/top/right/bottom`` and locked with ``a:picLocks``
- send to back       -> moving the shape to the front of ``p:spTree``

Pixel values use a 96-DPI coordinate system (px / 96 = inches).
"""

import hashlib
import io
import json
import logging
import re
from typing import Any, Iterator, Optional

from lxml import etree
from pptx.oxml.ns import qn
from pptx.util import Inches

from src.background_engine.color_compositor import linear_gradient_css, native_background
from src.background_engine.media_source import decode_data_uri, fetch_media_bytes, load_media_bytes
from src.background_engine.normalizer import clamp_hex
from src.schemas.background import Direction, Gradient, GradientColor
from src.schemas.engine_config import DEFAULT_CONFIG, EngineConfig

logger = logging.getLogger(__name__)

DPI = 96
EMU_PER_PX = 914400 // DPI  # 9525

METADATA_EXT_URI = "{7B2E4F0A-3C5D-4E6F-8A9B-0C1D2E3F4A5B}"
METADATA_NS = "urn:slide-background:metadata"

_CSS_LINEAR_RE = re.compile(
    r"linear-gradient\(\s*(-?\d+(?:\.\d+)?)deg\s*,\s*(#[0-9A-Fa-f]{3,6})[^,]*,\s*(#[0-9A-Fa-f]{3,6})",
    re.IGNORECASE,
)

# CSS measures 0deg as "to top"; DrawingML measures 0 as "to right", clockwise.
_CSS_TO_DRAWINGML = {Direction.TOP: 270, Direction.RIGHT: 0, Direction.BOTTOM: 90, Direction.LEFT: 180}
_DRAWINGML_TO_DIRECTION = {v: k for k, v in _CSS_TO_DRAWINGML.items()}
_CSS_DEG_TO_DIRECTION = {0: Direction.TOP, 90: Direction.RIGHT, 180: Direction.BOTTOM, 270: Direction.LEFT}


def px_to_emu(px: float) -> int:
    return Inches(px / DPI)


def emu_to_px(emu: int) -> float:
    return emu / EMU_PER_PX


def _src_digest(url: str) -> str:
    return hashlib.sha1(url.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# Native background <-> DrawingML fill
# ---------------------------------------------------------------------------

def _gradient_from_native(native: str) -> Optional[Gradient]:
    """Recover a two-stop gradient from a CSS string or SVG data URI."""
    match = _CSS_LINEAR_RE.search(native)
    if match:
        deg = int(float(match.group(1))) % 360
        return Gradient(
            from_=clamp_hex(match.group(2), DEFAULT_CONFIG.default_gradient_from),
            to=clamp_hex(match.group(3), DEFAULT_CONFIG.default_gradient_to),
            direction=_CSS_DEG_TO_DIRECTION.get(deg, Direction.TOP),
        )

    if native.lower().startswith("data:image/svg+xml"):
        try:
            root = etree.fromstring(decode_data_uri(native))
        except (etree.XMLSyntaxError, ValueError) as e:
            logger.warning(f"Could not parse SVG background: {e}")
            return None
        radial = root.find(".//{*}radialGradient")
        gradient_el = radial if radial is not None else root.find(".//{*}linearGradient")
        if gradient_el is None:
            return None
        stops = [s.get("stop-color") for s in gradient_el.findall("{*}stop")]
        if len(stops) < 2:
            return None
        return Gradient(
            from_=clamp_hex(stops[0], DEFAULT_CONFIG.default_gradient_from),
            to=clamp_hex(stops[-1], DEFAULT_CONFIG.default_gradient_to),
            direction=Direction.RADIAL if radial is not None else Direction.TOP,
        )
    return None


def _srgb(parent: etree._Element, hex_color: str) -> None:
    clr = etree.SubElement(parent, qn("a:srgbClr"))
    clr.set("val", hex_color.lstrip("#").upper())


def _build_fill(native: str) -> etree._Element:
    """DrawingML fill element for a native background string."""
    hex_color = clamp_hex(native, "")
    if hex_color:
        fill = etree.Element(qn("a:solidFill"))
        _srgb(fill, hex_color)
        return fill

    gradient = _gradient_from_native(native)
    if gradient is None:
        logger.warning(f"Unrecognized native background '{native[:60]}', using default color")
        fill = etree.Element(qn("a:solidFill"))
        _srgb(fill, DEFAULT_CONFIG.default_color)
        return fill

    fill = etree.Element(qn("a:gradFill"))
    fill.set("rotWithShape", "1")
    gs_lst = etree.SubElement(fill, qn("a:gsLst"))
    for pos, color in (("0", gradient.from_), ("100000", gradient.to)):
        gs = etree.SubElement(gs_lst, qn("a:gs"))
        gs.set("pos", pos)
        _srgb(gs, color)

    if gradient.is_radial:
        path = etree.SubElement(fill, qn("a:path"))
        path.set("path", "circle")
        rect = etree.SubElement(path, qn("a:fillToRect"))
        for side in ("l", "t", "r", "b"):
            rect.set(side, "50000")
    else:
        lin = etree.SubElement(fill, qn("a:lin"))
        lin.set("ang", str(_CSS_TO_DRAWINGML[gradient.direction] * 60000))
        lin.set("scaled", "0")
    return fill


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------

class PptxShapeElement:
    """Engine-facing view of a slide shape."""

    def __init__(self, page: "PptxSlidePage", shape):
        self._page = page
        self._shape = shape
        self._prefetched: dict[str, bytes] = {}

    @property
    def id(self) -> str:
        return str(self._shape.shape_id)

    @property
    def shape(self):
        return self._shape

    @property
    def custom(self) -> dict[str, Any]:
        if self._shape.name == self._page.config.media_role:
            return {"role": self._page.config.media_role}
        return {}

    def set(self, props: dict[str, Any]) -> None:
        shape = self._shape
        for key in ("x", "y", "width", "height"):
            if key in props:
                attr = {"x": "left", "y": "top"}.get(key, key)
                setattr(shape, attr, px_to_emu(props[key]))

        if "src" in props and hasattr(shape, "crop_left"):
            self._replace_image(props["src"])

        if any(k in props for k in ("crop_x", "crop_y", "crop_width", "crop_height")):
            self._set_crop(props)

        self._set_locks(props)

    @property
    def crop(self) -> dict[str, float]:
        s = self._shape
        return {
            "crop_x": s.crop_left,
            "crop_y": s.crop_top,
            "crop_width": 1.0 - s.crop_left - s.crop_right,
            "crop_height": 1.0 - s.crop_top - s.crop_bottom,
        }

    def _set_crop(self, props: dict[str, Any]) -> None:
        if not hasattr(self._shape, "crop_left"):
            logger.debug(f"Shape {self.id} is not a picture; crop ignored")
            return
        crop = self.crop
        crop.update({k: float(v) for k, v in props.items() if k in crop})
        s = self._shape
        s.crop_left = crop["crop_x"]
        s.crop_top = crop["crop_y"]
        s.crop_right = max(0.0, 1.0 - crop["crop_x"] - crop["crop_width"])
        s.crop_bottom = max(0.0, 1.0 - crop["crop_y"] - crop["crop_height"])

    def _c_nv_pr(self):
        return self._shape._element.xpath("./*[1]/p:cNvPr")[0]

    def _shows(self, url: str) -> bool:
        return self._c_nv_pr().get("descr") == _src_digest(url)

    async def prepare_src(self, url: str) -> None:
        """Fetch the bytes for a pending image swap without blocking the loop."""
        if not hasattr(self._shape, "crop_left") or self._shows(url) or url in self._prefetched:
            return
        self._prefetched[url] = await fetch_media_bytes(url, self._page.config)

    def _replace_image(self, url: str) -> None:
        if self._shows(url):
            return
        data = self._prefetched.pop(url, None)
        if data is None:
            data = load_media_bytes(url, self._page.config)
        _, r_id = self._page.slide.part.get_or_add_image_part(io.BytesIO(data))
        blip = self._shape._element.xpath(".//a:blip")[0]
        blip.set(qn("r:embed"), r_id)
        self._c_nv_pr().set("descr", _src_digest(url))

    def _set_locks(self, props: dict[str, Any]) -> None:
        locks = self._shape._element.xpath("./p:nvPicPr/p:cNvPicPr")
        if not locks:
            return
        c_nv_pic_pr = locks[0]
        pic_locks = c_nv_pic_pr.find(qn("a:picLocks"))
        if pic_locks is None:
            pic_locks = etree.SubElement(c_nv_pic_pr, qn("a:picLocks"))
        for key, attr in (("selectable", "noSelect"), ("draggable", "noMove"), ("resizable", "noResize")):
            if key not in props:
                continue
            if props[key]:
                pic_locks.attrib.pop(attr, None)
            else:
                pic_locks.set(attr, "1")


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------

class PptxSlidePage:
    """A python-pptx slide presented through the background host interface."""

    def __init__(self, slide, slide_width: int, slide_height: int,
                 config: EngineConfig | None = None):
        self.slide = slide
        self.config = config or DEFAULT_CONFIG
        self._width_emu = int(slide_width)
        self._height_emu = int(slide_height)

    @classmethod
    def from_presentation(cls, prs, index: int, config: EngineConfig | None = None) -> "PptxSlidePage":
        if index < 0 or index >= len(prs.slides):
            raise IndexError(f"Slide index {index} out of range (deck has {len(prs.slides)} slides)")
        return cls(prs.slides[index], prs.slide_width, prs.slide_height, config)

    @property
    def width(self) -> float:
        return emu_to_px(self._width_emu)

    @property
    def height(self) -> float:
        return emu_to_px(self._height_emu)

    # --- native background ---

    def _bg_pr(self):
        bg = self.slide.element.cSld.find(qn("p:bg"))
        return None if bg is None else bg.find(qn("p:bgPr"))

    @property
    def background(self) -> str:
        bg_pr = self._bg_pr()
        if bg_pr is None:
            return ""
        solid = bg_pr.find(f"{qn('a:solidFill')}/{qn('a:srgbClr')}")
        if solid is not None:
            return f"#{solid.get('val', '').upper()}"

        grad = bg_pr.find(qn("a:gradFill"))
        if grad is None:
            return ""
        stops = [gs.find(qn("a:srgbClr")) for gs in grad.iter(qn("a:gs"))]
        colors = [f"#{s.get('val')}" for s in stops if s is not None]
        if len(colors) < 2:
            return ""
        if grad.find(qn("a:path")) is not None:
            color = GradientColor(gradient=Gradient(from_=colors[0], to=colors[-1], direction=Direction.RADIAL))
            return native_background(color, (self.width, self.height), self.config)
        lin = grad.find(qn("a:lin"))
        ang = int(lin.get("ang", "0")) // 60000 if lin is not None else 270
        direction = _DRAWINGML_TO_DIRECTION.get(ang % 360, Direction.TOP)
        return linear_gradient_css(Gradient(from_=colors[0], to=colors[-1], direction=direction))

    def _write_background(self, native: str) -> None:
        c_sld = self.slide.element.cSld
        for existing in c_sld.findall(qn("p:bg")):
            c_sld.remove(existing)

        bg = etree.Element(qn("p:bg"))
        bg_pr = etree.SubElement(bg, qn("p:bgPr"))
        bg_pr.append(_build_fill(native))
        etree.SubElement(bg_pr, qn("a:effectLst"))
        # p:bg must be the first child of cSld (before spTree)
        c_sld.insert(0, bg)

    # --- metadata ---

    def _metadata_node(self, create: bool = False):
        sld = self.slide.element
        ext_lst = sld.find(qn("p:extLst"))
        if ext_lst is None:
            if not create:
                return None
            ext_lst = etree.SubElement(sld, qn("p:extLst"))
        for ext in ext_lst.findall(qn("p:ext")):
            if ext.get("uri") == METADATA_EXT_URI:
                return ext.find(f"{{{METADATA_NS}}}metadata")
        if not create:
            return None
        ext = etree.SubElement(ext_lst, qn("p:ext"))
        ext.set("uri", METADATA_EXT_URI)
        return etree.SubElement(ext, f"{{{METADATA_NS}}}metadata", nsmap={"sbg": METADATA_NS})

    @property
    def metadata(self) -> dict[str, Any]:
        node = self._metadata_node()
        if node is None or not node.text:
            return {}
        try:
            data = json.loads(node.text)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable slide metadata: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_metadata(self, metadata: dict[str, Any]) -> None:
        node = self._metadata_node(create=True)
        node.text = json.dumps(metadata, sort_keys=True)

    def set(self, **props: Any) -> None:
        if "background" in props:
            self._write_background(props["background"])
        if "metadata" in props:
            self._write_metadata(props["metadata"])

    # --- elements ---

    @property
    def elements(self) -> Iterator[PptxShapeElement]:
        return (PptxShapeElement(self, shape) for shape in self.slide.shapes)

    def _find_shape(self, element_id: str):
        for shape in self.slide.shapes:
            if str(shape.shape_id) == str(element_id):
                return shape
        return None

    def add_element(self, props: dict[str, Any], skip_select: bool = True) -> PptxShapeElement:
        """Add a picture shape; only image elements are supported."""
        if props.get("type", "image") != "image":
            raise ValueError(f"Unsupported element type for slides: {props.get('type')}")
        src = props.get("src")
        if not src:
            raise ValueError("Image element requires a 'src'")

        data = load_media_bytes(src, self.config)
        picture = self.slide.shapes.add_picture(
            io.BytesIO(data),
            px_to_emu(props.get("x", 0)),
            px_to_emu(props.get("y", 0)),
            px_to_emu(props.get("width", self.width)),
            px_to_emu(props.get("height", self.height)),
        )
        element = PptxShapeElement(self, picture)
        c_nv_pr = element._c_nv_pr()
        if props.get("name"):
            c_nv_pr.set("name", props["name"])
        c_nv_pr.set("descr", _src_digest(src))
        rest = {k: v for k, v in props.items() if k not in ("src", "type", "name", "custom")}
        element.set(rest)
        return element

    def remove_elements(self, ids: list[str]) -> None:
        for element_id in ids:
            shape = self._find_shape(element_id)
            if shape is None:
                logger.debug(f"Shape {element_id} already gone")
                continue
            el = shape._element
            el.getparent().remove(el)

    def send_to_back(self, element_id: str) -> None:
        shape = self._find_shape(element_id)
        if shape is None:
            raise KeyError(f"No shape with id {element_id} on slide")
        sp_tree = self.slide.shapes._spTree
        el = shape._element
        sp_tree.remove(el)
        # First two children are the group's nvGrpSpPr and grpSpPr.
        sp_tree.insert(2, el)
