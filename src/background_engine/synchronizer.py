"""Keep a host page in sync with a canonical SlideBackground.

The synchronizer is the only component that mutates a page's native
background field, its stored background metadata, and its background-media
element.  For each ``apply``:

1. The color layer is written to ``page.background`` (synchronous).
2. The canonical background is stored in ``page.metadata["background"]``,
   only when it differs from what is already there.
3. No media: any background-media element is removed.
4. Media: exactly one background-media element is found or created, pinned
   to the back, and its geometry is computed once the image's natural size
   is known (asynchronous).

Presence/absence of the element is decided before ``apply`` returns; the
geometry write may land later.  Rapid repeated applies are not sequenced,
so the last geometry write wins.
"""

import asyncio
import logging
from typing import Any, Optional

from src.schemas.background import MediaLayer, SlideBackground
from src.schemas.engine_config import DEFAULT_CONFIG, EngineConfig
from .color_compositor import native_background
from .geometry import compute_geometry, full_bleed, valid_dimensions
from .image_size import ImageSizeResolver
from .normalizer import infer_from_page, normalize

logger = logging.getLogger(__name__)

METADATA_KEY = "background"

# Users must never grab, move, resize, or delete the background layer.
_LOCKED_FLAGS = {
    "selectable": False,
    "draggable": False,
    "resizable": False,
    "removable": False,
}


class BackgroundSynchronizer:
    """Apply canonical backgrounds to host pages."""

    def __init__(self, resolver: ImageSizeResolver | None = None,
                 config: EngineConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self.resolver = resolver or ImageSizeResolver(config=self.config)
        self._pending: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def apply(self, page, background: Any) -> Optional[asyncio.Task]:
        """Apply ``background`` to ``page`` without waiting on image lookups.

        Inside a running event loop the geometry pass is scheduled as a task,
        which is returned.  Without a running loop it is run to completion
        before returning, and None is returned.
        """
        bg, element = self._apply_layers(page, background)
        if element is None:
            return None

        layout = self._update_media_layout(page, element, bg.media)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; laying out background media synchronously")
            asyncio.run(layout)
            return None

        task = loop.create_task(layout)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def apply_async(self, page, background: Any) -> SlideBackground:
        """Apply ``background`` and wait for the media geometry to settle."""
        bg, element = self._apply_layers(page, background)
        if element is not None:
            await self._update_media_layout(page, element, bg.media)
        return bg

    def sync_page(self, page) -> Optional[asyncio.Task]:
        """Re-apply the background stored on ``page``.

        Pages without a stored record are bootstrapped from their native
        background field.
        """
        stored = (getattr(page, "metadata", None) or {}).get(METADATA_KEY)
        if stored is None:
            bg = infer_from_page(page, self.config)
            logger.debug(f"No stored background; inferred {bg.to_dict()} from native field")
        else:
            bg = normalize(stored, self.config)
        return self.apply(page, bg)

    async def wait_pending(self) -> None:
        """Wait for all scheduled geometry passes to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def find_media_element(self, page):
        for element in page.elements:
            custom = getattr(element, "custom", None) or {}
            if custom.get("role") == self.config.media_role:
                return element
        return None

    # ------------------------------------------------------------------
    # Synchronous layer application
    # ------------------------------------------------------------------

    def _apply_layers(self, page, background: Any):
        bg = normalize(background, self.config)
        self._write_color_layer(page, bg)

        if bg.media is None:
            self._remove_media_element(page)
            return bg, None
        return bg, self._ensure_media_element(page, bg.media)

    def _write_color_layer(self, page, bg: SlideBackground) -> None:
        native = native_background(bg.color, (page.width, page.height), self.config)
        canonical = bg.to_dict()

        metadata = dict(getattr(page, "metadata", None) or {})
        if metadata.get(METADATA_KEY) == canonical:
            page.set(background=native)
            return

        metadata[METADATA_KEY] = canonical
        page.set(background=native, metadata=metadata)
        logger.debug(f"Stored canonical background on page: {canonical}")

    def _ensure_media_element(self, page, media: MediaLayer):
        existing = self.find_media_element(page)
        if existing is not None:
            return existing

        props = {
            "type": "image",
            "name": self.config.media_role,
            "src": media.media_url,
            "opacity": 1,
            "custom": {"role": self.config.media_role},
            **_LOCKED_FLAGS,
        }
        if valid_dimensions(page.width, page.height):
            props.update(full_bleed(float(page.width), float(page.height)).as_props())

        element = page.add_element(props, skip_select=True)
        logger.debug(f"Created background-media element {element.id}")
        self._pin_to_back(page, element)
        return element

    def _remove_media_element(self, page) -> None:
        element = self.find_media_element(page)
        if element is None:
            return
        page.remove_elements([element.id])
        logger.debug(f"Removed background-media element {element.id}")

    def _pin_to_back(self, page, element) -> None:
        try:
            page.send_to_back(element.id)
        except Exception as e:
            logger.warning(f"Could not move background-media element to back: {e}")

    # ------------------------------------------------------------------
    # Asynchronous geometry
    # ------------------------------------------------------------------

    async def _update_media_layout(self, page, element, media: MediaLayer) -> None:
        # Other operations may have reordered the stack since the last sync.
        self._pin_to_back(page, element)

        page_w, page_h = page.width, page.height
        if not valid_dimensions(page_w, page_h):
            logger.warning(f"Skipping background layout for page of size {page_w}x{page_h}")
            return
        page_w, page_h = float(page_w), float(page_h)

        # Hosts that swap image data load it here rather than inside set().
        prepare_src = getattr(element, "prepare_src", None)
        if prepare_src is not None:
            await prepare_src(media.media_url)

        natural = await self.resolver.get_natural_size(media.media_url)
        geometry = compute_geometry(page_w, page_h, natural, media)

        element.set({"src": media.media_url, **_LOCKED_FLAGS, **geometry.as_props()})
        logger.debug(
            f"Background-media {element.id} ({media.sizing.value}/{media.position.value}): "
            f"{geometry.width:.1f}x{geometry.height:.1f} at ({geometry.x:.1f}, {geometry.y:.1f}), "
            f"crop {geometry.crop_width:.3f}x{geometry.crop_height:.3f}"
        )
