"""Capabilities the background engine needs from a host page model.

The engine never owns pages.  Any object providing these attributes and
methods can be synchronized: the in-memory ``MemoryPage`` and the
python-pptx ``PptxSlidePage`` adapter both implement them.
"""

from typing import Any, Iterable, Protocol, runtime_checkable


@runtime_checkable
class PageElement(Protocol):
    """A positioned element on a page.

    Elements may also define ``async prepare_src(url)``; the synchronizer
    awaits it before a ``set`` that carries ``src`` so hosts can load image
    data off the event loop.
    """

    id: str
    custom: dict[str, Any]

    def set(self, props: dict[str, Any]) -> None:
        """Apply a partial update.

        Recognized keys: ``x``, ``y``, ``width``, ``height``, ``crop_x``,
        ``crop_y``, ``crop_width``, ``crop_height`` (0..1 fractions), ``src``,
        ``selectable``, ``draggable``, ``resizable``, ``removable``.
        """
        ...


@runtime_checkable
class BackgroundPage(Protocol):
    """A page with a flat native background and an ordered element list."""

    width: float
    height: float
    background: str
    metadata: dict[str, Any]

    @property
    def elements(self) -> Iterable[PageElement]:
        """Elements ordered back to front."""
        ...

    def set(self, **props: Any) -> None:
        """Update ``background`` and/or ``metadata``."""
        ...

    def add_element(self, props: dict[str, Any], skip_select: bool = True) -> PageElement:
        ...

    def remove_elements(self, ids: list[str]) -> None:
        ...

    def send_to_back(self, element_id: str) -> None:
        ...
