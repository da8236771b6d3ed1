"""In-memory page model with JSON persistence.

A minimal host document: a page with a native background string, a metadata
bag, and an ordered element list (index 0 is the back).  Used by the CLI for
JSON page documents and by the tests as a stand-in for the editor canvas.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.utils.file_utils import load_structured, save_json

logger = logging.getLogger(__name__)


class MemoryElement(BaseModel):
    """A positioned element on a MemoryPage."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    type: str = "image"
    name: str = ""
    src: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 100.0
    opacity: float = 1.0
    crop_x: float = 0.0
    crop_y: float = 0.0
    crop_width: float = 1.0
    crop_height: float = 1.0
    selectable: bool = True
    draggable: bool = True
    resizable: bool = True
    removable: bool = True
    custom: dict[str, Any] = Field(default_factory=dict)

    def set(self, props: dict[str, Any]) -> None:
        for key, value in props.items():
            if key not in type(self).model_fields or key == "id":
                logger.debug(f"Ignoring unknown element property '{key}'")
                continue
            setattr(self, key, value)


class MemoryPage(BaseModel):
    """A single editable page."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    width: float = 1080
    height: float = 1920
    background: str = "#FFFFFF"
    metadata: dict[str, Any] = Field(default_factory=dict)
    children: list[MemoryElement] = Field(default_factory=list)
    selected_ids: list[str] = Field(default_factory=list)

    @property
    def elements(self) -> list[MemoryElement]:
        return list(self.children)

    def set(self, **props: Any) -> None:
        if "background" in props:
            self.background = props["background"]
        if "metadata" in props:
            self.metadata = dict(props["metadata"])

    def get_element(self, element_id: str) -> Optional[MemoryElement]:
        return next((el for el in self.children if el.id == element_id), None)

    def add_element(self, props: dict[str, Any], skip_select: bool = True) -> MemoryElement:
        element = MemoryElement.model_validate(props)
        self.children.append(element)
        if not skip_select:
            self.selected_ids = [element.id]
        return element

    def remove_elements(self, ids: list[str]) -> None:
        doomed = set(ids)
        self.children = [el for el in self.children if el.id not in doomed]
        self.selected_ids = [i for i in self.selected_ids if i not in doomed]

    def send_to_back(self, element_id: str) -> None:
        element = self.get_element(element_id)
        if element is None:
            raise KeyError(f"No element with id '{element_id}' on page {self.id}")
        self.children.remove(element)
        self.children.insert(0, element)

    def save(self, path: str | Path) -> None:
        """Serialize the page to a JSON file."""
        save_json(self.model_dump(mode="json"), path)

    @classmethod
    def load(cls, path: str | Path) -> "MemoryPage":
        """Load a page from a JSON or YAML file."""
        return cls.model_validate(load_structured(path))
