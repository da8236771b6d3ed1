"""Tests for the in-memory page host and CLI file helpers."""

import json

import pytest

from src.host.memory_page import MemoryPage
from src.host.protocol import BackgroundPage, PageElement
from src.utils.file_utils import load_background_arg, load_structured


class TestMemoryPage:
    def test_satisfies_host_protocols(self):
        page = MemoryPage()
        element = page.add_element({"type": "image", "src": "a.png"})
        assert isinstance(page, BackgroundPage)
        assert isinstance(element, PageElement)

    def test_send_to_back(self):
        page = MemoryPage()
        first = page.add_element({"name": "first"})
        last = page.add_element({"name": "last"})
        page.send_to_back(last.id)
        assert [el.id for el in page.elements] == [last.id, first.id]

    def test_send_to_back_unknown(self):
        with pytest.raises(KeyError):
            MemoryPage().send_to_back("nope")

    def test_add_element_selection(self):
        page = MemoryPage()
        page.add_element({"name": "quiet"})
        loud = page.add_element({"name": "loud"}, skip_select=False)
        assert page.selected_ids == [loud.id]
        page.remove_elements([loud.id])
        assert page.selected_ids == []

    def test_element_set_ignores_unknown_and_id(self):
        element = MemoryPage().add_element({})
        original_id = element.id
        element.set({"id": "other", "bogus": 1, "width": 50})
        assert element.id == original_id
        assert element.width == 50

    def test_save_and_load(self, tmp_path):
        page = MemoryPage(width=800, height=600, metadata={"background": {"media": None}})
        page.add_element({"name": "logo", "custom": {"role": "brand"}})
        path = tmp_path / "pages" / "page.json"
        page.save(path)

        loaded = MemoryPage.load(path)
        assert loaded == page
        assert json.loads(path.read_text())["width"] == 800


class TestFileUtils:
    def test_inline_json(self):
        assert load_background_arg('{"color": "#123456"}') == {"color": "#123456"}

    def test_bare_color(self):
        assert load_background_arg("#123456") == {"color": "#123456"}

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "bg.yaml"
        path.write_text("type: media\nmediaUrl: https://cdn.example.com/a.png\n")
        assert load_background_arg(str(path))["mediaUrl"] == "https://cdn.example.com/a.png"

    def test_missing_structured_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_structured(tmp_path / "missing.json")
