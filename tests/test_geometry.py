"""Tests for fit / fill background-media geometry."""

import itertools

import pytest

from src.background_engine.geometry import (
    anchor_weights,
    compute_geometry,
    fill_geometry,
    fit_geometry,
)
from src.background_engine.image_size import ImageSize
from src.schemas.background import Anchor, MediaLayer, Sizing

PAGES = [(1080, 1920), (1920, 1080), (960, 540), (800, 800), (1000, 333)]
IMAGES = [(1920, 1080), (1080, 1920), (400, 400), (3000, 1000), (960, 540)]
TOL = 1e-9


def media(sizing: Sizing, position: Anchor = Anchor.CENTER) -> MediaLayer:
    return MediaLayer(media_url="https://cdn.example.com/a.png", sizing=sizing, position=position)


class TestFit:
    @pytest.mark.parametrize("page,image", list(itertools.product(PAGES, IMAGES)))
    def test_preserves_aspect_within_page(self, page, image):
        for anchor in Anchor:
            g = fit_geometry(*page, *image, anchor)
            assert g.width / g.height == pytest.approx(image[0] / image[1])
            assert g.width <= page[0] + TOL
            assert g.height <= page[1] + TOL
            assert g.x >= -TOL and g.y >= -TOL
            assert g.x + g.width <= page[0] + TOL
            assert g.y + g.height <= page[1] + TOL
            assert (g.crop_x, g.crop_y, g.crop_width, g.crop_height) == (0, 0, 1, 1)

    def test_one_axis_fills_page(self):
        g = fit_geometry(1000, 1000, 2000, 1000, Anchor.CENTER)
        assert (g.width, g.height) == (1000, 500)

    @pytest.mark.parametrize("anchor,expected_y", [
        (Anchor.TOP, 0),
        (Anchor.CENTER, 250),
        (Anchor.BOTTOM, 500),
        (Anchor.BOTTOM_CENTER, 500),
    ])
    def test_vertical_slack_by_anchor(self, anchor, expected_y):
        g = fit_geometry(1000, 1000, 2000, 1000, anchor)
        assert g.x == 0
        assert g.y == pytest.approx(expected_y)

    @pytest.mark.parametrize("anchor,expected_x", [
        (Anchor.LEFT, 0),
        (Anchor.TOP_LEFT, 0),
        (Anchor.CENTER, 300),
        (Anchor.RIGHT, 600),
        (Anchor.BOTTOM_RIGHT, 600),
    ])
    def test_horizontal_slack_by_anchor(self, anchor, expected_x):
        g = fit_geometry(1000, 400, 400, 400, anchor)
        assert g.width == 400
        assert g.x == pytest.approx(expected_x)
        assert g.y == 0


class TestFill:
    @pytest.mark.parametrize("page,image", list(itertools.product(PAGES, IMAGES)))
    def test_crop_bounds(self, page, image):
        for anchor in Anchor:
            g = fill_geometry(*page, *image, anchor)
            assert (g.x, g.y, g.width, g.height) == (0, 0, page[0], page[1])
            assert 0 <= g.crop_x <= 1 - g.crop_width + TOL
            assert 0 <= g.crop_y <= 1 - g.crop_height + TOL
            assert 0 < g.crop_width <= 1 and 0 < g.crop_height <= 1

    @pytest.mark.parametrize("page,image", list(itertools.product(PAGES, IMAGES)))
    def test_crops_only_longer_axis(self, page, image):
        g = fill_geometry(*page, *image, Anchor.CENTER)
        if page[0] / page[1] == image[0] / image[1]:
            assert (g.crop_width, g.crop_height) == (1, 1)
        else:
            assert (g.crop_width == 1) != (g.crop_height == 1)

    @pytest.mark.parametrize("page,image", list(itertools.product(PAGES, IMAGES)))
    def test_visible_crop_matches_page_aspect(self, page, image):
        g = fill_geometry(*page, *image, Anchor.CENTER)
        visible = (image[0] * g.crop_width) / (image[1] * g.crop_height)
        assert visible == pytest.approx(page[0] / page[1])

    def test_portrait_page_landscape_image(self):
        g = fill_geometry(1080, 1920, 1920, 1080, Anchor.CENTER)
        expected_w = (1080 / 1920) / (1920 / 1080)
        assert g.crop_width == pytest.approx(expected_w)
        assert g.crop_height == 1
        assert g.crop_x == pytest.approx((1 - expected_w) / 2)
        assert g.crop_y == 0

    def test_anchor_extremes(self):
        start = fill_geometry(1080, 1920, 1920, 1080, Anchor.LEFT)
        end = fill_geometry(1080, 1920, 1920, 1080, Anchor.RIGHT)
        assert start.crop_x == 0
        assert end.crop_x == pytest.approx(1 - end.crop_width)

        top = fill_geometry(1920, 1080, 1080, 1920, Anchor.TOP)
        bottom = fill_geometry(1920, 1080, 1080, 1920, Anchor.BOTTOM_CENTER)
        assert top.crop_y == 0
        assert bottom.crop_y == pytest.approx(1 - bottom.crop_height)


class TestComputeGeometry:
    def test_unresolved_is_full_bleed(self):
        g = compute_geometry(960, 540, None, media(Sizing.FILL))
        assert (g.x, g.y, g.width, g.height) == (0, 0, 960, 540)
        assert (g.crop_x, g.crop_y, g.crop_width, g.crop_height) == (0, 0, 1, 1)

    def test_dispatches_on_sizing(self):
        natural = ImageSize(width=400, height=400)
        fit = compute_geometry(1000, 400, natural, media(Sizing.FIT))
        fill = compute_geometry(1000, 400, natural, media(Sizing.FILL))
        assert fit.width == 400
        assert fill.width == 1000
        assert fill.crop_height == pytest.approx(0.4)

    def test_default_anchor_weights(self):
        assert anchor_weights(Anchor.BOTTOM_CENTER) == (0.5, 1.0)
        assert anchor_weights(Anchor.CENTER) == (0.5, 0.5)

    def test_as_props_keys(self):
        props = compute_geometry(10, 10, None, media(Sizing.FIT)).as_props()
        assert set(props) == {"x", "y", "width", "height", "crop_x", "crop_y", "crop_width", "crop_height"}
