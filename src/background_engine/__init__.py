from .normalizer import clamp_hex, infer_from_native, infer_from_page, normalize
from .color_compositor import (
    RenderedColor,
    linear_gradient_css,
    native_background,
    render_color,
    render_color_svg,
)
from .media_compositor import preserve_aspect_ratio, render_media
from .export import background_data_uri
from .image_size import ImageSize, ImageSizeResolver
from .media_source import MediaSourceError, fetch_media_bytes, load_media_bytes
from .geometry import ElementGeometry, compute_geometry, fill_geometry, fit_geometry
from .synchronizer import BackgroundSynchronizer

__all__ = [
    "clamp_hex",
    "infer_from_native",
    "infer_from_page",
    "normalize",
    "RenderedColor",
    "linear_gradient_css",
    "native_background",
    "render_color",
    "render_color_svg",
    "preserve_aspect_ratio",
    "render_media",
    "background_data_uri",
    "ImageSize",
    "ImageSizeResolver",
    "MediaSourceError",
    "fetch_media_bytes",
    "load_media_bytes",
    "ElementGeometry",
    "compute_geometry",
    "fill_geometry",
    "fit_geometry",
    "BackgroundSynchronizer",
]
