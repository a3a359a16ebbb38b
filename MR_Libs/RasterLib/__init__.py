"""
RasterLib - Raster models and rendering helpers

This module provides the value types, decode/encode helpers, coordinate
mapping and layer compositing used by the mask editor.
"""

from MR_Libs.RasterLib.raster_models import (
    BrushMode,
    BrushState,
    Point,
    Rect,
    Size,
    ViewTransform,
    coerce_brush_mode,
)
from MR_Libs.RasterLib.raster_io import (
    decode_image,
    encode_png,
    is_supported_upload,
    load_image_file,
    new_blank_raster,
    save_image,
)
from MR_Libs.RasterLib.coordinate_mapper import (
    fit_rect,
    to_display,
    to_raster,
    transformed_rect,
)
from MR_Libs.RasterLib.layer_compositor import LayerCompositor, LayerInfo

__all__ = [
    "BrushMode",
    "BrushState",
    "Point",
    "Rect",
    "Size",
    "ViewTransform",
    "coerce_brush_mode",
    "decode_image",
    "encode_png",
    "is_supported_upload",
    "load_image_file",
    "new_blank_raster",
    "save_image",
    "fit_rect",
    "to_display",
    "to_raster",
    "transformed_rect",
    "LayerCompositor",
    "LayerInfo",
]
