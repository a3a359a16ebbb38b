"""
Brush painting into the selection buffer.

A stroke is accumulated as filled discs drawn into a transparent RGBA
selection buffer. Each mode paints with its own opaque marker color so the
live overlay shows what the stroke will do. Marker colors are visual only:
the resolver reads the brush mode once, when the stroke is resolved.

Functions:
    marker_color: Marker color for a brush mode
    paint_stroke: Draw one brush disc into the selection buffer
    clear_selection: Reset the selection buffer to fully transparent
    has_selection: Check whether any pixel is marked
"""

import logging
import math
from typing import Any

import numpy as np
from PIL import Image, ImageColor

from MR_Libs.RasterLib.raster_models import BrushMode, Point, coerce_brush_mode
from MR_Libs.constants import (
    BRUSH_MODE_ERASE,
    ERASE_MARKER_COLOR,
    RESTORE_MARKER_COLOR,
)

logger = logging.getLogger(__name__)


def marker_color(brush_mode: BrushMode) -> str:
    if coerce_brush_mode(brush_mode) == BRUSH_MODE_ERASE:
        return ERASE_MARKER_COLOR
    return RESTORE_MARKER_COLOR


def paint_stroke(selection: Any, raster_point: Point, brush_size: float, brush_mode: BrushMode) -> None:
    """
    Draw a filled disc into the selection buffer.

    A pixel is marked when its center lies inside the disc, so a disc of
    diameter 20 centered on a pixel corner marks 20 pixels across.
    Calls accumulate: earlier discs of the same stroke are kept.
    Discs that fall partly or wholly outside the buffer are clipped.

    Args:
        selection: RGBA PIL Image used as the selection buffer (modified in place)
        raster_point: Disc center in raster pixel coordinates
        brush_size: Disc diameter in raster pixels
        brush_mode: "erase" or "restore" (selects the marker color)

    Raises:
        ValueError: If the selection buffer is not RGBA or brush_size is not positive
    """
    if selection.mode != "RGBA":
        raise ValueError(f"Selection buffer must be RGBA, got {selection.mode}")

    if brush_size <= 0:
        raise ValueError(f"brush_size must be positive, got {brush_size}")

    color = ImageColor.getrgb(marker_color(brush_mode)) + (255,)
    x, y = raster_point
    radius = brush_size / 2.0
    left = max(0, int(math.floor(x - radius)))
    top = max(0, int(math.floor(y - radius)))
    right = min(selection.width, int(math.ceil(x + radius)))
    bottom = min(selection.height, int(math.ceil(y + radius)))
    if left >= right or top >= bottom:
        return

    cols = np.arange(left, right) + 0.5 - x
    rows = np.arange(top, bottom) + 0.5 - y
    inside = rows[:, None] ** 2 + cols[None, :] ** 2 <= radius * radius
    mask = Image.fromarray(inside.astype(np.uint8) * 255)

    selection.paste(color, (left, top, right, bottom), mask)
    logger.debug(f"Painted {brush_mode} disc d={brush_size} at ({x:.1f}, {y:.1f})")


def clear_selection(selection: Any) -> None:
    selection.paste((0, 0, 0, 0), (0, 0, selection.width, selection.height))


def has_selection(selection: Any) -> bool:
    """Return True when at least one pixel of the buffer has nonzero alpha."""
    _, alpha_max = selection.getchannel("A").getextrema()
    return alpha_max > 0
