"""
Display-to-raster coordinate mapping.

Zoom and pan are applied to the canvas container as a visual transform;
the raster is never resampled. Pointer positions are therefore mapped
through the *post-transform* bounding rectangle of the canvas, which keeps
the mapping exact at any zoom or pan.

Functions:
    to_raster: Map a display-space point into raster pixel coordinates
    to_display: Inverse of to_raster
    transformed_rect: Post-transform rectangle of a canvas under a ViewTransform
    fit_rect: Untransformed canvas rectangle fitted inside a viewport
"""

from MR_Libs.RasterLib.raster_models import Point, Rect, Size, ViewTransform


def _check_rect(display_rect: Rect) -> None:
    if display_rect.width <= 0 or display_rect.height <= 0:
        raise ValueError(
            f"Display rect must have a positive size, got "
            f"{display_rect.width}x{display_rect.height}"
        )


def to_raster(display_point: Point, display_rect: Rect, raster_size: Size) -> Point:
    """
    Map a pointer position in display space to raster coordinates.

    Args:
        display_point: (x, y) pointer position in display units
        display_rect: Bounding rectangle of the canvas as currently displayed
        raster_size: (width, height) of the raster in pixels

    Returns:
        (x, y) position in raster pixels (fractional, may lie outside the raster)

    Raises:
        ValueError: If display_rect has zero or negative size
    """
    _check_rect(display_rect)
    scale_x = raster_size[0] / display_rect.width
    scale_y = raster_size[1] / display_rect.height
    x = (display_point[0] - display_rect.left) * scale_x
    y = (display_point[1] - display_rect.top) * scale_y
    return (x, y)


def to_display(raster_point: Point, display_rect: Rect, raster_size: Size) -> Point:
    """Map a raster position back to display space (inverse of to_raster)."""
    _check_rect(display_rect)
    if raster_size[0] <= 0 or raster_size[1] <= 0:
        raise ValueError(f"Raster size must be positive, got {raster_size}")
    x = display_rect.left + raster_point[0] * display_rect.width / raster_size[0]
    y = display_rect.top + raster_point[1] * display_rect.height / raster_size[1]
    return (x, y)


def transformed_rect(base_rect: Rect, origin: Point, view: ViewTransform) -> Rect:
    """
    Compute where a canvas ends up after the container transform.

    The container applies ``scale(zoom) translate(pan)`` about ``origin``,
    so a point p lands at ``origin + zoom * (p + pan - origin)``.
    """
    ox, oy = origin
    left = ox + view.zoom * (base_rect.left + view.pan_x - ox)
    top = oy + view.zoom * (base_rect.top + view.pan_y - oy)
    return Rect(left, top, base_rect.width * view.zoom, base_rect.height * view.zoom)


def fit_rect(raster_size: Size, viewport_size: Size) -> Rect:
    """
    Center the raster inside the viewport, shrinking it to fit if needed.

    Rasters smaller than the viewport are shown at their natural size.
    """
    raster_w, raster_h = raster_size
    view_w, view_h = viewport_size
    if raster_w <= 0 or raster_h <= 0:
        raise ValueError(f"Raster size must be positive, got {raster_size}")

    scale = min(1.0, view_w / raster_w, view_h / raster_h)
    width = raster_w * scale
    height = raster_h * scale
    return Rect((view_w - width) / 2.0, (view_h - height) / 2.0, width, height)
