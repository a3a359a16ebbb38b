"""
Raster and editing-state data models for Mask Refiner.

This module defines the small value types shared by every layer of the
editor. Brush and view state are frozen: each transition returns a new
instance, so the session can swap state without aliasing.

Classes:
    Rect: Display-space rectangle (left, top, width, height)
    BrushState: Brush size and mode, clamped to the allowed size range
    ViewTransform: Zoom factor and pan offset, clamped to the allowed zoom range

Type Aliases:
    Point: An (x, y) pair of floats
    Size: A (width, height) pair of ints
    BrushMode: Either "erase" or "restore"
"""

from dataclasses import dataclass, replace
from typing import Literal, Tuple

from MR_Libs.constants import (
    BRUSH_MODES,
    BRUSH_SIZE_STEP,
    DEFAULT_BRUSH_MODE,
    DEFAULT_BRUSH_SIZE,
    DEFAULT_ZOOM,
    MAX_BRUSH_SIZE,
    MAX_ZOOM,
    MIN_BRUSH_SIZE,
    MIN_ZOOM,
)

Point = Tuple[float, float]
Size = Tuple[int, int]
BrushMode = Literal["erase", "restore"]


def coerce_brush_mode(value: str) -> BrushMode:
    """
    Normalize a brush mode name.

    Args:
        value: Mode name, case-insensitive ("erase" or "restore")

    Returns:
        The lower-case mode name

    Raises:
        ValueError: If the name is not a known brush mode
    """
    mode = str(value).strip().lower()
    if mode not in BRUSH_MODES:
        raise ValueError(f"Unknown brush mode: {value!r}. Use 'erase' or 'restore'.")
    return mode  # type: ignore[return-value]


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in display space."""
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class BrushState:
    """
    Brush size (diameter in raster pixels) and editing mode.

    Out-of-range sizes are clamped rather than rejected.
    """
    size: int = DEFAULT_BRUSH_SIZE
    mode: BrushMode = DEFAULT_BRUSH_MODE

    def __post_init__(self):
        size = int(clamp(int(self.size), MIN_BRUSH_SIZE, MAX_BRUSH_SIZE))
        object.__setattr__(self, "size", size)
        object.__setattr__(self, "mode", coerce_brush_mode(self.mode))

    def with_size(self, size: int) -> "BrushState":
        return replace(self, size=size)

    def resized(self, delta: int) -> "BrushState":
        return replace(self, size=self.size + int(delta))

    def grown(self) -> "BrushState":
        return self.resized(BRUSH_SIZE_STEP)

    def shrunk(self) -> "BrushState":
        return self.resized(-BRUSH_SIZE_STEP)

    def with_mode(self, mode: str) -> "BrushState":
        return replace(self, mode=coerce_brush_mode(mode))


@dataclass(frozen=True)
class ViewTransform:
    """
    Visual zoom and pan applied to the canvas container.

    The raster itself is never resampled; the transform only decides where
    the canvas appears on screen.
    """
    zoom: float = DEFAULT_ZOOM
    pan_x: float = 0.0
    pan_y: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "zoom", clamp(float(self.zoom), MIN_ZOOM, MAX_ZOOM))
        object.__setattr__(self, "pan_x", float(self.pan_x))
        object.__setattr__(self, "pan_y", float(self.pan_y))

    @property
    def pan(self) -> Point:
        return (self.pan_x, self.pan_y)

    def with_zoom(self, zoom: float) -> "ViewTransform":
        return replace(self, zoom=zoom)

    def zoomed(self, factor: float) -> "ViewTransform":
        """Scale zoom multiplicatively, clamped to the allowed range."""
        return replace(self, zoom=self.zoom * float(factor))

    def panned(self, dx: float, dy: float) -> "ViewTransform":
        return replace(self, pan_x=self.pan_x + dx, pan_y=self.pan_y + dy)
