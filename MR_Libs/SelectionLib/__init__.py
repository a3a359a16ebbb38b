"""
SelectionLib - Stroke painting and smart selection

This module turns brush strokes into pixel-accurate mask edits.
"""

from MR_Libs.SelectionLib.selection_painter import (
    marker_color,
    paint_stroke,
    clear_selection,
    has_selection,
)
from MR_Libs.SelectionLib.smart_selection import (
    SelectionResult,
    SmartSelectionResolver,
)

__all__ = [
    "marker_color",
    "paint_stroke",
    "clear_selection",
    "has_selection",
    "SelectionResult",
    "SmartSelectionResolver",
]
