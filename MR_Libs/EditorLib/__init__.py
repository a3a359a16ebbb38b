"""
EditorLib - PyQt5 front end for the mask editor

The window is a thin adapter: it translates Qt events for the
SessionLib input controller and paints the composited frame.
"""

from MR_Libs.EditorLib.mask_editor_window import MaskCanvas, MaskEditorWindow, pil_to_qimage

__all__ = [
    "MaskCanvas",
    "MaskEditorWindow",
    "pil_to_qimage",
]
