"""
SessionLib - Editing session, history and input handling

This module owns the editing state for one image and drives it from
pointer and keyboard input.
"""

from MR_Libs.SessionLib.history_manager import HistoryEntry, HistoryManager
from MR_Libs.SessionLib.background_removal import RembgRemover, run_background_removal
from MR_Libs.SessionLib.editing_session import EditorConfig, EditingSession
from MR_Libs.SessionLib.input_controller import (
    InputController,
    InputState,
    KeyEvent,
    PointerEvent,
    WheelEvent,
)

__all__ = [
    "HistoryEntry",
    "HistoryManager",
    "RembgRemover",
    "run_background_removal",
    "EditorConfig",
    "EditingSession",
    "InputController",
    "InputState",
    "KeyEvent",
    "PointerEvent",
    "WheelEvent",
]
