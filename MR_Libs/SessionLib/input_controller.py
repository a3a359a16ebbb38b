"""
Pointer and keyboard state machine for the mask editor.

The controller is toolkit-independent: a UI layer translates its native
events into the small event dataclasses below and forwards them. The
controller maps pointer positions into raster space through the canvas's
current on-screen rectangle and drives the editing session.

States:
    IDLE      -> PANNING   middle press, or left press with Alt held
    IDLE      -> PAINTING  plain left press (paints once at the press point)
    PANNING   -> IDLE      release or pointer leave
    PAINTING  -> IDLE      release or pointer leave (resolves and commits)

Wheel zoom (with Ctrl/Meta) and keyboard shortcuts work in any state and
never change it.

Shortcuts:
    [ / ]              brush size -10 / +10
    e / r              erase / restore mode
    Ctrl/Meta+Z        undo
    Ctrl/Meta+Shift+Z  redo
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from MR_Libs.RasterLib.coordinate_mapper import to_raster
from MR_Libs.RasterLib.raster_models import Point, Rect
from MR_Libs.SessionLib.editing_session import EditingSession
from MR_Libs.constants import (
    BRUSH_MODE_ERASE,
    BRUSH_MODE_RESTORE,
    ZOOM_IN_FACTOR,
    ZOOM_OUT_FACTOR,
)

logger = logging.getLogger(__name__)

BUTTON_LEFT = 0
BUTTON_MIDDLE = 1
BUTTON_RIGHT = 2


class InputState(Enum):
    IDLE = "idle"
    PANNING = "panning"
    PAINTING = "painting"


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position in display space with the pressed button and Alt state."""
    x: float
    y: float
    button: int = BUTTON_LEFT
    alt: bool = False


@dataclass(frozen=True)
class WheelEvent:
    """Wheel tick; negative delta_y scrolls up (zoom in)."""
    delta_y: float
    ctrl: bool = False
    meta: bool = False


@dataclass(frozen=True)
class KeyEvent:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False


class InputController:
    """
    Drives an EditingSession from pointer, wheel and key events.

    Args:
        session: Session to edit
        get_display_rect: Returns the canvas's current on-screen rectangle
                          (after zoom and pan), or None if not shown
        on_change: Called whenever the visible frame should be re-rendered
    """

    def __init__(
        self,
        session: EditingSession,
        get_display_rect: Callable[[], Optional[Rect]],
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self.session = session
        self.get_display_rect = get_display_rect
        self.on_change = on_change
        self._state = InputState.IDLE
        self._last_pos: Optional[Point] = None
        self._active_button: Optional[int] = None
        self.cursor_position: Optional[Point] = None

    @property
    def state(self) -> InputState:
        return self._state

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def _set_state(self, state: InputState) -> None:
        if state != self._state:
            logger.debug(f"Input state {self._state.value} -> {state.value}")
            self._state = state

    def to_raster_point(self, display_point: Point) -> Optional[Point]:
        """Map a display position to raster space, or None if no canvas is shown."""
        size = self.session.raster_size
        rect = self.get_display_rect()
        if size is None or rect is None:
            return None

        try:
            return to_raster(display_point, rect, size)
        except ValueError as exc:
            logger.debug(f"Cannot map pointer position: {exc}")
            return None

    def cursor_raster_position(self) -> Optional[Point]:
        if self.cursor_position is None:
            return None
        return self.to_raster_point(self.cursor_position)

    # ---- Pointer ----
    def press(self, event: PointerEvent) -> InputState:
        if self._state != InputState.IDLE:
            return self._state

        position = (event.x, event.y)
        if event.button == BUTTON_MIDDLE or (event.button == BUTTON_LEFT and event.alt):
            self._last_pos = position
            self._active_button = event.button
            self._set_state(InputState.PANNING)
        elif event.button == BUTTON_LEFT:
            raster_point = self.to_raster_point(position)
            if raster_point is not None and self.session.begin_stroke(raster_point):
                self._active_button = event.button
                self._set_state(InputState.PAINTING)
                self._notify()

        return self._state

    def move(self, event: PointerEvent) -> None:
        position = (event.x, event.y)
        self.cursor_position = position

        if self._state == InputState.PANNING and self._last_pos is not None:
            dx = position[0] - self._last_pos[0]
            dy = position[1] - self._last_pos[1]
            self._last_pos = position
            self.session.pan_by(dx, dy)
            self._notify()
        elif self._state == InputState.PAINTING:
            raster_point = self.to_raster_point(position)
            if raster_point is not None:
                self.session.paint(raster_point)
                self._notify()

    def release(self, button: Optional[int] = None) -> None:
        """
        End panning or painting; a paint stroke is resolved and committed.

        When ``button`` is given, only the button that started the current
        state ends it; other buttons are ignored.
        """
        if button is not None and self._state != InputState.IDLE and button != self._active_button:
            return

        if self._state == InputState.PAINTING:
            self.session.end_stroke()
            self._notify()

        self._last_pos = None
        self._active_button = None
        self._set_state(InputState.IDLE)

    def leave(self) -> None:
        """Pointer left the canvas: treated exactly like a release."""
        self.cursor_position = None
        self.release()

    # ---- Wheel ----
    def wheel(self, event: WheelEvent) -> bool:
        """Zoom with Ctrl/Meta+wheel. Returns True if the event was consumed."""
        if not (event.ctrl or event.meta) or event.delta_y == 0:
            return False

        factor = ZOOM_OUT_FACTOR if event.delta_y > 0 else ZOOM_IN_FACTOR
        self.session.zoom_by(factor)
        self._notify()
        return True

    # ---- Keyboard ----
    def key(self, event: KeyEvent) -> bool:
        """Handle a shortcut. Returns True if the key was consumed."""
        key = event.key
        if event.ctrl or event.meta:
            if key.lower() != "z":
                return False
            changed = self.session.redo() if event.shift else self.session.undo()
            if changed:
                self._notify()
            return True

        if key == "[":
            self.session.shrink_brush()
        elif key == "]":
            self.session.grow_brush()
        elif key == "e":
            self.session.set_brush_mode(BRUSH_MODE_ERASE)
        elif key == "r":
            self.session.set_brush_mode(BRUSH_MODE_RESTORE)
        else:
            return False

        self._notify()
        return True
