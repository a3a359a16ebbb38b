"""
Tests for the pointer and keyboard state machine.

Tests cover:
- IDLE / PANNING / PAINTING transitions
- Stroke resolution on release and on pointer leave
- Wheel zoom with modifiers and clamping
- Keyboard shortcuts
"""

import unittest
from PIL import Image

from MR_Libs.RasterLib.raster_models import Rect
from MR_Libs.SessionLib.editing_session import EditingSession
from MR_Libs.SessionLib.input_controller import (
    BUTTON_LEFT,
    BUTTON_MIDDLE,
    BUTTON_RIGHT,
    InputController,
    InputState,
    KeyEvent,
    PointerEvent,
    WheelEvent,
)


class ControllerTestCase(unittest.TestCase):
    """Session with a 100x100 image shown at a fixed display rectangle."""

    display_rect = Rect(0, 0, 100, 100)

    def setUp(self):
        self.session = EditingSession()
        self.session.load_original(Image.new("RGBA", (100, 100), (120, 80, 40, 255)))
        self.changes = 0
        self.controller = InputController(
            self.session, lambda: self.display_rect, on_change=self._changed
        )

    def _changed(self):
        self.changes += 1

    def alpha_at(self, x, y):
        return self.session.edited.getpixel((x, y))[3]


class TestPainting(ControllerTestCase):

    def test_left_press_starts_painting(self):
        state = self.controller.press(PointerEvent(50, 50))
        self.assertEqual(state, InputState.PAINTING)
        self.assertTrue(self.session.is_stroke_active)
        self.assertGreater(self.changes, 0)

    def test_release_resolves_and_commits(self):
        self.controller.press(PointerEvent(50, 50))
        self.controller.move(PointerEvent(60, 50))
        self.controller.release()

        self.assertEqual(self.controller.state, InputState.IDLE)
        self.assertEqual(self.alpha_at(50, 50), 0)
        self.assertEqual(self.alpha_at(60, 50), 0)
        self.assertEqual(len(self.session.history), 2)

    def test_other_button_release_keeps_stroke_open(self):
        self.controller.press(PointerEvent(50, 50))
        self.controller.release(BUTTON_RIGHT)

        self.assertEqual(self.controller.state, InputState.PAINTING)
        self.assertTrue(self.session.is_stroke_active)
        self.assertEqual(len(self.session.history), 1)

        self.controller.release(BUTTON_LEFT)
        self.assertEqual(self.controller.state, InputState.IDLE)
        self.assertEqual(len(self.session.history), 2)

    def test_leave_while_painting_resolves(self):
        self.controller.press(PointerEvent(50, 50))
        self.controller.leave()

        self.assertEqual(self.controller.state, InputState.IDLE)
        self.assertIsNone(self.controller.cursor_position)
        self.assertEqual(self.alpha_at(50, 50), 0)
        self.assertEqual(len(self.session.history), 2)

    def test_press_while_painting_ignored(self):
        self.controller.press(PointerEvent(50, 50))
        state = self.controller.press(PointerEvent(10, 10, button=BUTTON_MIDDLE))
        self.assertEqual(state, InputState.PAINTING)

    def test_move_while_idle_only_tracks_cursor(self):
        self.controller.move(PointerEvent(30, 40))
        self.assertEqual(self.controller.cursor_position, (30, 40))
        self.assertEqual(self.controller.cursor_raster_position(), (30, 40))
        self.assertEqual(self.alpha_at(30, 40), 255)

    def test_scaled_display_rect(self):
        self.display_rect = Rect(0, 0, 50, 50)
        self.controller.press(PointerEvent(25, 25))
        self.controller.release()
        self.assertEqual(self.alpha_at(50, 50), 0)

    def test_right_button_ignored(self):
        state = self.controller.press(PointerEvent(50, 50, button=BUTTON_RIGHT))
        self.assertEqual(state, InputState.IDLE)

    def test_no_image_does_not_paint(self):
        controller = InputController(EditingSession(), lambda: self.display_rect)
        self.assertEqual(controller.press(PointerEvent(50, 50)), InputState.IDLE)

    def test_hidden_canvas_does_not_paint(self):
        controller = InputController(self.session, lambda: None)
        self.assertIsNone(controller.to_raster_point((10, 10)))
        self.assertEqual(controller.press(PointerEvent(50, 50)), InputState.IDLE)


class TestPanning(ControllerTestCase):

    def test_middle_button_pans(self):
        self.assertEqual(
            self.controller.press(PointerEvent(20, 20, button=BUTTON_MIDDLE)),
            InputState.PANNING,
        )
        self.controller.move(PointerEvent(30, 25))
        self.controller.move(PointerEvent(32, 25))

        self.assertEqual(self.session.view.pan, (12.0, 5.0))
        self.controller.release()
        self.assertEqual(self.controller.state, InputState.IDLE)

    def test_left_release_does_not_end_middle_pan(self):
        self.controller.press(PointerEvent(20, 20, button=BUTTON_MIDDLE))
        self.controller.release(BUTTON_LEFT)
        self.assertEqual(self.controller.state, InputState.PANNING)

        self.controller.release(BUTTON_MIDDLE)
        self.assertEqual(self.controller.state, InputState.IDLE)

    def test_alt_left_pans(self):
        state = self.controller.press(PointerEvent(20, 20, button=BUTTON_LEFT, alt=True))
        self.assertEqual(state, InputState.PANNING)
        self.assertFalse(self.session.is_stroke_active)

    def test_panning_does_not_edit(self):
        self.controller.press(PointerEvent(50, 50, button=BUTTON_MIDDLE))
        self.controller.move(PointerEvent(60, 60))
        self.controller.release()
        self.assertEqual(len(self.session.history), 1)
        self.assertEqual(self.alpha_at(50, 50), 255)

    def test_leave_ends_panning(self):
        self.controller.press(PointerEvent(50, 50, button=BUTTON_MIDDLE))
        self.controller.leave()
        self.controller.move(PointerEvent(90, 90))
        self.assertEqual(self.controller.state, InputState.IDLE)
        self.assertEqual(self.session.view.pan, (0.0, 0.0))


class TestWheel(ControllerTestCase):

    def test_wheel_without_modifier_ignored(self):
        self.assertFalse(self.controller.wheel(WheelEvent(delta_y=-100)))
        self.assertEqual(self.session.view.zoom, 1.0)

    def test_ctrl_wheel_up_zooms_in(self):
        self.assertTrue(self.controller.wheel(WheelEvent(delta_y=-100, ctrl=True)))
        self.assertAlmostEqual(self.session.view.zoom, 1.1)

    def test_meta_wheel_down_zooms_out(self):
        self.assertTrue(self.controller.wheel(WheelEvent(delta_y=100, meta=True)))
        self.assertAlmostEqual(self.session.view.zoom, 0.9)

    def test_zoom_out_clamped(self):
        for _ in range(100):
            self.controller.wheel(WheelEvent(delta_y=100, ctrl=True))
        self.assertEqual(self.session.view.zoom, 0.1)

    def test_zoom_in_clamped(self):
        for _ in range(100):
            self.controller.wheel(WheelEvent(delta_y=-100, ctrl=True))
        self.assertEqual(self.session.view.zoom, 5.0)

    def test_wheel_keeps_state(self):
        self.controller.press(PointerEvent(50, 50))
        self.controller.wheel(WheelEvent(delta_y=-100, ctrl=True))
        self.assertEqual(self.controller.state, InputState.PAINTING)


class TestKeys(ControllerTestCase):

    def test_bracket_keys_resize_brush(self):
        self.assertTrue(self.controller.key(KeyEvent("]")))
        self.assertEqual(self.session.brush.size, 60)
        self.controller.key(KeyEvent("["))
        self.controller.key(KeyEvent("["))
        self.assertEqual(self.session.brush.size, 40)

    def test_mode_keys(self):
        self.controller.key(KeyEvent("r"))
        self.assertEqual(self.session.brush.mode, "restore")
        self.controller.key(KeyEvent("e"))
        self.assertEqual(self.session.brush.mode, "erase")

    def test_undo_and_redo_shortcuts(self):
        self.controller.press(PointerEvent(50, 50))
        self.controller.release()

        self.assertTrue(self.controller.key(KeyEvent("z", ctrl=True)))
        self.assertEqual(self.alpha_at(50, 50), 255)

        self.assertTrue(self.controller.key(KeyEvent("Z", meta=True, shift=True)))
        self.assertEqual(self.alpha_at(50, 50), 0)

    def test_undo_with_empty_history_consumed(self):
        self.assertTrue(self.controller.key(KeyEvent("z", ctrl=True)))
        self.assertEqual(len(self.session.history), 1)

    def test_unhandled_keys(self):
        self.assertFalse(self.controller.key(KeyEvent("x")))
        self.assertFalse(self.controller.key(KeyEvent("a", ctrl=True)))
        self.assertFalse(self.controller.key(KeyEvent("e", ctrl=True)))


if __name__ == "__main__":
    unittest.main()
