"""
Tests for the layered render pipeline.

Tests cover:
- Layer visibility per brush mode and stroke state
- Ghost and selection opacity
- Export rendering without the selection layer
- Input immutability and size validation
"""

import unittest
from PIL import Image

from MR_Libs.RasterLib.layer_compositor import LayerCompositor, LayerInfo


class TestLayerSelection(unittest.TestCase):
    """Test which layers are built for each editing state."""

    def setUp(self):
        self.compositor = LayerCompositor()
        self.original = Image.new("RGBA", (10, 10), (255, 0, 0, 255))
        self.edited = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
        self.selection = Image.new("RGBA", (10, 10), (0, 0, 0, 0))

    def _names(self, mode, active, selection="default"):
        selection = self.selection if selection == "default" else selection
        layers = self.compositor.build_layers(self.original, self.edited, selection, mode, active)
        return [layer.name for layer in layers]

    def test_erase_idle(self):
        self.assertEqual(self._names("erase", False), ["edited"])

    def test_restore_idle(self):
        self.assertEqual(self._names("restore", False), ["ghost", "edited"])

    def test_restore_painting(self):
        self.assertEqual(self._names("restore", True), ["ghost", "edited", "selection"])

    def test_erase_painting(self):
        self.assertEqual(self._names("erase", True), ["edited", "selection"])

    def test_no_selection_buffer(self):
        self.assertEqual(self._names("erase", True, selection=None), ["edited"])


class TestRender(unittest.TestCase):
    """Test composited frames."""

    def setUp(self):
        self.compositor = LayerCompositor()
        self.original = Image.new("RGBA", (10, 10), (255, 0, 0, 255))
        self.transparent = Image.new("RGBA", (10, 10), (0, 0, 0, 0))

    def test_opaque_edited_shown_as_is(self):
        edited = Image.new("RGBA", (10, 10), (0, 0, 255, 255))
        frame = self.compositor.render(self.original, edited, None, "erase", False)
        self.assertEqual(frame.getpixel((5, 5)), (0, 0, 255, 255))

    def test_erase_mode_hides_ghost(self):
        frame = self.compositor.render(self.original, self.transparent, None, "erase", False)
        self.assertEqual(frame.getpixel((5, 5))[3], 0)

    def test_restore_mode_shows_ghost_at_reduced_opacity(self):
        frame = self.compositor.render(self.original, self.transparent, None, "restore", False)
        r, g, b, a = frame.getpixel((5, 5))
        self.assertAlmostEqual(a, round(255 * 0.3), delta=1)
        self.assertEqual((g, b), (0, 0))
        self.assertGreater(r, 200)

    def test_opaque_edited_covers_ghost(self):
        edited = Image.new("RGBA", (10, 10), (0, 255, 0, 255))
        frame = self.compositor.render(self.original, edited, None, "restore", False)
        self.assertEqual(frame.getpixel((5, 5)), (0, 255, 0, 255))

    def test_selection_tints_frame_while_painting(self):
        edited = Image.new("RGBA", (10, 10), (255, 255, 255, 255))
        selection = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
        selection.paste((239, 68, 68, 255), (0, 0, 5, 10))

        frame = self.compositor.render(self.original, edited, selection, "erase", True)
        r, g, b, a = frame.getpixel((2, 5))
        self.assertEqual(a, 255)
        self.assertLess(g, 255)
        self.assertGreater(g, 68)
        self.assertEqual(frame.getpixel((8, 5)), (255, 255, 255, 255))

    def test_selection_hidden_when_not_painting(self):
        edited = Image.new("RGBA", (10, 10), (255, 255, 255, 255))
        selection = Image.new("RGBA", (10, 10), (239, 68, 68, 255))
        frame = self.compositor.render(self.original, edited, selection, "erase", False)
        self.assertEqual(frame.getpixel((2, 5)), (255, 255, 255, 255))

    def test_render_export_ignores_selection(self):
        edited = Image.new("RGBA", (10, 10), (255, 255, 255, 255))
        frame = self.compositor.render_export(self.original, edited, "erase")
        self.assertEqual(frame.tobytes(), edited.tobytes())

    def test_inputs_not_modified(self):
        edited = Image.new("RGBA", (10, 10), (10, 20, 30, 128))
        selection = Image.new("RGBA", (10, 10), (34, 197, 94, 255))
        before = (self.original.tobytes(), edited.tobytes(), selection.tobytes())

        first = self.compositor.render(self.original, edited, selection, "restore", True)
        second = self.compositor.render(self.original, edited, selection, "restore", True)

        self.assertEqual(before, (self.original.tobytes(), edited.tobytes(), selection.tobytes()))
        self.assertEqual(first.tobytes(), second.tobytes())

    def test_size_mismatch(self):
        edited = Image.new("RGBA", (20, 10), (0, 0, 0, 0))
        with self.assertRaises(ValueError):
            self.compositor.render(self.original, edited, None, "restore", False)

    def test_custom_ghost_opacity(self):
        compositor = LayerCompositor(ghost_opacity=1.0)
        frame = compositor.render(self.original, self.transparent, None, "restore", False)
        self.assertEqual(frame.getpixel((5, 5)), (255, 0, 0, 255))


class TestLayerInfo(unittest.TestCase):
    """Test layer validation."""

    def test_invalid_opacity(self):
        with self.assertRaises(ValueError):
            LayerInfo(Image.new("RGBA", (2, 2)), opacity=1.5)

    def test_not_an_image(self):
        with self.assertRaises(TypeError):
            LayerInfo("not an image")


if __name__ == "__main__":
    unittest.main()
