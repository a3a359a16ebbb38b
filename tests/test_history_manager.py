"""
Tests for the bounded undo/redo history.

Tests cover:
- Empty history behavior
- FIFO eviction at the depth limit
- Linear redo invalidation
- Snapshot fidelity and isolation
- Corrupted snapshots
"""

import unittest
from PIL import Image

from MR_Libs.SessionLib.history_manager import HistoryEntry, HistoryManager


def solid(value):
    return Image.new("RGBA", (4, 4), (value, 0, 0, 255))


class TestEmptyHistory(unittest.TestCase):

    def test_empty_state(self):
        history = HistoryManager()
        self.assertEqual(len(history), 0)
        self.assertEqual(history.index, -1)
        self.assertFalse(history.can_undo)
        self.assertFalse(history.can_redo)
        self.assertIsNone(history.undo())
        self.assertIsNone(history.redo())
        self.assertIsNone(history.current())

    def test_single_entry_cannot_undo(self):
        history = HistoryManager()
        history.commit(solid(1))
        self.assertEqual(history.index, 0)
        self.assertIsNone(history.undo())
        self.assertEqual(history.index, 0)

    def test_invalid_depth(self):
        with self.assertRaises(ValueError):
            HistoryManager(max_depth=0)


class TestHistoryDepth(unittest.TestCase):
    """Test FIFO eviction."""

    def test_eleven_commits_keep_ten(self):
        history = HistoryManager()
        for value in range(11):
            history.commit(solid(value))

        self.assertEqual(len(history), 10)
        self.assertEqual(history.index, 9)
        self.assertEqual(history.current().getpixel((0, 0))[0], 10)

    def test_nine_undos_then_stop(self):
        history = HistoryManager()
        for value in range(11):
            history.commit(solid(value))

        for _ in range(9):
            self.assertIsNotNone(history.undo())

        self.assertEqual(history.index, 0)
        self.assertIsNone(history.undo())
        # oldest surviving entry is the second commit
        self.assertEqual(history.current().getpixel((0, 0))[0], 1)

    def test_custom_depth(self):
        history = HistoryManager(max_depth=3)
        for value in range(5):
            history.commit(solid(value))
        self.assertEqual(len(history), 3)
        self.assertEqual(history.index, 2)


class TestUndoRedo(unittest.TestCase):
    """Test navigation and linear redo."""

    def setUp(self):
        self.history = HistoryManager()
        for value in (10, 20, 30):
            self.history.commit(solid(value))

    def test_undo_returns_previous_snapshot(self):
        image = self.history.undo()
        self.assertEqual(image.getpixel((0, 0)), (20, 0, 0, 255))
        self.assertEqual(self.history.index, 1)

    def test_redo_returns_next_snapshot(self):
        self.history.undo()
        image = self.history.redo()
        self.assertEqual(image.getpixel((0, 0)), (30, 0, 0, 255))
        self.assertFalse(self.history.can_redo)

    def test_redo_at_end_is_noop(self):
        self.assertIsNone(self.history.redo())
        self.assertEqual(self.history.index, 2)

    def test_commit_after_undo_drops_redo(self):
        self.history.undo()
        self.history.undo()
        self.history.commit(solid(99))

        self.assertEqual(len(self.history), 2)
        self.assertFalse(self.history.can_redo)
        self.assertEqual(self.history.current().getpixel((0, 0))[0], 99)
        self.assertEqual(self.history.undo().getpixel((0, 0))[0], 10)

    def test_reset_keeps_one_entry(self):
        self.history.reset(solid(5))
        self.assertEqual(len(self.history), 1)
        self.assertEqual(self.history.index, 0)
        self.assertFalse(self.history.can_undo)

    def test_clear(self):
        self.history.clear()
        self.assertEqual(len(self.history), 0)
        self.assertEqual(self.history.index, -1)


class TestSnapshotFidelity(unittest.TestCase):
    """Snapshots are exact and isolated from callers."""

    def test_undo_restores_exact_pixels(self):
        first = Image.new("RGBA", (16, 9), (0, 0, 0, 0))
        first.paste((12, 34, 56, 78), (2, 2, 10, 7))
        second = first.copy()
        second.paste((0, 0, 0, 0), (0, 0, 16, 9))

        history = HistoryManager()
        history.commit(first)
        history.commit(second)

        self.assertEqual(history.undo().tobytes(), first.tobytes())

    def test_later_mutation_does_not_leak_into_history(self):
        image = solid(1)
        history = HistoryManager()
        history.commit(image)
        image.paste((200, 0, 0, 255), (0, 0, 4, 4))
        self.assertEqual(history.current().getpixel((0, 0))[0], 1)

    def test_returned_images_are_copies(self):
        history = HistoryManager()
        history.commit(solid(1))
        history.commit(solid(2))

        restored = history.undo()
        restored.paste((250, 0, 0, 255), (0, 0, 4, 4))

        self.assertEqual(history.current().getpixel((0, 0))[0], 1)

    def test_entry_decodes_snapshot_bytes(self):
        entry = HistoryEntry.from_image(solid(7))
        fresh = HistoryEntry(snapshot=entry.snapshot)
        self.assertEqual(fresh.to_image().tobytes(), solid(7).tobytes())

    def test_corrupted_snapshot(self):
        entry = HistoryEntry(snapshot=b"not a png")
        with self.assertRaises(ValueError):
            entry.to_image()

    def test_undo_into_corrupted_entry_keeps_index(self):
        history = HistoryManager()
        history.commit(solid(1))
        history.commit(solid(2))
        history._entries[0] = HistoryEntry(snapshot=b"not a png")

        with self.assertRaises(ValueError):
            history.undo()

        self.assertEqual(history.index, 1)
        self.assertFalse(history.can_redo)

    def test_peek_does_not_move(self):
        history = HistoryManager()
        history.commit(solid(1))
        history.commit(solid(2))

        self.assertEqual(history.peek(-1).getpixel((0, 0))[0], 1)
        self.assertIsNone(history.peek(1))
        self.assertEqual(history.index, 1)


if __name__ == "__main__":
    unittest.main()
