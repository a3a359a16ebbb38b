"""
Editing session: owns every raster and all editing state for one image.

The session is the single owner of the original, edited and selection
rasters, the brush and view state and the undo/redo history. UI code talks
to it through methods only. Brush and view changes return the new frozen
state object.

The session is also the fail-soft boundary of the editor. Decode failures,
out-of-range history navigation, empty strokes and background-removal
errors are logged and leave the previous state in place; nothing raised by
a single stroke or decode reaches the caller.

Classes:
    EditorConfig: Tunable settings a session is built with
    EditingSession: The editing session
"""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from PIL import Image

from MR_Libs.RasterLib.layer_compositor import LayerCompositor
from MR_Libs.RasterLib.raster_io import decode_image, encode_png, new_blank_raster, save_image
from MR_Libs.RasterLib.raster_models import BrushState, Point, Size, ViewTransform, clamp
from MR_Libs.SelectionLib.selection_painter import clear_selection, paint_stroke
from MR_Libs.SelectionLib.smart_selection import SelectionResult, SmartSelectionResolver
from MR_Libs.SessionLib.background_removal import BackgroundRemover, run_background_removal
from MR_Libs.SessionLib.history_manager import HistoryManager
from MR_Libs.constants import (
    BACKGROUND_REMOVAL_ERROR,
    DEFAULT_COLOR_TOLERANCE,
    DEFAULT_MAX_WORKERS,
    GHOST_LAYER_OPACITY,
    MAX_HISTORY_DEPTH,
    MAX_ZOOM,
    MIN_ZOOM,
    PARALLEL_PIXEL_THRESHOLD,
    SELECTION_LAYER_OPACITY,
)

logger = logging.getLogger(__name__)


@dataclass
class EditorConfig:
    """Settings for an editing session.

    Attributes:
        tolerance: RGB distance below which a marked pixel is edited
        history_depth: Maximum number of history entries kept
        ghost_opacity: Opacity of the original shown behind the edit in restore mode
        selection_opacity: Opacity of the live stroke overlay
        parallel_threshold: Pixel count from which stroke resolution uses threads
        max_workers: Worker threads for stroke resolution
    """
    tolerance: float = DEFAULT_COLOR_TOLERANCE
    history_depth: int = MAX_HISTORY_DEPTH
    ghost_opacity: float = GHOST_LAYER_OPACITY
    selection_opacity: float = SELECTION_LAYER_OPACITY
    parallel_threshold: int = PARALLEL_PIXEL_THRESHOLD
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self):
        """Validate settings."""
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")

        if self.history_depth < 1:
            raise ValueError(f"history_depth must be at least 1, got {self.history_depth}")

        for name in ("ghost_opacity", "selection_opacity"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be 0.0-1.0, got {value}")

        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorConfig":
        """Create from dictionary, ignoring unknown keys."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


class EditingSession:
    """
    State and operations of one mask-editing session.

    Typical flow:
        >>> session = EditingSession()
        >>> session.load_original(Image.open("photo.jpg"))
        >>> session.remove_background(RembgRemover())
        >>> session.begin_stroke((40, 40))
        >>> session.paint((55, 48))
        >>> session.end_stroke()          # resolves and commits to history
        >>> session.undo()
        >>> session.export_image().save("removed-background.png")
    """

    def __init__(self, config: Optional[EditorConfig] = None) -> None:
        self.config = config if config is not None else EditorConfig()
        self.compositor = LayerCompositor(self.config.ghost_opacity, self.config.selection_opacity)
        self.resolver = SmartSelectionResolver(
            tolerance=self.config.tolerance,
            parallel_threshold=self.config.parallel_threshold,
            max_workers=self.config.max_workers,
        )
        self.history = HistoryManager(self.config.history_depth)

        self.brush = BrushState()
        self.view = ViewTransform()

        self.original: Optional[Image.Image] = None
        self.edited: Optional[Image.Image] = None
        self.selection: Optional[Image.Image] = None
        self.is_stroke_active = False

        self.is_processing = False
        self.processing_progress = 0
        self.error: Optional[str] = None

    # ---- Image lifecycle ----
    @property
    def has_image(self) -> bool:
        return self.original is not None and self.edited is not None

    @property
    def raster_size(self) -> Optional[Size]:
        return self.original.size if self.original is not None else None

    def load_original(self, source: Any) -> bool:
        """
        Start editing a new image.

        The edited raster starts as a copy of the original and becomes the
        first history entry. The selection buffer is cleared.

        Returns:
            True if loaded, False if the source could not be decoded
            (the previous image stays active)
        """
        try:
            image = decode_image(source)
        except (ValueError, TypeError, OSError) as exc:
            logger.warning(f"Could not load original image: {exc}")
            return False

        self.original = image
        self.edited = image.copy()
        self.selection = new_blank_raster(image.size)
        self.is_stroke_active = False
        self.error = None
        self.processing_progress = 0
        self.history.reset(self.edited)
        logger.info(f"Loaded original image {image.size[0]}x{image.size[1]}")
        return True

    def apply_mask_result(self, source: Any) -> bool:
        """
        Install a segmentation result as the edited raster and history root.

        Returns:
            True if applied, False if no image is loaded, the result cannot
            be decoded, or its size differs from the original
        """
        if self.original is None:
            logger.warning("Mask result received before an original image was loaded")
            return False

        try:
            result = decode_image(source)
        except (ValueError, TypeError, OSError) as exc:
            logger.warning(f"Could not decode mask result: {exc}")
            return False

        if result.size != self.original.size:
            logger.warning(
                f"Mask result size {result.size} does not match original {self.original.size}"
            )
            return False

        self.edited = result
        self.history.reset(result)
        return True

    def remove_background(self, remover: BackgroundRemover) -> bool:
        """
        Produce the initial mask with an external background remover.

        On failure the error message is stored in ``error`` and the session
        keeps its current edited raster.
        """
        if self.original is None:
            logger.warning("No original image loaded, skipping background removal")
            return False

        self.is_processing = True
        self.processing_progress = 0
        self.error = None
        try:
            result = run_background_removal(remover, self.original)
        except Exception as exc:
            logger.warning(f"Background removal failed: {exc}")
            self.error = BACKGROUND_REMOVAL_ERROR
            return False
        finally:
            self.is_processing = False

        self.processing_progress = 100
        applied = self.apply_mask_result(result)
        if applied:
            logger.info("Background removed")
        return applied

    def reset(self) -> None:
        """Drop the current image and return to the initial state."""
        self.original = None
        self.edited = None
        self.selection = None
        self.is_stroke_active = False
        self.is_processing = False
        self.processing_progress = 0
        self.error = None
        self.view = ViewTransform()
        self.history.clear()
        logger.debug("Session reset")

    # ---- Brush state ----
    def set_brush_size(self, size: int) -> BrushState:
        self.brush = self.brush.with_size(size)
        return self.brush

    def grow_brush(self) -> BrushState:
        self.brush = self.brush.grown()
        return self.brush

    def shrink_brush(self) -> BrushState:
        self.brush = self.brush.shrunk()
        return self.brush

    def set_brush_mode(self, mode: str) -> BrushState:
        self.brush = self.brush.with_mode(mode)
        return self.brush

    # ---- View state ----
    def set_zoom(self, zoom: float) -> ViewTransform:
        self.view = self.view.with_zoom(zoom)
        return self.view

    def zoom_by(self, factor: float) -> ViewTransform:
        self.view = self.view.zoomed(factor)
        return self.view

    def step_zoom(self, delta: float) -> ViewTransform:
        """Additive zoom change used by the zoom buttons."""
        self.view = self.view.with_zoom(clamp(self.view.zoom + delta, MIN_ZOOM, MAX_ZOOM))
        return self.view

    def pan_by(self, dx: float, dy: float) -> ViewTransform:
        self.view = self.view.panned(dx, dy)
        return self.view

    def reset_view(self) -> ViewTransform:
        self.view = ViewTransform()
        return self.view

    # ---- Strokes ----
    def begin_stroke(self, raster_point: Point) -> bool:
        """Start a stroke and paint its first disc."""
        if not self.has_image:
            return False

        self.is_stroke_active = True
        self.paint(raster_point)
        return True

    def paint(self, raster_point: Point) -> None:
        if not self.is_stroke_active or self.selection is None:
            return
        paint_stroke(self.selection, raster_point, self.brush.size, self.brush.mode)

    def end_stroke(self) -> Optional[SelectionResult]:
        """
        Finish the stroke: resolve it with the current brush mode and commit.

        Returns:
            The SelectionResult, or None when no stroke was active, nothing
            was marked, or resolution failed (no history entry in those cases)
        """
        if not self.is_stroke_active:
            return None

        self.is_stroke_active = False
        if not self.has_image or self.selection is None:
            return None

        try:
            result = self.resolver.resolve(
                self.original, self.edited, self.selection, self.brush.mode
            )
        except (ValueError, TypeError) as exc:
            logger.warning(f"Stroke could not be resolved: {exc}")
            clear_selection(self.selection)
            return None

        if result is None:
            return None

        self.history.commit(self.edited)
        return result

    # ---- History ----
    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def undo(self) -> bool:
        """Restore the previous snapshot. Returns False when nothing changed."""
        return self._navigate(-1)

    def redo(self) -> bool:
        """Restore the next snapshot. Returns False when nothing changed."""
        return self._navigate(1)

    def _navigate(self, offset: int) -> bool:
        """
        Install the snapshot ``offset`` steps away, then move the history index.

        The index only moves once the snapshot has decoded and matched the
        original's size, so a failed step leaves history and raster in sync.
        """
        if self.original is None:
            return False

        try:
            image = self.history.peek(offset)
        except ValueError as exc:
            logger.warning(f"History snapshot could not be decoded: {exc}")
            return False

        if image is None:
            return False

        if image.size != self.original.size:
            logger.warning(f"Snapshot size {image.size} does not match original {self.original.size}")
            return False

        self.history.step(offset)
        self.edited = image
        return True

    # ---- Rendering and export ----
    def render(self) -> Optional[Image.Image]:
        """Composite the visible frame, or None if no image is loaded."""
        if not self.has_image:
            return None
        return self.compositor.render(
            self.original, self.edited, self.selection, self.brush.mode, self.is_stroke_active
        )

    def export_image(self) -> Optional[Image.Image]:
        """Composite of the ghost and edited layers, without the live selection."""
        if not self.has_image:
            return None
        return self.compositor.render_export(self.original, self.edited, self.brush.mode)

    def export_png(self) -> Optional[bytes]:
        image = self.export_image()
        if image is None:
            return None
        return encode_png(image)

    def save(self, output_path: Union[str, Path]) -> Path:
        """
        Write the exported image to disk as PNG.

        Raises:
            ValueError: If no image is loaded
            OSError: If the target directory is missing
        """
        image = self.export_image()
        if image is None:
            raise ValueError("No image loaded, nothing to save")
        return save_image(image, output_path)
