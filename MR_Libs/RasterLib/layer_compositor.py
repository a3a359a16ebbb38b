"""
Layered render pipeline for the mask editor canvas.

Composites up to three layers onto a transparent canvas, always in the
same order:

    1. Ghost layer: the original image at reduced opacity (restore mode only)
    2. Edited layer: the current mask/image state at full opacity
    3. Selection layer: the live stroke at reduced opacity (while painting)

Transparent pixels in the edited layer let the ghost show through, which
previews what a restore stroke can bring back.

Example:
    >>> original = Image.new("RGBA", (100, 100), "red")
    >>> edited = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    >>> selection = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    >>> frame = LayerCompositor().render(original, edited, selection, "restore", False)
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from PIL import Image

from MR_Libs.RasterLib.raster_models import BrushMode
from MR_Libs.constants import (
    BRUSH_MODE_RESTORE,
    GHOST_LAYER_OPACITY,
    SELECTION_LAYER_OPACITY,
)


@dataclass
class LayerInfo:
    """A single layer in the composition.

    Attributes:
        image: PIL Image for this layer
        opacity: How much this layer contributes (0.0-1.0)
        name: Label used in error messages
    """
    image: Any
    opacity: float = 1.0
    name: str = "layer"

    def __post_init__(self):
        if not hasattr(self.image, "mode"):
            raise TypeError(f"Expected PIL Image for {self.name}, got {type(self.image)}")

        if not (0.0 <= self.opacity <= 1.0):
            raise ValueError(f"opacity must be 0.0-1.0, got {self.opacity}")


class LayerCompositor:
    """Renders the ghost, edited and selection layers into one frame."""

    def __init__(
        self,
        ghost_opacity: float = GHOST_LAYER_OPACITY,
        selection_opacity: float = SELECTION_LAYER_OPACITY,
    ) -> None:
        self.ghost_opacity = float(ghost_opacity)
        self.selection_opacity = float(selection_opacity)

    def build_layers(
        self,
        original: Any,
        edited: Any,
        selection: Optional[Any],
        brush_mode: BrushMode,
        is_stroke_active: bool,
    ) -> List[LayerInfo]:
        """
        Decide which layers are visible for the given editing state.

        Returns:
            LayerInfo objects in bottom-to-top order
        """
        layers: List[LayerInfo] = []
        if brush_mode == BRUSH_MODE_RESTORE:
            layers.append(LayerInfo(original, self.ghost_opacity, "ghost"))

        layers.append(LayerInfo(edited, 1.0, "edited"))

        if is_stroke_active and selection is not None:
            layers.append(LayerInfo(selection, self.selection_opacity, "selection"))

        return layers

    def render(
        self,
        original: Any,
        edited: Any,
        selection: Optional[Any],
        brush_mode: BrushMode,
        is_stroke_active: bool,
    ) -> Image.Image:
        """
        Render the visible frame.

        Inputs are never modified, so repeated calls with the same inputs
        produce identical frames.

        Args:
            original: Pristine original image
            edited: Current edited image
            selection: Selection buffer (may be None when no stroke exists)
            brush_mode: Current brush mode ("erase" or "restore")
            is_stroke_active: Whether a paint stroke is in progress

        Returns:
            Composited RGBA PIL Image the size of ``edited``

        Raises:
            TypeError: If a layer is not a PIL Image
            ValueError: If layer sizes differ
        """
        layers = self.build_layers(original, edited, selection, brush_mode, is_stroke_active)
        return self.composite_layers(edited.size, layers)

    def render_export(self, original: Any, edited: Any, brush_mode: BrushMode) -> Image.Image:
        """Render layers 1-2 only, without the transient selection layer."""
        return self.render(original, edited, None, brush_mode, False)

    @staticmethod
    def composite_layers(size: Any, layers: List[LayerInfo]) -> Image.Image:
        """
        Alpha-composite layers bottom-to-top onto a transparent canvas.

        Raises:
            ValueError: If any layer size differs from ``size``
        """
        result = Image.new("RGBA", tuple(size), (0, 0, 0, 0))

        for layer in layers:
            overlay = layer.image.convert("RGBA")
            if overlay.size != result.size:
                raise ValueError(
                    f"Layer '{layer.name}' size {overlay.size} does not match "
                    f"canvas size {result.size}"
                )

            if layer.opacity < 1.0:
                overlay = LayerCompositor._apply_opacity(overlay, layer.opacity)

            result = Image.alpha_composite(result, overlay)

        return result

    @staticmethod
    def _apply_opacity(image: Any, opacity: float) -> Any:
        """
        Scale an RGBA image's alpha channel by a uniform opacity.

        Args:
            image: RGBA PIL Image
            opacity: Opacity factor (0.0=invisible, 1.0=unchanged)

        Returns:
            New RGBA PIL Image with alpha scaled
        """
        r, g, b, a = image.split()
        lookup = [int(round(value * opacity)) for value in range(256)]
        return Image.merge("RGBA", (r, g, b, a.point(lookup)))
