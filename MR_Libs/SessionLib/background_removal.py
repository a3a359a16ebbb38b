"""
Background-removal seam for the editing session.

The initial foreground mask comes from an external segmentation model. The
session treats it as an opaque callable: given the original image, it
returns an image (or encoded image bytes) of the same size whose alpha
channel is the mask.

Classes:
    RembgRemover: Remover backed by the optional ``rembg`` package

Functions:
    run_background_removal: Call a remover and validate its output
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from PIL import Image

from MR_Libs.RasterLib.raster_io import decode_image
from MR_Libs.constants import DEFAULT_REMBG_MODEL

logger = logging.getLogger(__name__)

BackgroundRemover = Callable[[Image.Image], Union[Image.Image, bytes]]


@dataclass
class RembgRemover:
    """
    Background remover using rembg.

    rembg is an optional dependency (``pip install mask-refiner[segmentation]``);
    it is imported on first use, and a missing install surfaces as an
    ImportError from the call.

    Attributes:
        model_name: rembg model to load (e.g. 'isnet-general-use', 'u2net')
        alpha_matting: Refine the mask edge with alpha matting
    """
    model_name: str = DEFAULT_REMBG_MODEL
    alpha_matting: bool = False
    _session: Any = field(default=None, init=False, repr=False)

    def __call__(self, image: Image.Image) -> Image.Image:
        from rembg import new_session, remove

        if self._session is None:
            logger.info(f"Loading rembg model '{self.model_name}'")
            self._session = new_session(self.model_name)

        return remove(image, session=self._session, alpha_matting=self.alpha_matting)


def run_background_removal(remover: BackgroundRemover, original: Image.Image) -> Image.Image:
    """
    Run ``remover`` on a copy of ``original`` and decode its result.

    Args:
        remover: Callable producing the masked image
        original: Original RGBA image (not modified)

    Returns:
        RGBA result image with the same size as ``original``

    Raises:
        ValueError: If the result cannot be decoded or its size differs
        Exception: Anything raised by the remover itself propagates
    """
    result = decode_image(remover(original.copy()))
    if result.size != original.size:
        raise ValueError(
            f"Background removal returned size {result.size}, expected {original.size}"
        )
    return result
