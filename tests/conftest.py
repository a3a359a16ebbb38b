"""
Pytest configuration and shared fixtures for Mask Refiner tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import pytest
from PIL import Image

from MR_Libs.RasterLib.raster_io import new_blank_raster
from MR_Libs.SessionLib.editing_session import EditingSession


@pytest.fixture
def original_image():
    """
    Provide a uniform 100x100 opaque image.

    Returns:
        RGBA PIL Image filled with (120, 80, 40, 255)
    """
    return Image.new("RGBA", (100, 100), (120, 80, 40, 255))


@pytest.fixture
def blank_selection():
    """Provide an empty 100x100 selection buffer."""
    return new_blank_raster((100, 100))


@pytest.fixture
def split_image():
    """
    Provide a 100x100 image: black left half, white right half.

    Returns:
        RGBA PIL Image with columns 0-49 black and 50-99 white
    """
    image = Image.new("RGBA", (100, 100), (255, 255, 255, 255))
    image.paste((0, 0, 0, 255), (0, 0, 50, 100))
    return image


@pytest.fixture
def loaded_session(original_image):
    """Provide an EditingSession with ``original_image`` loaded."""
    session = EditingSession()
    assert session.load_original(original_image)
    return session
