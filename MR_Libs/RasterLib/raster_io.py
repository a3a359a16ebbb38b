"""
Raster decode/encode helpers for Mask Refiner.

Every raster handled by the editor is a Pillow image in RGBA mode. This
module is the single place where bytes, paths and file objects become
images and images become PNG bytes again.

Functions:
    decode_image: Decode bytes, a path, a file object or an image into RGBA
    encode_png: Serialize an image to PNG bytes
    load_image_file: Load an uploaded image file with format and size checks
    save_image: Write an image to disk as PNG
    new_blank_raster: Create a fully transparent RGBA raster
    is_supported_upload: Check a path against the accepted upload formats
"""

from io import BytesIO
from pathlib import Path
from typing import Any, Union

from PIL import Image, UnidentifiedImageError

from MR_Libs.RasterLib.raster_models import Size
from MR_Libs.constants import (
    DEFAULT_OUTPUT_FORMAT,
    MAX_UPLOAD_BYTES,
    SUPPORTED_UPLOAD_FORMATS,
)

ImageSource = Union[bytes, bytearray, str, Path, Any]


def decode_image(source: ImageSource) -> Image.Image:
    """
    Decode an image source into a detached RGBA image.

    Args:
        source: Encoded bytes, a filesystem path, a binary file object,
                or an already-decoded PIL Image

    Returns:
        A new RGBA PIL Image with its pixel data loaded

    Raises:
        ValueError: If the data is not a decodable image
        FileNotFoundError: If a path is given and does not exist
    """
    if isinstance(source, Image.Image):
        return source.convert("RGBA")

    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise ValueError("Cannot decode an empty image buffer")
        stream: Any = BytesIO(bytes(source))
    elif isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_file():
            raise FileNotFoundError(f"Image file not found: {path}")
        stream = path
    elif hasattr(source, "read"):
        stream = source
    else:
        raise TypeError(f"Unsupported image source: {type(source)}")

    try:
        with Image.open(stream) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValueError(f"Data is not a decodable image: {exc}") from exc


def encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def is_supported_upload(file_path: Path) -> bool:
    return Path(file_path).suffix.lower() in SUPPORTED_UPLOAD_FORMATS


def load_image_file(file_path: Union[str, Path], max_bytes: int = MAX_UPLOAD_BYTES) -> Image.Image:
    """
    Load an uploaded image file.

    Args:
        file_path: Path to a PNG, JPEG or WEBP file
        max_bytes: Largest accepted file size in bytes

    Returns:
        The decoded RGBA image

    Raises:
        FileNotFoundError: If the path does not exist or is not a file
        ValueError: If the format is not accepted, the file is too large,
                    or the content cannot be decoded
    """
    path = Path(file_path)
    if not path.exists() or not path.is_file():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not is_supported_upload(path):
        supported = ", ".join(sorted(SUPPORTED_UPLOAD_FORMATS))
        raise ValueError(f"Unsupported image format '{path.suffix}'. Supported: {supported}")

    size_bytes = path.stat().st_size
    if size_bytes > max_bytes:
        raise ValueError(f"Image file is too large: {size_bytes} bytes (limit {max_bytes})")

    return decode_image(path)


def save_image(image: Image.Image, output_path: Union[str, Path]) -> Path:
    """
    Save an image to disk in PNG format.

    Raises:
        OSError: If the parent directory does not exist or is not a directory
    """
    path = Path(output_path)
    parent = path.parent
    if not parent.exists():
        raise OSError(f"Output directory does not exist: {parent}")

    if not parent.is_dir():
        raise OSError(f"Output path is not a directory: {parent}")

    image.save(path, format=DEFAULT_OUTPUT_FORMAT)
    return path


def new_blank_raster(size: Size) -> Image.Image:
    return Image.new("RGBA", size, (0, 0, 0, 0))
