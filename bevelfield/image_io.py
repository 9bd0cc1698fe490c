"""Decoding and encoding collaborators (Pillow).

The core only ever sees RGBA buffers in and (gray, coverage) buffers out;
this module moves them to and from image files.
"""

from io import BytesIO
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError
from bevelfield.errors import InvalidInputError
from bevelfield.mask import validate_pixels
from bevelfield.scaling import vector_raster_size

ImageSource = Union[str, Path, bytes, BytesIO]

# rasterizer(source, size) -> RGBA buffer; size=None means natural size
Rasterizer = Callable[[ImageSource, Optional[tuple[int, int]]], np.ndarray]


def _looks_like_svg(data: bytes) -> bool:
    head = data.lstrip()[:256].lower()
    return head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head)


def is_vector_source(source: ImageSource) -> bool:
    """True for SVG paths, or SVG documents passed as bytes or BytesIO."""
    if isinstance(source, (str, Path)):
        return Path(source).suffix.lower() == ".svg"
    if isinstance(source, bytes):
        return _looks_like_svg(source)
    if isinstance(source, BytesIO):
        return _looks_like_svg(source.getvalue())
    return False


def load_pixels(source: ImageSource, rasterizer: Optional[Rasterizer] = None) -> np.ndarray:
    """
    Decode an image into an (H, W, 4) uint8 RGBA buffer.

    Vector images are rasterized twice through `rasterizer`: once at natural
    size to learn the aspect ratio, then at the high-fidelity size with the
    longer side at VECTOR_RASTER_SIZE.

    Raises:
        FileNotFoundError: If a path does not exist
        InvalidInputError: If the data cannot be decoded, or is a vector
            image and no rasterizer was given
    """
    if is_vector_source(source):
        if rasterizer is None:
            raise InvalidInputError("Vector images need a rasterizer to be loaded")
        if isinstance(source, BytesIO):
            source = source.getvalue()
        natural = validate_pixels(rasterizer(source, None))
        size = vector_raster_size(natural.shape[1], natural.shape[0])
        return validate_pixels(rasterizer(source, size))

    if isinstance(source, (str, Path)) and not Path(source).exists():
        raise FileNotFoundError(f"Image file not found: {source}")
    if isinstance(source, bytes):
        source = BytesIO(source)

    try:
        with Image.open(source) as img:
            rgba = np.array(img.convert("RGBA"))
    except UnidentifiedImageError as e:
        raise InvalidInputError(f"Cannot decode image: {e}") from e
    return validate_pixels(rgba)


def field_to_image(field: np.ndarray) -> Image.Image:
    """RGBA image with gray replicated in R, G, B and coverage in A."""
    if field.ndim != 3 or field.shape[2] != 2:
        raise InvalidInputError(f"Expected an (H, W, 2) output field, got shape {field.shape}")
    gray = field[..., 0]
    rgba = np.dstack([gray, gray, gray, field[..., 1]]).astype(np.uint8)
    return Image.fromarray(rgba)


def encode_png(field: np.ndarray) -> bytes:
    """Encode an output field as PNG bytes."""
    buffer = BytesIO()
    field_to_image(field).save(buffer, format="PNG")
    return buffer.getvalue()


def save_output(field: np.ndarray, path: Union[str, Path]) -> Path:
    """Write an output field as a PNG file."""
    path = Path(path)
    field_to_image(field).save(path, format="PNG")
    return path
