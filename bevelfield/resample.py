"""Default image-resampling collaborator backed by Pillow."""

import numpy as np
from PIL import Image


def match_shape(array: np.ndarray, target_shape: tuple[int, int]) -> np.ndarray:
    """Crop or pad array (edge mode) to match target (height, width)."""
    target_h, target_w = target_shape
    current_h, current_w = array.shape[:2]
    channels = [(0, 0)] * (array.ndim - 2)

    if current_h > target_h:
        array = array[:target_h]
    elif current_h < target_h:
        array = np.pad(array, [(0, target_h - current_h), (0, 0)] + channels, mode="edge")

    if current_w > target_w:
        array = array[:, :target_w]
    elif current_w < target_w:
        array = np.pad(array, [(0, 0), (0, target_w - current_w)] + channels, mode="edge")

    return array


def _resize(array: np.ndarray, size: tuple[int, int]) -> np.ndarray:
    width, height = size
    if array.shape[1] == width and array.shape[0] == height:
        return array.copy()
    # RGBA and LA are resized with premultiplied alpha by Pillow
    img = Image.fromarray(np.ascontiguousarray(array, dtype=np.uint8))
    resized = np.array(img.resize((width, height), Image.Resampling.BILINEAR))
    return match_shape(resized, (height, width))


def resize_pixels(pixels: np.ndarray, size: tuple[int, int]) -> np.ndarray:
    """Resize an (H, W, 4) RGBA buffer to size = (width, height)."""
    return _resize(pixels, size)


def resize_field(field: np.ndarray, size: tuple[int, int]) -> np.ndarray:
    """Resize an (H, W, 2) gray + coverage buffer to size = (width, height)."""
    return _resize(field, size)


class PillowResampler:
    """Resampler used by the pipeline unless the caller supplies another one.

    Any object with the same two methods can stand in for it.
    """

    def resize_pixels(self, pixels: np.ndarray, size: tuple[int, int]) -> np.ndarray:
        return resize_pixels(pixels, size)

    def resize_field(self, field: np.ndarray, size: tuple[int, int]) -> np.ndarray:
        return resize_field(field, size)
