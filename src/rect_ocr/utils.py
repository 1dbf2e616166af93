"""Geometry and tensor-layout helpers shared by detection and recognition."""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

import numpy as np
from PIL import Image

PAD_ALIGNMENT = 32

ImageLike = Union[Image.Image, np.ndarray]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned integer rectangle in pixel coordinates."""
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def as_box(self) -> Tuple[int, int, int, int]:
        """Return (left, upper, right, lower) as used by ``Image.crop``."""
        return (self.left, self.top, self.right, self.bottom)


def get_pad_length(length: int) -> int:
    """Round ``length`` up to the next multiple of 32."""
    rem = length % PAD_ALIGNMENT
    if rem == 0:
        return length
    return length + PAD_ALIGNMENT - rem


def transposed_index(x, y, pad_h: int):
    """Linear index of pixel (x, y) in the flattened, transposed detector output.

    The output is laid out (1, 1, pad_h, pad_w). Reversing its axes and
    flattening puts pixel (x, y) at ``x * pad_h + y``. Works on scalars and
    integer arrays alike.
    """
    return x * pad_h + y


def bounding_rect(points: np.ndarray, min_side: int = 5) -> Optional[Rect]:
    """Bounding box of contour points, or None for boxes too small to be text.

    Width and height are ``max - min`` over the points, so a box survives only
    when both sides are strictly greater than ``min_side``.
    """
    points = np.asarray(points).reshape(-1, 2)
    if points.shape[0] == 0:
        return None
    x_min, y_min = points.min(axis=0)
    x_max, y_max = points.max(axis=0)
    width = int(x_max - x_min)
    height = int(y_max - y_min)
    if width <= min_side or height <= min_side:
        return None
    return Rect(int(x_min), int(y_min), width, height)


def expand_rect(rect: Rect, border: int, img_width: int, img_height: int) -> Rect:
    """Grow ``rect`` by ``border`` on every side, clipped to the image."""
    left = max(rect.left - border, 0)
    top = max(rect.top - border, 0)
    width = min(rect.width + border * 2, img_width - left)
    height = min(rect.height + border * 2, img_height - top)
    return Rect(left, top, width, height)


def to_rgb_array(image: ImageLike) -> np.ndarray:
    """Return an (H, W, 3) uint8 RGB array. Any alpha channel is dropped."""
    if isinstance(image, Image.Image):
        return np.asarray(image.convert("RGB"), dtype=np.uint8)

    img = np.asarray(image)
    if img.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {img.dtype}")
    if img.ndim == 2:
        img = np.stack([img] * 3, axis=-1)
    if img.ndim != 3 or img.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3|4) image, got shape {img.shape}")
    return np.ascontiguousarray(img[:, :, :3])


def to_pil(image: ImageLike) -> Image.Image:
    """Return ``image`` as an RGB PIL image."""
    if isinstance(image, Image.Image):
        return image.convert("RGB") if image.mode != "RGB" else image
    return Image.fromarray(to_rgb_array(image))


def crop_image(image: ImageLike, rect: Rect) -> Image.Image:
    """Cut ``rect`` out of ``image``.

    Raises:
        ValueError: If the rectangle is empty or leaves the image bounds
    """
    img = to_pil(image)
    width, height = img.size
    if (rect.left < 0 or rect.top < 0 or rect.width <= 0 or rect.height <= 0
            or rect.right > width or rect.bottom > height):
        raise ValueError(f"{rect} does not fit inside a {width}x{height} image")
    return img.crop(rect.as_box())


def iter_rects(rects: Iterable[Rect]):
    """Yield rectangles as plain (left, top, width, height) tuples."""
    for r in rects:
        yield (r.left, r.top, r.width, r.height)
