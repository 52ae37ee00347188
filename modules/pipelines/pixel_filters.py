"""Per-pixel filters operating on immutable RGBA buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

import numpy as np
from PIL import Image

# Luminance weights in per-mille so threshold comparisons stay exact.
_LUMA_WEIGHTS = np.array([299, 587, 114], dtype=np.int32)

BACKGROUND_HIGH = 240
BACKGROUND_LOW = 15


@dataclass(frozen=True, slots=True, eq=False)
class PixelBuffer:
    """Read-only RGBA pixel array of shape (height, width, 4)."""

    data: np.ndarray

    def __post_init__(self) -> None:
        array = np.asarray(self.data)
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError(f"Expected an RGBA array of shape (H, W, 4), got {array.shape}")
        if array.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {array.dtype}")
        frozen = np.array(array, copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, "data", frozen)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        return cls(np.asarray(image.convert("RGBA"), dtype=np.uint8))

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """Return the RGBA tuple at column x, row y."""
        r, g, b, a = (int(v) for v in self.data[y, x])
        return r, g, b, a

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.array(self.data))

    def copy_array(self) -> np.ndarray:
        """Return a writable copy of the pixel data."""
        return np.array(self.data, copy=True)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.data.shape == other.data.shape and bool(np.array_equal(self.data, other.data))


def _to_channel(values: np.ndarray) -> np.ndarray:
    """Round half-to-even and clamp to the byte range."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _luminance_milli(data: np.ndarray) -> np.ndarray:
    """Return 1000 * (0.299R + 0.587G + 0.114B) as exact integers."""
    return data[..., :3].astype(np.int32) @ _LUMA_WEIGHTS


def _with_rgb(buffer: PixelBuffer, rgb: np.ndarray) -> PixelBuffer:
    out = buffer.copy_array()
    out[..., :3] = _to_channel(rgb)
    return PixelBuffer(out)


def grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """Set R, G and B to the pixel luminance."""
    gray = _luminance_milli(buffer.data) / 1000.0
    return _with_rgb(buffer, np.repeat(gray[..., None], 3, axis=2))


def sepia(buffer: PixelBuffer) -> PixelBuffer:
    rgb = buffer.data[..., :3].astype(np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    toned = np.stack(
        [
            0.393 * r + 0.769 * g + 0.189 * b,
            0.349 * r + 0.686 * g + 0.168 * b,
            0.272 * r + 0.534 * g + 0.131 * b,
        ],
        axis=-1,
    )
    return _with_rgb(buffer, toned)


def invert(buffer: PixelBuffer) -> PixelBuffer:
    out = buffer.copy_array()
    out[..., :3] = 255 - out[..., :3]
    return PixelBuffer(out)


def vintage(buffer: PixelBuffer) -> PixelBuffer:
    rgb = buffer.data[..., :3].astype(np.float64)
    toned = np.stack(
        [
            1.2 * rgb[..., 0] + 30,
            0.9 * rgb[..., 1] + 20,
            0.7 * rgb[..., 2] + 10,
        ],
        axis=-1,
    )
    return _with_rgb(buffer, toned)


def sharpen(buffer: PixelBuffer) -> PixelBuffer:
    """Apply the [[0,-1,0],[-1,5,-1],[0,-1,0]] kernel to interior pixels.

    The outermost 1-pixel border is copied unchanged. Every output value is
    computed from the input buffer, never from already-sharpened neighbours.
    """
    out = buffer.copy_array()
    if buffer.height < 3 or buffer.width < 3:
        return PixelBuffer(out)

    src = buffer.data[..., :3].astype(np.int32)
    acc = (
        5 * src[1:-1, 1:-1]
        - src[:-2, 1:-1]
        - src[2:, 1:-1]
        - src[1:-1, :-2]
        - src[1:-1, 2:]
    )
    out[1:-1, 1:-1, :3] = np.clip(acc, 0, 255).astype(np.uint8)
    return PixelBuffer(out)


def remove_background_naive(buffer: PixelBuffer) -> PixelBuffer:
    """Make near-white and near-black pixels transparent.

    A pixel whose luminance is strictly above 240 or strictly below 15 gets
    alpha 0; everything else is kept as is. This is a global threshold with
    no notion of foreground, so bright or dark subject regions are lost too.
    """
    lum = _luminance_milli(buffer.data)
    mask = (lum > BACKGROUND_HIGH * 1000) | (lum < BACKGROUND_LOW * 1000)
    out = buffer.copy_array()
    out[..., 3][mask] = 0
    return PixelBuffer(out)


def crop_to_square(buffer: PixelBuffer) -> PixelBuffer:
    """Keep the centred square of side min(width, height)."""
    side = min(buffer.width, buffer.height)
    left = (buffer.width - side) // 2
    top = (buffer.height - side) // 2
    return PixelBuffer(buffer.data[top : top + side, left : left + side])


EFFECTS: Dict[str, Callable[[PixelBuffer], PixelBuffer]] = {
    "grayscale": grayscale,
    "sepia": sepia,
    "invert": invert,
    "vintage": vintage,
    "sharpen": sharpen,
    "remove_background": remove_background_naive,
    "crop_square": crop_to_square,
}


def apply_effect(buffer: PixelBuffer, name: str) -> PixelBuffer:
    """Run a named one-shot effect on the buffer."""
    try:
        effect = EFFECTS[name]
    except KeyError as exc:
        raise KeyError(f"Unknown effect '{name}'") from exc
    return effect(buffer)
