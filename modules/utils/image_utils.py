"""Utility helpers for image decoding and encoding."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from modules.utils.errors import ProcessingError


def load_rgba(source: Any) -> Image.Image:
    """Decode an upload (PIL image, array, bytes or path) into an RGBA image."""
    if source is None:
        raise ProcessingError("No image provided.")

    try:
        if isinstance(source, Image.Image):
            image = source
        elif isinstance(source, np.ndarray):
            image = Image.fromarray(source)
        elif isinstance(source, (bytes, bytearray)):
            image = Image.open(io.BytesIO(source))
            image.load()
        else:
            image = Image.open(Path(source))
            image.load()
    except (UnidentifiedImageError, OSError, TypeError, ValueError) as exc:
        raise ProcessingError(f"Failed to load image: {exc}") from exc

    return image.convert("RGBA")


def encode_png(image: Image.Image, flatten: bool = False) -> bytes:
    """Encode an image as PNG, optionally composited onto white."""
    if flatten:
        background = Image.new("RGBA", image.size, (255, 255, 255, 255))
        background.alpha_composite(image.convert("RGBA"))
        image = background.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def fit_within(size: Tuple[float, float], max_width: float, max_height: float) -> Tuple[float, float]:
    """Scale (width, height) down so it fits the bounding box, keeping aspect."""
    width, height = size
    scale = min(1.0, max_width / width, max_height / height)
    return width * scale, height * scale
