"""Local image editor: continuous adjustments plus one-shot effects."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

import numpy as np
from PIL import Image, ImageFilter

from modules.pipelines.pixel_filters import PixelBuffer, apply_effect
from modules.utils.errors import ValidationError
from modules.utils.image_utils import encode_png, load_rgba

# CSS saturate() matrix: rows produce R', G', B' from (R, G, B).
_SATURATE_BASE = np.array(
    [
        [0.213, 0.715, 0.072],
        [0.213, 0.715, 0.072],
        [0.213, 0.715, 0.072],
    ]
)
_SATURATE_SCALE = np.array(
    [
        [0.787, -0.715, -0.072],
        [-0.213, 0.285, -0.072],
        [-0.213, -0.715, 0.928],
    ]
)


@dataclass(frozen=True, slots=True)
class EditSettings:
    """Continuous adjustment parameters redrawn from the original image."""

    brightness: float = 100.0
    contrast: float = 100.0
    saturation: float = 100.0
    blur: float = 0.0
    rotation: float = 0.0
    flip_horizontal: bool = False
    flip_vertical: bool = False

    def validate(self) -> None:
        """Raise ValidationError when a parameter is outside its domain."""
        for name in ("brightness", "contrast", "saturation"):
            value = getattr(self, name)
            if not 0 <= value <= 200:
                raise ValidationError(f"{name.capitalize()} must be between 0 and 200 (got {value}).")
        if not 0 <= self.blur <= 10:
            raise ValidationError(f"Blur must be between 0 and 10 (got {self.blur}).")
        if not -360 <= self.rotation <= 360:
            raise ValidationError(f"Rotation must be between -360 and 360 (got {self.rotation}).")

    @property
    def is_identity(self) -> bool:
        return self == EditSettings()


def _apply_color_filters(rgb: np.ndarray, settings: EditSettings) -> np.ndarray:
    """Apply brightness, contrast and saturate in CSS filter order on [0, 1] floats."""
    rgb = np.clip(rgb * (settings.brightness / 100.0), 0.0, 1.0)
    rgb = np.clip((rgb - 0.5) * (settings.contrast / 100.0) + 0.5, 0.0, 1.0)
    matrix = _SATURATE_BASE + _SATURATE_SCALE * (settings.saturation / 100.0)
    return np.clip(rgb @ matrix.T, 0.0, 1.0)


def render_adjustments(original: PixelBuffer, settings: EditSettings) -> PixelBuffer:
    """Redraw the original through the filter chain and the flip/rotate transform.

    The canvas keeps the source dimensions; rotated corners fall outside it and
    uncovered areas stay transparent.
    """
    settings.validate()
    if settings.is_identity:
        return original

    data = original.copy_array()
    rgb = data[..., :3].astype(np.float64) / 255.0
    data[..., :3] = np.clip(np.rint(_apply_color_filters(rgb, settings) * 255.0), 0, 255).astype(np.uint8)
    image = Image.fromarray(data)

    if settings.blur > 0:
        image = image.filter(ImageFilter.GaussianBlur(radius=settings.blur))
    if settings.flip_horizontal:
        image = image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    if settings.flip_vertical:
        image = image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    if settings.rotation % 360:
        # Pillow rotates counter-clockwise; canvas rotation is clockwise.
        image = image.rotate(-settings.rotation, resample=Image.Resampling.BICUBIC, expand=False)

    return PixelBuffer.from_image(image)


@dataclass(frozen=True, slots=True)
class ImageEditorSession:
    """State of one editing session.

    ``original`` is never modified; ``current`` is what the user sees. Every
    operation returns a new session, so a failed operation leaves the previous
    one intact.
    """

    original: PixelBuffer
    current: PixelBuffer
    settings: EditSettings = field(default_factory=EditSettings)

    @classmethod
    def from_upload(cls, source: Any) -> "ImageEditorSession":
        buffer = PixelBuffer.from_image(load_rgba(source))
        return cls(original=buffer, current=buffer)

    def with_settings(self, settings: EditSettings) -> "ImageEditorSession":
        """Redraw from the original with new continuous settings.

        Any one-shot effects applied since the last redraw are discarded.
        """
        rendered = render_adjustments(self.original, settings)
        return replace(self, current=rendered, settings=settings)

    def rotate_by(self, degrees: float) -> "ImageEditorSession":
        rotation = (self.settings.rotation + degrees) % 360
        return self.with_settings(replace(self.settings, rotation=rotation))

    def toggle_flip(self, direction: str) -> "ImageEditorSession":
        if direction == "horizontal":
            settings = replace(self.settings, flip_horizontal=not self.settings.flip_horizontal)
        elif direction == "vertical":
            settings = replace(self.settings, flip_vertical=not self.settings.flip_vertical)
        else:
            raise ValidationError(f"Unknown flip direction '{direction}'.")
        return self.with_settings(settings)

    def apply_effect(self, name: str) -> "ImageEditorSession":
        """Apply a one-shot effect to the current buffer; repeated effects compound."""
        return replace(self, current=apply_effect(self.current, name))

    def with_current(self, buffer: PixelBuffer) -> "ImageEditorSession":
        """Replace the visible buffer, e.g. with a provider-edited result."""
        return replace(self, current=buffer)

    def reset(self) -> "ImageEditorSession":
        return ImageEditorSession(original=self.original, current=self.original)

    def export_png(self, flatten: bool = False) -> bytes:
        return encode_png(self.current.to_image(), flatten=flatten)
