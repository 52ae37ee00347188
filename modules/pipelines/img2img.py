"""Provider-backed image edits: remove.bg background removal and enhancement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config.settings import AppConfig
from modules.pipelines.pixel_filters import PixelBuffer
from modules.pipelines.providers import HuggingFaceClient, RemoveBgClient
from modules.utils.errors import ProcessingError, require_text
from modules.utils.image_utils import encode_png, load_rgba


@dataclass(slots=True)
class ImageEditRequest:
    """Request data for a provider-side edit of the current image."""

    image: PixelBuffer
    api_key: str
    edit_type: str = "background-removal"


class Image2ImageService:
    """Route AI edits to remove.bg or Hugging Face inference."""

    def __init__(
        self,
        config: AppConfig,
        removebg: Optional[RemoveBgClient] = None,
        huggingface: Optional[HuggingFaceClient] = None,
    ) -> None:
        self.config = config
        self.removebg = removebg or RemoveBgClient(config)
        self.huggingface = huggingface or HuggingFaceClient(config)

    def edit(self, request: ImageEditRequest) -> PixelBuffer:
        """Return the provider's version of the image."""
        api_key = require_text(request.api_key, "Please enter your API key for AI processing")

        if request.edit_type == "background-removal":
            png = encode_png(request.image.to_image())
            result = self.removebg.remove_background(api_key, png)
        else:
            result = self.huggingface.infer_bytes(
                self.config.image_edit_model_id,
                api_key,
                {"inputs": f"enhance and improve this image, {request.edit_type}"},
            )

        try:
            return PixelBuffer.from_image(load_rgba(result))
        except ProcessingError as exc:
            raise ProcessingError(f"Provider returned an unreadable image: {exc}") from exc
