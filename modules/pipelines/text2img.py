"""Text-to-image generation through Runware image inference."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config.settings import AppConfig
from modules.pipelines.providers import RunwareClient
from modules.utils.errors import ProviderError, require_text


@dataclass(slots=True)
class PromptRequest:
    """Request data for text-to-image generation."""

    prompt: str
    api_key: str
    height: int = 512
    width: int = 512
    output_format: str = "WEBP"
    cfg_scale: float = 1
    scheduler: str = "FlowMatchEulerDiscreteScheduler"


@dataclass(slots=True)
class ImageResult:
    """Result payload produced by the image inference task."""

    image_url: str
    prompt: str
    seed: Optional[int]
    task_uuid: Optional[str] = None


class Text2ImageService:
    """Facade around the Runware imageInference task."""

    def __init__(self, config: AppConfig, client: Optional[RunwareClient] = None) -> None:
        self.config = config
        self.client = client or RunwareClient(config)

    def generate(self, request: PromptRequest) -> ImageResult:
        """Generate an image from a text prompt."""
        api_key = require_text(request.api_key, "Please enter your Runware API key")
        prompt = require_text(request.prompt, "Please enter a description for the image")

        item = self.client.run_task(
            api_key,
            {
                "taskType": "imageInference",
                "positivePrompt": prompt,
                "width": request.width,
                "height": request.height,
                "model": self.config.runware_model_id,
                "numberResults": 1,
                "outputFormat": request.output_format,
                "CFGScale": request.cfg_scale,
                "scheduler": request.scheduler,
            },
        )

        image_url = item.get("imageURL")
        if not image_url:
            raise ProviderError("No image was generated")

        seed = item.get("seed")
        return ImageResult(
            image_url=image_url,
            prompt=item.get("positivePrompt") or prompt,
            seed=int(seed) if seed is not None else None,
            task_uuid=item.get("taskUUID"),
        )
