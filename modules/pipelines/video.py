"""Text-to-video generation through Runware video inference."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from config.settings import AppConfig
from modules.pipelines.providers import RunwareClient
from modules.utils.errors import ProviderError, require_text


@dataclass(slots=True)
class VideoRequest:
    """Request data for video generation."""

    prompt: str
    api_key: str
    width: int = 512
    height: int = 512
    duration: int = 3
    fps: int = 8


@dataclass(slots=True)
class VideoResult:
    video_url: str
    prompt: str
    task_id: str


class VideoService:
    """Facade around the Runware videoInference task."""

    def __init__(self, config: AppConfig, client: Optional[RunwareClient] = None) -> None:
        self.config = config
        self.client = client or RunwareClient(config)

    def generate(self, request: VideoRequest) -> VideoResult:
        api_key = require_text(request.api_key, "Please enter your Runware API key")
        prompt = require_text(request.prompt, "Please enter a video description")

        item = self.client.run_task(
            api_key,
            {
                "taskType": "videoInference",
                "positivePrompt": prompt,
                "width": request.width,
                "height": request.height,
                "duration": request.duration,
                "fps": request.fps,
                "model": self.config.runware_model_id,
            },
        )

        video_url = item.get("videoURL")
        if not video_url:
            raise ProviderError("Video generation failed - no video URL received")

        return VideoResult(
            video_url=video_url,
            prompt=prompt,
            task_id=item.get("taskUUID") or str(int(time.time() * 1000)),
        )
