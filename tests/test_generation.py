"""Generation service tests with stub provider clients."""

from __future__ import annotations

import io
from typing import Any, Dict, List

import numpy as np
import pytest
from PIL import Image

from config.settings import AppConfig
from modules.pipelines import img2img, text2img, textgen, video
from modules.pipelines.pixel_filters import PixelBuffer
from modules.utils.errors import ProcessingError, ProviderError, ValidationError


class DummyRunware:
    """Captures submitted tasks and returns a fixed result item."""

    def __init__(self, item: Dict[str, Any]) -> None:
        self.item = item
        self.tasks: List[Dict[str, Any]] = []

    def run_task(self, api_key: str, task: Dict[str, Any]) -> Dict[str, Any]:
        self.tasks.append({"api_key": api_key, **task})
        return self.item


class DummyHuggingFace:
    def __init__(self, json_result: Any = None, bytes_result: bytes = b"") -> None:
        self.json_result = json_result
        self.bytes_result = bytes_result
        self.calls: List[tuple] = []

    def infer_json(self, model_id: str, api_key: str, body: Dict[str, Any]) -> Any:
        self.calls.append((model_id, api_key, body))
        return self.json_result

    def infer_bytes(self, model_id: str, api_key: str, body: Dict[str, Any]) -> bytes:
        self.calls.append((model_id, api_key, body))
        return self.bytes_result


class DummyRemoveBg:
    def __init__(self, result: bytes) -> None:
        self.result = result
        self.received: List[bytes] = []

    def remove_background(self, api_key: str, image_bytes: bytes, filename: str = "image.png") -> bytes:
        self.received.append(image_bytes)
        return self.result


def png(color=(0, 0, 0, 0), size=(3, 2)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_text2img_builds_image_inference_task():
    client = DummyRunware({"imageURL": "https://img/1.webp", "seed": "42", "taskUUID": "t-1"})
    service = text2img.Text2ImageService(AppConfig(), client=client)

    result = service.generate(text2img.PromptRequest(prompt="  a red fox ", api_key=" key "))

    task = client.tasks[0]
    assert task["api_key"] == "key"
    assert task["taskType"] == "imageInference"
    assert task["positivePrompt"] == "a red fox"
    assert (task["width"], task["height"]) == (512, 512)
    assert task["model"] == "runware:100@1"
    assert task["numberResults"] == 1
    assert task["outputFormat"] == "WEBP"
    assert task["CFGScale"] == 1
    assert task["scheduler"] == "FlowMatchEulerDiscreteScheduler"
    assert result.image_url == "https://img/1.webp"
    assert result.seed == 42
    assert result.task_uuid == "t-1"


@pytest.mark.parametrize(
    "prompt, key, message",
    [("cat", "", "Runware API key"), ("   ", "key", "description for the image")],
)
def test_text2img_validation_happens_before_request(prompt, key, message):
    client = DummyRunware({})
    service = text2img.Text2ImageService(AppConfig(), client=client)

    with pytest.raises(ValidationError, match=message):
        service.generate(text2img.PromptRequest(prompt=prompt, api_key=key))
    assert client.tasks == []


def test_text2img_without_image_url():
    service = text2img.Text2ImageService(AppConfig(), client=DummyRunware({"seed": 1}))
    with pytest.raises(ProviderError, match="No image was generated"):
        service.generate(text2img.PromptRequest(prompt="cat", api_key="k"))


def test_video_task_and_result():
    client = DummyRunware({"videoURL": "https://vid/1.mp4", "taskUUID": "v-9"})
    service = video.VideoService(AppConfig(), client=client)

    result = service.generate(video.VideoRequest(prompt="waves", api_key="k"))

    task = client.tasks[0]
    assert task["taskType"] == "videoInference"
    assert (task["duration"], task["fps"]) == (3, 8)
    assert result.video_url == "https://vid/1.mp4"
    assert result.task_id == "v-9"


def test_video_missing_url():
    service = video.VideoService(AppConfig(), client=DummyRunware({}))
    with pytest.raises(ProviderError, match="no video URL received"):
        service.generate(video.VideoRequest(prompt="waves", api_key="k"))


def test_text_generation_strips_echoed_prompt():
    client = DummyHuggingFace()
    service = textgen.TextGenerationService(AppConfig(), client=client)
    request = textgen.TextRequest(prompt="Write about tea", api_key="hf", length="long", tone="casual")

    def respond(model_id, api_key, body):
        client.calls.append((model_id, api_key, body))
        return [{"generated_text": body["inputs"] + "  Tea is great."}]

    client.infer_json = respond
    text = service.generate(request)

    model_id, _, body = client.calls[0]
    assert text == "Tea is great."
    assert model_id == "microsoft/DialoGPT-large"
    assert body["parameters"] == {"max_length": 1000, "temperature": 0.7, "do_sample": True}
    assert "casual tone" in body["inputs"]
    assert "600-1000 words" in body["inputs"]


def test_text_generation_empty_result():
    service = textgen.TextGenerationService(AppConfig(), client=DummyHuggingFace(json_result=[]))
    result = service.generate(textgen.TextRequest(prompt="x", api_key="hf"))
    assert result == "No text generated. Please try again."


def test_code_generation_extracts_fenced_block():
    reply = "Here you go:\n```python\nprint('hi')\n```\nEnjoy"
    client = DummyRunware({"text": reply})
    service = textgen.CodeGenerationService(AppConfig(), client=client)

    result = service.generate(
        textgen.CodeRequest(prompt="say hi", api_key="k", language="python", framework="flask")
    )

    task = client.tasks[0]
    assert task["taskType"] == "textInference"
    assert (task["maxTokens"], task["temperature"]) == (1500, 0.3)
    assert "using flask" in task["prompt"]
    assert result.code == "print('hi')"
    assert result.filename == "generated.py"


def test_code_generation_unknown_language_and_plain_text():
    service = textgen.CodeGenerationService(AppConfig(), client=DummyRunware({"text": "  SELECT 1;  "}))
    result = service.generate(textgen.CodeRequest(prompt="query", api_key="k", language="sql"))
    assert result.code == "SELECT 1;"
    assert result.filename == "generated.txt"


def test_code_generation_empty_text():
    service = textgen.CodeGenerationService(AppConfig(), client=DummyRunware({"text": ""}))
    with pytest.raises(ProviderError, match="Failed to generate code"):
        service.generate(textgen.CodeRequest(prompt="query", api_key="k"))


def test_music_generation_prompt_and_bytes():
    client = DummyHuggingFace(bytes_result=b"RIFF")
    service = textgen.MusicGenerationService(AppConfig(), client=client)

    audio = service.generate(textgen.MusicRequest(prompt="rainy night", api_key="hf", genre="jazz", duration=15))

    model_id, _, body = client.calls[0]
    assert audio == b"RIFF"
    assert model_id == "facebook/musicgen-small"
    assert body == {"inputs": "jazz music, 15 seconds, rainy night", "parameters": {"duration": 15}}


def test_image_edit_background_removal_uses_removebg():
    removebg = DummyRemoveBg(png((0, 0, 0, 0), size=(4, 4)))
    huggingface = DummyHuggingFace()
    service = img2img.Image2ImageService(AppConfig(), removebg=removebg, huggingface=huggingface)
    source = PixelBuffer(np.full((4, 4, 4), 255, dtype=np.uint8))

    result = service.edit(img2img.ImageEditRequest(image=source, api_key="rb"))

    assert removebg.received and removebg.received[0].startswith(b"\x89PNG")
    assert huggingface.calls == []
    assert result.size == (4, 4)
    assert result.pixel(0, 0)[3] == 0


def test_image_edit_enhance_uses_huggingface():
    huggingface = DummyHuggingFace(bytes_result=png((10, 20, 30, 255)))
    service = img2img.Image2ImageService(AppConfig(), removebg=DummyRemoveBg(b""), huggingface=huggingface)
    source = PixelBuffer(np.zeros((2, 3, 4), dtype=np.uint8))

    result = service.edit(img2img.ImageEditRequest(image=source, api_key="hf", edit_type="upscale"))

    model_id, _, body = huggingface.calls[0]
    assert model_id == "runwayml/stable-diffusion-v1-5"
    assert body == {"inputs": "enhance and improve this image, upscale"}
    assert result.pixel(0, 0) == (10, 20, 30, 255)


def test_image_edit_requires_key_and_readable_result():
    source = PixelBuffer(np.zeros((2, 2, 4), dtype=np.uint8))
    service = img2img.Image2ImageService(
        AppConfig(), removebg=DummyRemoveBg(b"{\"error\": 1}"), huggingface=DummyHuggingFace()
    )

    with pytest.raises(ValidationError):
        service.edit(img2img.ImageEditRequest(image=source, api_key=" "))
    with pytest.raises(ProcessingError, match="unreadable image"):
        service.edit(img2img.ImageEditRequest(image=source, api_key="rb"))
