"""Text, code and music generation facades."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config.settings import AppConfig
from modules.pipelines.providers import HuggingFaceClient, RunwareClient
from modules.prompts import templates
from modules.utils.errors import ProviderError, ValidationError, require_text


@dataclass(slots=True)
class TextRequest:
    prompt: str
    api_key: str
    text_type: str = "article"
    tone: str = "professional"
    length: str = "medium"


@dataclass(slots=True)
class CodeRequest:
    prompt: str
    api_key: str
    language: str = "javascript"
    framework: Optional[str] = None


@dataclass(slots=True)
class CodeResult:
    code: str
    language: str
    filename: str


@dataclass(slots=True)
class MusicRequest:
    prompt: str
    api_key: str
    genre: str = "pop"
    duration: int = 10


class TextGenerationService:
    """Prose generation via Hugging Face text inference."""

    def __init__(self, config: AppConfig, client: Optional[HuggingFaceClient] = None) -> None:
        self.config = config
        self.client = client or HuggingFaceClient(config)

    def generate(self, request: TextRequest) -> str:
        prompt = require_text(request.prompt, "Please enter a prompt")
        api_key = require_text(request.api_key, "Please enter your Hugging Face API key")

        full_prompt = templates.build_text_prompt(prompt, request.text_type, request.tone, request.length)
        payload = self.client.infer_json(
            self.config.text_model_id,
            api_key,
            {
                "inputs": full_prompt,
                "parameters": {
                    "max_length": templates.length_preset(request.length).max_length,
                    "temperature": 0.7,
                    "do_sample": True,
                },
            },
        )

        generated = ""
        if isinstance(payload, list) and payload and isinstance(payload[0], dict):
            generated = payload[0].get("generated_text") or ""
        text = templates.strip_echo(generated, full_prompt)
        return text or "No text generated. Please try again."


class CodeGenerationService:
    """Code generation via the Runware textInference task."""

    def __init__(self, config: AppConfig, client: Optional[RunwareClient] = None) -> None:
        self.config = config
        self.client = client or RunwareClient(config)

    def generate(self, request: CodeRequest) -> CodeResult:
        api_key = require_text(request.api_key, "Please enter your Runware API key")
        prompt = require_text(request.prompt, "Please describe what code you need")

        item = self.client.run_task(
            api_key,
            {
                "taskType": "textInference",
                "prompt": templates.build_code_prompt(prompt, request.language, request.framework),
                "maxTokens": 1500,
                "temperature": 0.3,
            },
        )
        text = item.get("text")
        if not text:
            raise ProviderError("Failed to generate code")

        return CodeResult(
            code=templates.extract_code_block(text),
            language=request.language,
            filename=f"generated{templates.extension_for(request.language)}",
        )


class MusicGenerationService:
    """Music generation via Hugging Face audio inference."""

    def __init__(self, config: AppConfig, client: Optional[HuggingFaceClient] = None) -> None:
        self.config = config
        self.client = client or HuggingFaceClient(config)

    def generate(self, request: MusicRequest) -> bytes:
        prompt = require_text(request.prompt, "Please describe the music you want to generate")
        api_key = require_text(request.api_key, "Please enter your Hugging Face API key")
        try:
            duration = int(request.duration)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid duration '{request.duration}'.") from exc

        return self.client.infer_bytes(
            self.config.music_model_id,
            api_key,
            {
                "inputs": templates.build_music_prompt(prompt, request.genre, duration),
                "parameters": {"duration": duration},
            },
        )
