"""Configuration helpers for the AI Tools Suite."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    data_dir: Path = Path("data")
    output_dir: Path = Path("outputs")
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    history_path: Path = Path("data/history.json")
    api_keys_path: Path = Path("data/api_keys.json")
    firebase_api_key: Optional[str] = None
    request_timeout: float = 120.0
    server_name: str = "127.0.0.1"
    server_port: int = 7860
    max_output_batches: int = 200
    runware_url: str = "https://api.runware.ai/v1"
    huggingface_url: str = "https://api-inference.huggingface.co/models"
    removebg_url: str = "https://api.remove.bg/v1.0/removebg"
    identity_url: str = "https://identitytoolkit.googleapis.com/v1"
    runware_model_id: str = "runware:100@1"
    text_model_id: str = "microsoft/DialoGPT-large"
    music_model_id: str = "facebook/musicgen-small"
    image_edit_model_id: str = "runwayml/stable-diffusion-v1-5"
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    defaults = AppConfig()
    data_dir = Path(os.getenv("DATA_DIR", str(defaults.data_dir))).expanduser()
    history_path = Path(os.getenv("HISTORY_PATH", str(data_dir / "history.json"))).expanduser()
    api_keys_path = Path(os.getenv("API_KEYS_PATH", str(data_dir / "api_keys.json"))).expanduser()

    metadata: dict[str, Any] = {
        "available_languages": [
            "javascript",
            "python",
            "html",
            "css",
            "json",
            "typescript",
            "java",
            "cpp",
            "csharp",
        ],
    }

    return AppConfig(
        data_dir=data_dir,
        output_dir=Path(os.getenv("OUTPUT_DIR", str(defaults.output_dir))).expanduser(),
        log_dir=Path(os.getenv("LOG_DIR", str(defaults.log_dir))).expanduser(),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        history_path=history_path,
        api_keys_path=api_keys_path,
        firebase_api_key=os.getenv("FIREBASE_API_KEY"),
        request_timeout=_env_float("REQUEST_TIMEOUT", defaults.request_timeout),
        server_name=os.getenv("SERVER_NAME", defaults.server_name),
        server_port=int(_env_float("SERVER_PORT", defaults.server_port)),
        max_output_batches=int(_env_float("MAX_OUTPUT_BATCHES", defaults.max_output_batches)),
        runware_url=os.getenv("RUNWARE_URL", defaults.runware_url),
        huggingface_url=os.getenv("HUGGINGFACE_URL", defaults.huggingface_url).rstrip("/"),
        removebg_url=os.getenv("REMOVEBG_URL", defaults.removebg_url),
        identity_url=os.getenv("IDENTITY_URL", defaults.identity_url).rstrip("/"),
        runware_model_id=os.getenv("RUNWARE_MODEL_ID", defaults.runware_model_id),
        text_model_id=os.getenv("TEXT_MODEL_ID", defaults.text_model_id),
        music_model_id=os.getenv("MUSIC_MODEL_ID", defaults.music_model_id),
        image_edit_model_id=os.getenv("IMAGE_EDIT_MODEL_ID", defaults.image_edit_model_id),
        metadata=metadata,
    )
