"""Manual script to verify the configured provider API keys work."""

from __future__ import annotations

import os

import requests
from config.settings import load_config

config = load_config()  # reads .env into os.environ

RUNWARE_KEY = os.getenv("RUNWARE_API_KEY")
HUGGINGFACE_KEY = os.getenv("HUGGINGFACE_API_KEY")

if not RUNWARE_KEY and not HUGGINGFACE_KEY:
    print("[error] Neither RUNWARE_API_KEY nor HUGGINGFACE_API_KEY is set; check .env or environment variables.")
    raise SystemExit(1)

try:
    if RUNWARE_KEY:
        body = [
            {"taskType": "authentication", "apiKey": RUNWARE_KEY},
            {
                "taskType": "textInference",
                "taskUUID": "00000000-0000-4000-8000-000000000000",
                "prompt": "Reply with the single word: ready",
                "maxTokens": 10,
                "temperature": 0.3,
            },
        ]
        resp = requests.post(config.runware_url, json=body, timeout=config.request_timeout)
        print("Runware status:", resp.status_code)
        print(resp.text[:500])

    if HUGGINGFACE_KEY:
        resp = requests.post(
            f"{config.huggingface_url}/{config.text_model_id}",
            headers={"Authorization": f"Bearer {HUGGINGFACE_KEY}"},
            json={"inputs": "Hello", "parameters": {"max_length": 20}},
            timeout=config.request_timeout,
        )
        print("Hugging Face status:", resp.status_code)
        print(resp.text[:500])
except Exception as exc:  # noqa: BLE001
    print("[error]", exc)
    raise
