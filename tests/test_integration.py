"""Opt-in checks against the real hosted providers."""

from __future__ import annotations

import os

import pytest

from config.settings import load_config
from modules.pipelines.text2img import PromptRequest, Text2ImageService
from modules.utils.errors import ProviderError


@pytest.mark.integration
def test_runware_image_generation_real_call():
    """Generate one image with the real Runware API."""

    config = load_config()
    api_key = os.getenv("RUNWARE_API_KEY")
    if not api_key:
        pytest.skip("RUNWARE_API_KEY not set; skipping real provider call.")

    service = Text2ImageService(config)
    try:
        result = service.generate(PromptRequest(prompt="a lighthouse at dusk, watercolor", api_key=api_key))
    except ProviderError as exc:
        if exc.status_code in (401, 403, 429):
            pytest.skip(f"Runware rejected the request: {exc}")
        raise

    print("Image URL:", result.image_url)
    assert result.image_url.startswith("http")
