"""HTTP plumbing shared by the hosted-provider facades."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

import requests

from config.settings import AppConfig
from modules.utils.errors import ProviderError

logger = logging.getLogger(__name__)


def extract_error(payload: Any) -> Optional[str]:
    """Return the error message carried by a JSON payload, if any."""
    if not isinstance(payload, dict):
        return None

    error = payload.get("error")
    if isinstance(error, dict):
        error = error.get("message") or str(error)
    if error:
        return str(error)

    errors = payload.get("errors")
    if errors:
        first = errors[0] if isinstance(errors, list) else errors
        if isinstance(first, dict):
            message = first.get("message")
            if message:
                return str(message)
        return payload.get("errorMessage") or str(first)

    if payload.get("errorMessage"):
        return str(payload["errorMessage"])
    return None


def describe_http_error(response: requests.Response, provider: str) -> str:
    """Turn a non-2xx response into a user-facing message."""
    status = response.status_code
    if status in (401, 403):
        return f"Invalid API key. Please check your {provider} API key"
    if status == 429:
        return "Rate limit exceeded. Please wait before trying again"
    try:
        message = extract_error(response.json())
    except ValueError:
        message = None
    return message or f"HTTP error! status: {status}"


class ProviderClient:
    """Thin wrapper over a requests session with provider error mapping."""

    provider_name = "provider"

    def __init__(self, config: AppConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session or requests.Session()

    def _post(self, url: str, **kwargs: Any) -> requests.Response:
        logger.info("POST %s", url)
        try:
            response = self.session.post(url, timeout=self.config.request_timeout, **kwargs)
        except requests.RequestException as exc:
            raise ProviderError(f"{self.provider_name} request failed: {exc}") from exc
        if not response.ok:
            raise ProviderError(
                describe_http_error(response, self.provider_name),
                status_code=response.status_code,
            )
        return response

    def _post_json(self, url: str, **kwargs: Any) -> Any:
        response = self._post(url, **kwargs)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(f"{self.provider_name} returned an invalid response") from exc
        message = extract_error(payload)
        if message:
            raise ProviderError(message, status_code=response.status_code)
        return payload


class RunwareClient(ProviderClient):
    """Runware task API: a JSON array of [authentication, task]."""

    provider_name = "Runware"

    def run_task(self, api_key: str, task: Dict[str, Any]) -> Dict[str, Any]:
        """Submit one inference task and return its result item."""
        task = {"taskUUID": str(uuid.uuid4()), **task}
        body = [{"taskType": "authentication", "apiKey": api_key}, task]
        payload = self._post_json(
            self.config.runware_url,
            json=body,
            headers={"Content-Type": "application/json"},
        )

        data = payload.get("data") if isinstance(payload, dict) else None
        if not data:
            raise ProviderError(f"No {task['taskType']} data received from API")
        for item in data:
            if isinstance(item, dict) and item.get("taskType") == task["taskType"]:
                return item
        raise ProviderError(f"No {task['taskType']} result in API response")


class HuggingFaceClient(ProviderClient):
    """Hugging Face hosted inference endpoints."""

    provider_name = "Hugging Face"

    def _model_url(self, model_id: str) -> str:
        return f"{self.config.huggingface_url}/{model_id}"

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}

    def infer_json(self, model_id: str, api_key: str, body: Dict[str, Any]) -> Any:
        return self._post_json(self._model_url(model_id), json=body, headers=self._headers(api_key))

    def infer_bytes(self, model_id: str, api_key: str, body: Dict[str, Any]) -> bytes:
        response = self._post(self._model_url(model_id), json=body, headers=self._headers(api_key))
        return response.content


class RemoveBgClient(ProviderClient):
    """remove.bg background removal."""

    provider_name = "remove.bg"

    def remove_background(self, api_key: str, image_bytes: bytes, filename: str = "image.png") -> bytes:
        response = self._post(
            self.config.removebg_url,
            headers={"X-Api-Key": api_key},
            files={"image_file": (filename, image_bytes)},
        )
        return response.content
