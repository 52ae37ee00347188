"""Hosted provider client tests."""

from __future__ import annotations

import requests
import pytest

from config.settings import AppConfig
from fakes import FakeResponse, FakeSession
from modules.pipelines import providers
from modules.utils.errors import ProviderError


def test_extract_error_variants():
    assert providers.extract_error({"error": "bad"}) == "bad"
    assert providers.extract_error({"error": {"message": "nested"}}) == "nested"
    assert providers.extract_error({"errors": [{"message": "first"}]}) == "first"
    assert providers.extract_error({"errorMessage": "plain"}) == "plain"
    assert providers.extract_error({"data": []}) is None
    assert providers.extract_error(["not", "a", "dict"]) is None


@pytest.mark.parametrize(
    "status, expected",
    [
        (401, "Invalid API key. Please check your Runware API key"),
        (403, "Invalid API key. Please check your Runware API key"),
        (429, "Rate limit exceeded. Please wait before trying again"),
    ],
)
def test_status_codes_map_to_messages(status, expected):
    session = FakeSession(FakeResponse(status))
    client = providers.RunwareClient(AppConfig(), session=session)

    with pytest.raises(ProviderError) as info:
        client.run_task("key", {"taskType": "imageInference"})

    assert str(info.value) == expected
    assert info.value.status_code == status


def test_other_status_uses_body_message_or_code():
    client = providers.RunwareClient(
        AppConfig(),
        session=FakeSession(FakeResponse(500, {"error": "model offline"}), FakeResponse(502)),
    )

    with pytest.raises(ProviderError, match="model offline"):
        client.run_task("key", {"taskType": "imageInference"})
    with pytest.raises(ProviderError, match="HTTP error! status: 502"):
        client.run_task("key", {"taskType": "imageInference"})


def test_error_field_in_success_payload():
    session = FakeSession(FakeResponse(200, {"errors": [{"message": "invalid model"}]}))
    client = providers.RunwareClient(AppConfig(), session=session)
    with pytest.raises(ProviderError, match="invalid model"):
        client.run_task("key", {"taskType": "imageInference"})


def test_run_task_sends_auth_then_task_and_timeout():
    payload = {"data": [{"taskType": "imageInference", "imageURL": "https://img"}]}
    session = FakeSession(FakeResponse(200, payload))
    config = AppConfig(request_timeout=12.5)
    client = providers.RunwareClient(config, session=session)

    item = client.run_task("secret", {"taskType": "imageInference", "positivePrompt": "cat"})

    call = session.calls[0]
    auth, task = call["json"]
    assert item["imageURL"] == "https://img"
    assert call["url"] == config.runware_url
    assert call["timeout"] == 12.5
    assert auth == {"taskType": "authentication", "apiKey": "secret"}
    assert task["positivePrompt"] == "cat"
    assert task["taskUUID"]


def test_run_task_uses_fresh_task_uuid():
    payload = {"data": [{"taskType": "imageInference"}]}
    session = FakeSession(FakeResponse(200, payload), FakeResponse(200, payload))
    client = providers.RunwareClient(AppConfig(), session=session)

    client.run_task("k", {"taskType": "imageInference"})
    client.run_task("k", {"taskType": "imageInference"})

    first, second = (call["json"][1]["taskUUID"] for call in session.calls)
    assert first != second


def test_run_task_missing_data():
    session = FakeSession(FakeResponse(200, {"data": []}), FakeResponse(200, {"data": [{"taskType": "other"}]}))
    client = providers.RunwareClient(AppConfig(), session=session)

    with pytest.raises(ProviderError, match="No videoInference data received"):
        client.run_task("k", {"taskType": "videoInference"})
    with pytest.raises(ProviderError, match="No videoInference result"):
        client.run_task("k", {"taskType": "videoInference"})


def test_network_failure_becomes_provider_error():
    session = FakeSession()
    session.error = requests.ConnectionError("offline")
    client = providers.HuggingFaceClient(AppConfig(), session=session)

    with pytest.raises(ProviderError, match="request failed"):
        client.infer_json("model", "key", {"inputs": "x"})


def test_huggingface_posts_to_model_url_with_bearer():
    session = FakeSession(FakeResponse(200, content=b"audio"))
    config = AppConfig(huggingface_url="https://hf.example/models")
    client = providers.HuggingFaceClient(config, session=session)

    assert client.infer_bytes("org/model", "hf_key", {"inputs": "x"}) == b"audio"
    call = session.calls[0]
    assert call["url"] == "https://hf.example/models/org/model"
    assert call["headers"]["Authorization"] == "Bearer hf_key"


def test_removebg_sends_multipart_file():
    session = FakeSession(FakeResponse(200, content=b"png"))
    client = providers.RemoveBgClient(AppConfig(), session=session)

    assert client.remove_background("rb_key", b"raw") == b"png"
    call = session.calls[0]
    assert call["headers"] == {"X-Api-Key": "rb_key"}
    assert call["files"]["image_file"] == ("image.png", b"raw")
