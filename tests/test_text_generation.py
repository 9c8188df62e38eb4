import asyncio

import httpx
import pytest

from sinta_reviewer.error_handling import ConfigurationError, InputValidationError, ModelInvocationError
from sinta_reviewer.models import ConversationTurn, Speaker
from sinta_reviewer.utils.config import Config, GenerationProfile
from sinta_reviewer.utils.text_generation import GeminiClient, InlineAttachment


def test_missing_api_key_refused():
    with pytest.raises(ConfigurationError):
        GeminiClient(api_key="")


def test_from_config_validates():
    config = Config(gemini_key="", model="gemini-2.0-flash", base_url="https://example.test",
                    request_timeout=10, output_dir="./reports")
    with pytest.raises(ConfigurationError):
        GeminiClient.from_config(config)


def test_complete_sends_single_user_turn(make_client):
    client, recorder = make_client("Hello back")
    reply = asyncio.run(client.complete("Hello", profile=GenerationProfile(temperature=0.4, max_output_tokens=2048)))

    assert reply == "Hello back"
    request = recorder.requests[0]
    assert request.url.path.endswith("/models/gemini-2.0-flash:generateContent")
    assert request.headers["x-goog-api-key"] == "test-key"
    assert recorder.payloads[0] == {
        "contents": [{"role": "user", "parts": [{"text": "Hello"}]}],
        "generationConfig": {"temperature": 0.4, "maxOutputTokens": 2048},
    }


def test_default_profile_omits_generation_config(make_client):
    client, recorder = make_client("ok")
    asyncio.run(client.complete("Hello", profile=GenerationProfile()))
    assert "generationConfig" not in recorder.payloads[0]


def test_multimodal_attaches_inline_data(make_client):
    client, recorder = make_client("Extracted text")
    attachment = InlineAttachment("image/jpeg", "aGVsbG8=")
    assert client.complete_multimodal_sync("Read this", attachment) == "Extracted text"

    parts = recorder.payloads[0]["contents"][0]["parts"]
    assert parts == [{"text": "Read this"}, {"inlineData": {"mimeType": "image/jpeg", "data": "aGVsbG8="}}]


def test_unsupported_attachment_type():
    with pytest.raises(InputValidationError):
        InlineAttachment("image/png", "aGVsbG8=")


def test_chat_sends_history_and_system_instruction(make_client):
    client, recorder = make_client("Sure, here is a revision.")
    history = [
        ConversationTurn(Speaker.REQUESTER, "Review my abstract"),
        ConversationTurn(Speaker.RESPONDER, "It lacks results."),
    ]
    reply = asyncio.run(client.chat("Be a reviewer", history, "Rewrite it",
                                    profile=GenerationProfile(temperature=0.7, max_output_tokens=1024)))

    assert reply == "Sure, here is a revision."
    payload = recorder.payloads[0]
    assert payload["systemInstruction"] == {"parts": [{"text": "Be a reviewer"}]}
    assert [c["role"] for c in payload["contents"]] == ["user", "model", "user"]
    assert payload["contents"][-1]["parts"][0]["text"] == "Rewrite it"


def test_chat_rejects_responder_first_history_before_request(make_client):
    client, recorder = make_client("never sent")
    history = [ConversationTurn(Speaker.RESPONDER, "Hello, I'm your reviewer")]
    with pytest.raises(InputValidationError):
        client.chat_sync("Be a reviewer", history, "Hi")
    assert recorder.requests == []


def test_empty_prompt_rejected_before_request(make_client):
    client, recorder = make_client("never sent")
    with pytest.raises(InputValidationError):
        client.complete_sync("   ")
    assert recorder.requests == []


def test_http_error_is_wrapped_without_retry(make_client):
    error = httpx.Response(429, json={"error": {"code": 429, "message": "Resource has been exhausted"}})
    client, recorder = make_client(error)
    with pytest.raises(ModelInvocationError) as exc:
        client.complete_sync("Hello")

    assert exc.value.status_code == 429
    assert "Resource has been exhausted" in str(exc.value)
    assert isinstance(exc.value.__cause__, httpx.HTTPStatusError)
    assert len(recorder.requests) == 1


def test_network_error_is_wrapped(make_client):
    client, recorder = make_client(httpx.ConnectError("connection refused"))
    with pytest.raises(ModelInvocationError) as exc:
        client.complete_sync("Hello")
    assert exc.value.status_code is None
    assert isinstance(exc.value.__cause__, httpx.ConnectError)


def test_timeout_is_wrapped(make_client):
    client, _ = make_client(httpx.ReadTimeout("read timed out"))
    with pytest.raises(ModelInvocationError) as exc:
        client.complete_sync("Hello")
    assert "timeout" in str(exc.value)


def test_blocked_prompt_raises(make_client):
    blocked = httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})
    client, _ = make_client(blocked)
    with pytest.raises(ModelInvocationError) as exc:
        client.complete_sync("Hello")
    assert "SAFETY" in str(exc.value)


def test_non_json_body_raises(make_client):
    client, _ = make_client(httpx.Response(200, text="<html>gateway</html>"))
    with pytest.raises(ModelInvocationError):
        client.complete_sync("Hello")


def test_multi_part_reply_is_joined(make_client):
    body = {"candidates": [{"content": {"parts": [{"text": "Part one. "}, {"text": "Part two."}]}}]}
    client, _ = make_client(httpx.Response(200, json=body))
    assert client.complete_sync("Hello") == "Part one. Part two."


@pytest.mark.parametrize("body", [
    [],
    {"candidates": "oops"},
    {"candidates": ["oops"]},
    {"candidates": [{"content": None}]},
    {"candidates": [{"content": "text"}]},
    {"candidates": [{"content": {"parts": "text"}}]},
    {"candidates": [{"content": {"parts": [{"text": None}]}}]},
    {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
])
def test_malformed_success_body_raises_invocation_error(make_client, body):
    client, _ = make_client(httpx.Response(200, json=body))
    with pytest.raises(ModelInvocationError) as exc:
        client.complete_sync("Hello")
    assert exc.value.status_code == 200
    assert exc.value.response_body
