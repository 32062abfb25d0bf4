"""
Tests for the OpenAI and Gemini adapters against httpx.MockTransport vendors.

Covers payload shape, retry on transport errors and 5xx replies, vendor
error surfacing, cancellation, Gemini's system-prompt folding and finish
reason mapping, and the provider factory.
"""

import json
import threading

import httpx
import pytest

from adapters.llm import GeminiProvider, OpenAIProvider, ProviderFactory
from adapters.llm.gemini_provider import build_contents, map_finish_reason
from app.exceptions import (
    InvalidLLMResponseError,
    InvalidRequestError,
    LLMRequestFailedError,
    RequestCancelledError,
)
from domain.enums import MessageRole, ProviderName
from domain.schemas.llm_schemas import LLMConfig, LLMRequest, Message

from test_fixtures import ScriptedVendor, mock_client


def openai_config(**overrides) -> LLMConfig:
    values = dict(
        provider=ProviderName.OPENAI,
        api_key="sk-test",
        model="gpt-test",
        retry_attempts=2,
        retry_delay=0,
    )
    values.update(overrides)
    return LLMConfig(**values)


def gemini_config(**overrides) -> LLMConfig:
    values = dict(
        provider=ProviderName.GEMINI,
        api_key="gm-test",
        model="gemini-test",
        base_url="https://gemini.test/v1beta/models",
        retry_attempts=2,
        retry_delay=0,
    )
    values.update(overrides)
    return LLMConfig(**values)


def chat_request(**overrides) -> LLMRequest:
    values = dict(
        messages=[
            Message(role=MessageRole.SYSTEM, content="You are a chef."),
            Message(role=MessageRole.USER, content="Dinner idea?"),
        ]
    )
    values.update(overrides)
    return LLMRequest(**values)


def gemini_reply(text="Risotto", finish="STOP") -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "candidates": [
                {"content": {"parts": [{"text": text}], "role": "model"}, "finishReason": finish}
            ],
            "usageMetadata": {
                "promptTokenCount": 11,
                "candidatesTokenCount": 7,
                "totalTokenCount": 18,
            },
        },
    )


# =============================================================================
# OPENAI
# =============================================================================


def test_openai_chat_sends_auth_and_optional_fields_only_when_set():
    vendor = ScriptedVendor("Try a stir fry.")
    provider = OpenAIProvider(openai_config(), client=mock_client(vendor))

    response = provider.chat(chat_request(top_p=0.9, response_format="json"))

    assert response.first_content() == "Try a stir fry."
    assert response.usage.total_tokens == 460
    sent = vendor.requests[0]
    assert sent.headers["Authorization"] == "Bearer sk-test"
    body = vendor.payload()
    assert body["model"] == "gpt-test"
    assert body["top_p"] == 0.9
    assert body["response_format"] == {"type": "json_object"}
    assert "frequency_penalty" not in body
    assert "stop" not in body
    assert [m["role"] for m in body["messages"]] == ["system", "user"]


def test_openai_retries_5xx_then_succeeds():
    vendor = ScriptedVendor(503, 502, "Recovered")
    provider = OpenAIProvider(openai_config(retry_attempts=2), client=mock_client(vendor))

    response = provider.chat(chat_request())

    assert response.first_content() == "Recovered"
    assert vendor.calls == 3


def test_openai_retries_transport_errors():
    vendor = ScriptedVendor(httpx.ConnectError("connection refused"), "Back online")
    provider = OpenAIProvider(openai_config(), client=mock_client(vendor))

    assert provider.chat(chat_request()).first_content() == "Back online"
    assert vendor.calls == 2


def test_openai_gives_up_after_retry_budget():
    vendor = ScriptedVendor(httpx.ReadTimeout("timed out"))
    provider = OpenAIProvider(openai_config(retry_attempts=2), client=mock_client(vendor))

    with pytest.raises(LLMRequestFailedError):
        provider.chat(chat_request())

    assert vendor.calls == 3


def test_openai_final_5xx_surfaces_vendor_message():
    vendor = ScriptedVendor(500)
    provider = OpenAIProvider(openai_config(retry_attempts=1), client=mock_client(vendor))

    with pytest.raises(LLMRequestFailedError) as exc_info:
        provider.chat(chat_request())

    assert "upstream said 500" in exc_info.value.message
    assert vendor.calls == 2


def test_openai_4xx_is_not_retried():
    vendor = ScriptedVendor(
        httpx.Response(401, json={"error": {"message": "Incorrect API key provided"}})
    )
    provider = OpenAIProvider(openai_config(), client=mock_client(vendor))

    with pytest.raises(LLMRequestFailedError) as exc_info:
        provider.chat(chat_request())

    assert "Incorrect API key provided" in exc_info.value.message
    assert exc_info.value.details["status"] == 401
    assert vendor.calls == 1


def test_openai_malformed_body_is_invalid_response():
    vendor = ScriptedVendor(httpx.Response(200, content=b"<html>oops</html>"))
    provider = OpenAIProvider(openai_config(), client=mock_client(vendor))

    with pytest.raises(InvalidLLMResponseError):
        provider.chat(chat_request())


def test_cancelled_before_dispatch_makes_no_call():
    vendor = ScriptedVendor("never sent")
    provider = OpenAIProvider(openai_config(), client=mock_client(vendor))
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(RequestCancelledError) as exc_info:
        provider.chat(chat_request(), cancel_event=cancel)

    assert exc_info.value.http_status == 499
    assert vendor.calls == 0


def test_cancellation_interrupts_backoff_wait():
    """A cancel raised during the first attempt stops the retry loop"""
    cancel = threading.Event()

    calls = []

    def handler(request):
        calls.append(request)
        cancel.set()
        return httpx.Response(503, json={"error": {"message": "busy"}})

    provider = OpenAIProvider(
        openai_config(retry_attempts=3, retry_delay=30), client=mock_client(handler)
    )

    with pytest.raises(RequestCancelledError):
        provider.chat(chat_request(), cancel_event=cancel)

    assert len(calls) == 1


def test_openai_token_estimate():
    provider = OpenAIProvider(openai_config(), client=mock_client(ScriptedVendor("x")))

    assert provider.estimate_tokens("one two three four") == 4 + len("one two three four") // 4


# =============================================================================
# GEMINI
# =============================================================================


def test_build_contents_folds_system_into_first_user_turn():
    contents = build_contents(
        [
            Message(role=MessageRole.SYSTEM, content="Rule A"),
            Message(role=MessageRole.SYSTEM, content="Rule B"),
            Message(role=MessageRole.USER, content="Hello"),
            Message(role=MessageRole.ASSISTANT, content="Hi"),
            Message(role=MessageRole.USER, content="Recipe?"),
        ]
    )

    assert contents == [
        {"role": "user", "parts": [{"text": "Rule A\n\nRule B\n\nHello"}]},
        {"role": "model", "parts": [{"text": "Hi"}]},
        {"role": "user", "parts": [{"text": "Recipe?"}]},
    ]


def test_build_contents_system_only_becomes_user_turn():
    contents = build_contents([Message(role=MessageRole.SYSTEM, content="Rule A")])

    assert contents == [{"role": "user", "parts": [{"text": "Rule A"}]}]


@pytest.mark.parametrize(
    "vendor_reason,expected",
    [
        ("STOP", "stop"),
        ("MAX_TOKENS", "length"),
        ("SAFETY", "content_filter"),
        ("RECITATION", "content_filter"),
        ("OTHER", "stop"),
        (None, "stop"),
    ],
)
def test_gemini_finish_reason_mapping(vendor_reason, expected):
    assert map_finish_reason(vendor_reason) == expected


def test_gemini_chat_endpoint_payload_and_unified_response():
    vendor = ScriptedVendor(gemini_reply("Risotto", "MAX_TOKENS"))
    provider = GeminiProvider(gemini_config(), client=mock_client(vendor))

    response = provider.chat(chat_request(max_tokens=256, response_format="json"))

    sent = vendor.requests[0]
    assert str(sent.url) == "https://gemini.test/v1beta/models/gemini-test:generateContent"
    assert sent.headers["x-goog-api-key"] == "gm-test"
    body = json.loads(sent.content)
    assert body["generationConfig"]["maxOutputTokens"] == 256
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["contents"][0]["parts"][0]["text"] == "You are a chef.\n\nDinner idea?"

    assert response.first_content() == "Risotto"
    assert response.choices[0].finish_reason == "length"
    assert response.choices[0].message.role == MessageRole.ASSISTANT
    assert response.usage.prompt_tokens == 11
    assert response.usage.total_tokens == 18
    assert response.model == "gemini-test"
    assert response.id.startswith("gemini-")


def test_gemini_no_candidates_is_invalid_response():
    vendor = ScriptedVendor(httpx.Response(200, json={"candidates": []}))
    provider = GeminiProvider(gemini_config(), client=mock_client(vendor))

    with pytest.raises(InvalidLLMResponseError):
        provider.chat(chat_request())


def test_gemini_retries_5xx():
    vendor = ScriptedVendor(500, gemini_reply("ok"))
    provider = GeminiProvider(gemini_config(), client=mock_client(vendor))

    assert provider.chat(chat_request()).first_content() == "ok"
    assert vendor.calls == 2


def test_gemini_token_estimate():
    provider = GeminiProvider(gemini_config(), client=mock_client(ScriptedVendor("x")))

    assert provider.estimate_tokens("one two three four five six seven eight nine ten") == 13


# =============================================================================
# FACTORY
# =============================================================================


def test_factory_supports_openai_and_gemini():
    factory = ProviderFactory()

    assert sorted(factory.supported()) == ["gemini", "openai"]
    assert factory.is_supported(ProviderName.GEMINI)
    assert not factory.is_supported(ProviderName.OLLAMA)


def test_factory_rejects_unsupported_vendor():
    with pytest.raises(InvalidRequestError):
        ProviderFactory().create(LLMConfig(provider=ProviderName.ANTHROPIC, api_key="k"))


def test_factory_rejects_missing_api_key():
    with pytest.raises(InvalidRequestError) as exc_info:
        ProviderFactory().create(openai_config(api_key=""))

    assert "Invalid configuration for provider 'openai'" in exc_info.value.message


def test_factory_default_model_applies():
    provider = ProviderFactory().create(
        openai_config(model=""), client=mock_client(ScriptedVendor("x"))
    )

    assert provider.model() == "gpt-3.5-turbo"
