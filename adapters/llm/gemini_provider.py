"""Google Gemini generateContent adapter."""

import logging
import threading
import time
from typing import Any, Dict, List, Optional

import httpx

from adapters.llm.base import JSON_RESPONSE_FORMATS, LLMProvider, word_count
from app.exceptions import InvalidLLMResponseError
from domain.enums import FinishReason, MessageRole, ProviderName
from domain.schemas.llm_schemas import (
    Choice,
    LLMConfig,
    LLMRequest,
    LLMResponse,
    Message,
    Usage,
)

logger = logging.getLogger("pantrymind.llm.gemini")

GEMINI_MODELS_URL = "https://generativelanguage.googleapis.com/v1beta/models"

_FINISH_REASONS = {
    "STOP": FinishReason.STOP,
    "MAX_TOKENS": FinishReason.LENGTH,
    "SAFETY": FinishReason.CONTENT_FILTER,
    "RECITATION": FinishReason.CONTENT_FILTER,
}


def map_finish_reason(reason: Optional[str]) -> str:
    return _FINISH_REASONS.get((reason or "").upper(), FinishReason.STOP).value


def build_contents(messages: List[Message]) -> List[Dict[str, Any]]:
    """
    Convert unified messages to Gemini ``contents``.

    Gemini has no system role: system text is collected and prepended to the
    first user turn (or sent as its own user turn when there is none).
    """
    system_parts = [m.content for m in messages if m.role == MessageRole.SYSTEM]
    contents: List[Dict[str, Any]] = []
    folded = not system_parts

    for message in messages:
        if message.role == MessageRole.SYSTEM:
            continue
        text = message.content
        if message.role == MessageRole.USER and not folded:
            text = "\n\n".join(system_parts + [text])
            folded = True
        role = "model" if message.role == MessageRole.ASSISTANT else "user"
        contents.append({"role": role, "parts": [{"text": text}]})

    if not folded:
        contents.insert(0, {"role": "user", "parts": [{"text": "\n\n".join(system_parts)}]})
    return contents


class GeminiProvider(LLMProvider):
    """
    Gemini ``models/{model}:generateContent``.

    Retries wait a fixed ``retry_delay`` seconds between attempts.
    """

    name = ProviderName.GEMINI
    default_model = "gemini-1.5-flash"

    def __init__(self, config: LLMConfig, client: Optional[httpx.Client] = None):
        super().__init__(config, client)
        self.base_url = (config.base_url or GEMINI_MODELS_URL).rstrip("/")

    def _build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {
            "maxOutputTokens": request.max_tokens or self.config.max_tokens,
            "temperature": (
                request.temperature
                if request.temperature is not None
                else self.config.temperature
            ),
        }
        if request.top_p is not None:
            generation_config["topP"] = request.top_p
        if request.stop:
            generation_config["stopSequences"] = request.stop
        if request.response_format in JSON_RESPONSE_FORMATS:
            generation_config["responseMimeType"] = "application/json"

        return {
            "contents": build_contents(request.messages),
            "generationConfig": generation_config,
        }

    def _endpoint(self, model: str) -> str:
        return f"{self.base_url}/{model}:generateContent"

    def chat(
        self, request: LLMRequest, cancel_event: Optional[threading.Event] = None
    ) -> LLMResponse:
        model = request.model or self.model()
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.config.api_key}
        headers.update(self.config.default_headers)
        delay = self.config.retry_delay

        response = self._post_with_retry(
            self._endpoint(model),
            self._build_payload(request),
            headers,
            backoff=lambda attempt: delay,
            cancel_event=cancel_event,
        )
        self._raise_for_vendor_error(response)

        try:
            body = response.json()
        except ValueError as exc:
            raise InvalidLLMResponseError(
                "Malformed response from gemini", raw_response=response.text
            ) from exc
        return self._to_unified(body, model, raw=response.text)

    def _to_unified(self, body: Dict[str, Any], model: str, raw: str = "") -> LLMResponse:
        candidates = body.get("candidates") or []
        if not candidates:
            raise InvalidLLMResponseError("Gemini returned no candidates", raw_response=raw)

        choices = []
        for index, candidate in enumerate(candidates):
            parts = (candidate.get("content") or {}).get("parts") or []
            text = "".join(part.get("text", "") for part in parts)
            choices.append(
                Choice(
                    index=index,
                    message=Message(role=MessageRole.ASSISTANT, content=text),
                    finish_reason=map_finish_reason(candidate.get("finishReason")),
                )
            )

        meta = body.get("usageMetadata") or {}
        usage = Usage(
            prompt_tokens=meta.get("promptTokenCount", 0),
            completion_tokens=meta.get("candidatesTokenCount", 0),
            total_tokens=meta.get("totalTokenCount", 0),
        )
        created = int(time.time())
        return LLMResponse(
            id=f"gemini-{created}",
            created=created,
            model=model,
            choices=choices,
            usage=usage,
        )

    def estimate_tokens(self, text: str) -> int:
        return int(word_count(text) * 1.3)
