"""OpenAI chat-completions adapter."""

import logging
import threading
from typing import Any, Dict, Optional

import httpx

from adapters.llm.base import JSON_RESPONSE_FORMATS, LLMProvider, word_count
from app.exceptions import InvalidLLMResponseError
from domain.enums import ProviderName
from domain.schemas.llm_schemas import LLMConfig, LLMRequest, LLMResponse

logger = logging.getLogger("pantrymind.llm.openai")

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIProvider(LLMProvider):
    """
    OpenAI-compatible chat completions.

    Retries back off arithmetically: attempt ``k`` (0-based) waits
    ``(k + 1) * retry_delay`` seconds before the next try.
    """

    name = ProviderName.OPENAI
    default_model = "gpt-3.5-turbo"

    def __init__(self, config: LLMConfig, client: Optional[httpx.Client] = None):
        super().__init__(config, client)
        self.base_url = config.base_url or OPENAI_CHAT_URL

    def _build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.model or self.model(),
            "messages": [
                {"role": m.role.value, "content": m.content} for m in request.messages
            ],
            "max_tokens": request.max_tokens or self.config.max_tokens,
            "temperature": (
                request.temperature
                if request.temperature is not None
                else self.config.temperature
            ),
        }
        optional = {
            "top_p": request.top_p,
            "frequency_penalty": request.frequency_penalty,
            "presence_penalty": request.presence_penalty,
            "stop": request.stop or None,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        if request.stream:
            payload["stream"] = True
        if request.response_format in JSON_RESPONSE_FORMATS:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }
        headers.update(self.config.default_headers)
        return headers

    def chat(
        self, request: LLMRequest, cancel_event: Optional[threading.Event] = None
    ) -> LLMResponse:
        payload = self._build_payload(request)
        delay = self.config.retry_delay
        response = self._post_with_retry(
            self.base_url,
            payload,
            self._headers(),
            backoff=lambda attempt: (attempt + 1) * delay,
            cancel_event=cancel_event,
        )
        self._raise_for_vendor_error(response)

        try:
            result = LLMResponse.model_validate(response.json())
        except ValueError as exc:
            raise InvalidLLMResponseError(
                "Malformed response from openai", raw_response=response.text
            ) from exc
        logger.debug(
            "openai completion %s used %d tokens", result.id, result.usage.total_tokens
        )
        return result

    def estimate_tokens(self, text: str) -> int:
        return word_count(text) + len(text) // 4
