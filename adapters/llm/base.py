"""
Common plumbing for LLM vendor adapters: the provider contract and the
retrying HTTP sender.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import httpx

from app.exceptions import (
    InvalidRequestError,
    LLMRequestFailedError,
    RequestCancelledError,
)
from domain.enums import ProviderName
from domain.schemas.llm_schemas import LLMConfig, LLMRequest, LLMResponse

logger = logging.getLogger("pantrymind.llm")

JSON_RESPONSE_FORMATS = {"json", "json_object"}


class LLMProvider(ABC):
    """
    Unified chat contract implemented once per vendor.

    Each instance owns one ``httpx.Client`` configured with the provider
    timeout; call ``close`` when the provider is discarded.
    """

    name: ProviderName
    default_model: str = ""

    def __init__(self, config: LLMConfig, client: Optional[httpx.Client] = None):
        self.config = config
        self._client = client or httpx.Client(timeout=config.timeout)

    @abstractmethod
    def chat(
        self, request: LLMRequest, cancel_event: Optional[threading.Event] = None
    ) -> LLMResponse:
        """Send one chat request and return the normalized response"""

    @abstractmethod
    def estimate_tokens(self, text: str) -> int:
        """Cheap vendor-specific token estimate"""

    def model(self) -> str:
        return self.config.model or self.default_model

    def validate_config(self) -> None:
        """Raise InvalidRequestError when the config cannot work for this vendor"""
        if not self.config.api_key:
            raise InvalidRequestError(f"API key is required for provider {self.name.value}")
        if not self.model():
            raise InvalidRequestError(f"Model is required for provider {self.name.value}")

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Retry loop
    # ------------------------------------------------------------------

    def _post_with_retry(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Dict[str, str],
        backoff: Callable[[int], float],
        cancel_event: Optional[threading.Event] = None,
    ) -> httpx.Response:
        """
        POST ``payload`` retrying transport errors and 5xx replies.

        Makes at most ``retry_attempts + 1`` attempts. ``backoff(attempt)``
        gives the wait after the 0-based ``attempt`` failed. A set
        ``cancel_event`` stops the loop before the next attempt or during the
        wait. The last response is returned even when it is a 5xx; callers
        turn non-200 replies into errors.
        """
        max_attempts = max(self.config.retry_attempts, 0) + 1
        last_error: Optional[Exception] = None
        response: Optional[httpx.Response] = None

        for attempt in range(max_attempts):
            _raise_if_cancelled(cancel_event)
            try:
                response = self._client.post(url, json=payload, headers=headers)
                last_error = None
                if response.status_code < 500:
                    return response
                logger.warning(
                    "%s returned HTTP %d (attempt %d/%d)",
                    self.name.value,
                    response.status_code,
                    attempt + 1,
                    max_attempts,
                )
            except httpx.TransportError as exc:
                last_error = exc
                response = None
                logger.warning(
                    "%s transport error (attempt %d/%d): %s",
                    self.name.value,
                    attempt + 1,
                    max_attempts,
                    exc,
                )

            if attempt < max_attempts - 1:
                _wait(backoff(attempt), cancel_event)

        if response is None:
            raise LLMRequestFailedError(
                f"{self.name.value} request failed after {max_attempts} attempts: {last_error}"
            )
        return response

    def _raise_for_vendor_error(self, response: httpx.Response) -> None:
        if response.status_code == 200:
            return
        message = _vendor_error_message(response)
        raise LLMRequestFailedError(
            f"{self.name.value} API error (status {response.status_code}): {message}",
            details={"provider": self.name.value, "status": response.status_code},
        )


def _raise_if_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise RequestCancelledError()


def _wait(delay: float, cancel_event: Optional[threading.Event]) -> None:
    if delay <= 0:
        _raise_if_cancelled(cancel_event)
        return
    if cancel_event is None:
        time.sleep(delay)
        return
    if cancel_event.wait(delay):
        raise RequestCancelledError()


def _vendor_error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of a vendor error body, else the raw text"""
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return response.text[:500]


def word_count(text: str) -> int:
    return len(text.split())
