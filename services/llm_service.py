"""
LLM registry service.

Holds the configured providers, tracks which one is active and dispatches
unified chat requests. One instance lives on ``app.state`` for the whole
process; the active-provider name is instance state, never module state.
"""

import logging
import threading
from typing import Dict, List, Optional

import httpx

from adapters.llm import LLMProvider, ProviderFactory
from app.config import Settings
from app.exceptions import InvalidRequestError, LLMRequestFailedError
from domain.enums import MessageRole, ProviderName
from domain.schemas.llm_schemas import (
    ChatRequest,
    ChatResponse,
    GenerationOptions,
    LLMConfig,
    LLMRequest,
    LLMResponse,
    Message,
    ProviderInfo,
)

logger = logging.getLogger("pantrymind.llm")


class LLMService:
    """Named provider registry with one active provider."""

    def __init__(self, factory: Optional[ProviderFactory] = None):
        self.factory = factory or ProviderFactory()
        self._configs: Dict[str, LLMConfig] = {}
        self._providers: Dict[str, LLMProvider] = {}
        self._active: Optional[str] = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def add_provider_config(
        self, name: str, config: LLMConfig, client: Optional[httpx.Client] = None
    ) -> None:
        """
        Register (or replace) a provider under ``name``.

        The config is validated by building the provider. The first provider
        added becomes the active one.

        Raises:
            InvalidRequestError: unsupported vendor or invalid config
        """
        if not self.factory.is_supported(config.provider):
            raise InvalidRequestError(f"Provider '{config.provider.value}' is not supported")
        provider = self.factory.create(config, client)

        with self._lock:
            previous = self._providers.pop(name, None)
            self._configs[name] = config
            self._providers[name] = provider
            if self._active is None:
                self._active = name
        if previous is not None:
            previous.close()
        logger.info("Configured LLM provider %s (model %s)", name, provider.model())

    def set_provider(self, name: str) -> None:
        with self._lock:
            if name not in self._configs:
                raise InvalidRequestError(f"Provider '{name}' is not configured")
            self._active = name
        logger.info("Active LLM provider set to %s", name)

    def current_provider(self) -> Optional[str]:
        return self._active

    def available_providers(self) -> List[str]:
        """Vendors this build can talk to, configured or not"""
        return self.factory.supported()

    def configured_providers(self) -> List[str]:
        return list(self._configs)

    def provider_info(self) -> Optional[ProviderInfo]:
        if self._active is None:
            return None
        provider = self._get_provider(self._active)
        config = self._configs[self._active]
        return ProviderInfo(
            name=provider.name.value,
            model=provider.model(),
            provider=self._active,
            timeout=config.timeout,
        )

    def close(self) -> None:
        with self._lock:
            providers = list(self._providers.values())
            self._providers.clear()
        for provider in providers:
            provider.close()

    def _get_provider(self, name: Optional[str] = None) -> LLMProvider:
        key = name or self._active
        if key is None:
            raise LLMRequestFailedError("No active LLM provider configured")
        provider = self._providers.get(key)
        if provider is None:
            raise InvalidRequestError(f"Provider '{key}' is not configured")
        return provider

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def process_request(
        self, request: LLMRequest, cancel_event: Optional[threading.Event] = None
    ) -> LLMResponse:
        """Send ``request`` to its own provider override, else the active provider"""
        if request.provider is not None:
            return self.process_request_with_provider(
                request, request.provider.value, cancel_event
            )

        provider = self._get_provider()
        if not request.model:
            request = request.model_copy(update={"model": provider.model()})
        return provider.chat(request, cancel_event)

    def process_request_with_provider(
        self,
        request: LLMRequest,
        provider_name: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> LLMResponse:
        provider = self._get_provider(provider_name)
        if not request.model:
            request = request.model_copy(update={"model": provider.model()})

        response = provider.chat(request, cancel_event)
        response.metadata["used_provider"] = provider_name
        return response

    def process_chat_request(
        self, chat: ChatRequest, cancel_event: Optional[threading.Event] = None
    ) -> ChatResponse:
        messages = [Message(role=MessageRole.USER, content=chat.message)]
        if chat.context:
            messages.insert(
                0, Message(role=MessageRole.SYSTEM, content=f"Context: {chat.context}")
            )
        request = LLMRequest(messages=messages, provider=chat.provider)

        used_provider = chat.provider.value if chat.provider else self._active
        response = self.process_request(request, cancel_event)
        return ChatResponse(
            response=response.first_content(),
            provider=used_provider or "",
            model=response.model,
            usage=response.usage,
        )

    def generate_text(
        self,
        prompt: str,
        options: Optional[GenerationOptions] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> LLMResponse:
        """Single user-turn completion"""
        options = options or GenerationOptions()
        request = LLMRequest(
            messages=[Message(role=MessageRole.USER, content=prompt)],
            max_tokens=options.max_tokens,
            temperature=options.temperature,
            top_p=options.top_p,
            response_format=options.response_format,
            provider=options.provider,
        )
        return self.process_request(request, cancel_event)

    def create_chat_request(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[GenerationOptions] = None,
    ) -> LLMRequest:
        options = options or GenerationOptions()
        messages = []
        if system_prompt:
            messages.append(Message(role=MessageRole.SYSTEM, content=system_prompt))
        if user_prompt:
            messages.append(Message(role=MessageRole.USER, content=user_prompt))
        return LLMRequest(
            messages=messages,
            max_tokens=options.max_tokens,
            temperature=options.temperature,
            top_p=options.top_p,
            response_format=options.response_format,
            provider=options.provider,
        )

    def estimate_tokens(self, text: str) -> int:
        return self._get_provider().estimate_tokens(text)


def build_llm_service(config: Settings) -> LLMService:
    """
    Registry pre-loaded from the environment.

    Gemini is registered before OpenAI, so it becomes the default when both
    keys are present. A provider whose config is rejected is logged and skipped.
    """
    service = LLMService()
    defaults = dict(
        max_tokens=config.llm_max_tokens,
        temperature=config.llm_temperature,
        timeout=config.llm_timeout_sec,
        retry_attempts=config.llm_retry_attempts,
        retry_delay=config.llm_retry_delay_sec,
    )

    candidates = [
        (
            ProviderName.GEMINI,
            config.gemini_api_key,
            config.gemini_model,
            config.gemini_base_url,
        ),
        (
            ProviderName.OPENAI,
            config.openai_api_key,
            config.openai_model,
            config.openai_base_url,
        ),
    ]
    for name, api_key, model, base_url in candidates:
        if not api_key:
            continue
        llm_config = LLMConfig(
            provider=name, api_key=api_key, model=model, base_url=base_url, **defaults
        )
        try:
            service.add_provider_config(name.value, llm_config)
        except InvalidRequestError as exc:
            logger.error("Could not configure %s provider: %s", name.value, exc.message)

    if service.current_provider() is None:
        logger.warning("No LLM provider configured; AI endpoints will fail")
    return service
