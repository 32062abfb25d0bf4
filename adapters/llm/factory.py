"""Constructs configured LLM providers by vendor name."""

import logging
from typing import Callable, Dict, List, Optional

import httpx

from adapters.llm.base import LLMProvider
from adapters.llm.gemini_provider import GeminiProvider
from adapters.llm.openai_provider import OpenAIProvider
from app.exceptions import InvalidRequestError
from domain.enums import ProviderName
from domain.schemas.llm_schemas import LLMConfig

logger = logging.getLogger("pantrymind.llm")

ProviderConstructor = Callable[[LLMConfig, Optional[httpx.Client]], LLMProvider]


class ProviderFactory:
    """Registry of provider constructors; OpenAI and Gemini ship registered."""

    def __init__(self):
        self._constructors: Dict[ProviderName, ProviderConstructor] = {}
        self.register(ProviderName.OPENAI, OpenAIProvider)
        self.register(ProviderName.GEMINI, GeminiProvider)

    def register(self, name: ProviderName, constructor: ProviderConstructor) -> None:
        self._constructors[ProviderName(name)] = constructor

    def create(
        self, config: LLMConfig, client: Optional[httpx.Client] = None
    ) -> LLMProvider:
        """
        Build and validate a provider for ``config.provider``.

        Raises:
            InvalidRequestError: vendor not supported, or config invalid
        """
        constructor = self._constructors.get(config.provider)
        if constructor is None:
            raise InvalidRequestError(f"Provider '{config.provider.value}' is not supported")

        provider = constructor(config, client)
        try:
            provider.validate_config()
        except InvalidRequestError as exc:
            provider.close()
            raise InvalidRequestError(
                f"Invalid configuration for provider '{config.provider.value}': {exc.message}"
            ) from exc
        return provider

    def supported(self) -> List[str]:
        return [name.value for name in self._constructors]

    def is_supported(self, name: ProviderName) -> bool:
        try:
            return ProviderName(name) in self._constructors
        except ValueError:
            return False
