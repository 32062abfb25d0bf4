"""
LLM vendor adapters behind a single chat contract.
"""

from adapters.llm.base import LLMProvider
from adapters.llm.factory import ProviderFactory
from adapters.llm.gemini_provider import GeminiProvider
from adapters.llm.openai_provider import OpenAIProvider

__all__ = [
    "LLMProvider",
    "ProviderFactory",
    "GeminiProvider",
    "OpenAIProvider",
]
