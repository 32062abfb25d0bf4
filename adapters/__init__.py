"""
Adapters package - External service connections.
HTTP adapters for the LLM vendors used by the AI pipeline.
"""

from adapters import llm

__all__ = [
    "llm",
]
