"""
App package - Application configuration and core utilities.
Contains settings, exceptions, and foundational application code.
"""

from app.config import settings
from app.exceptions import (
    AppError,
    InvalidRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    InsufficientCreditsError,
    InvalidLLMResponseError,
    LLMRequestFailedError,
)

__all__ = [
    "settings",
    "AppError",
    "InvalidRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "InsufficientCreditsError",
    "InvalidLLMResponseError",
    "LLMRequestFailedError",
]
