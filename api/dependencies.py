"""
API dependencies for dependency injection
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenRoleError, InsufficientCreditsError, UnauthorizedError
from domain.enums import UserRole
from domain.models import get_db_session
from repositories import UserRepository
from services.credit_service import CreditService
from services.llm_service import LLMService
from services.token_service import decode_access_token

logger = logging.getLogger("pantrymind.api.auth")

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity resolved from the bearer token"""

    user_id: UUID
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def get_llm_service(request: Request) -> LLMService:
    """The process-wide LLM registry stored on ``app.state``"""
    return request.app.state.llm_service


def get_cancel_event(request: Request) -> threading.Event:
    """Event set when the application shuts down; aborts in-flight LLM retries"""
    return request.app.state.shutdown_event


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db_session),
) -> AuthContext:
    """
    Resolve the caller from ``Authorization: Bearer <jwt>``.

    Raises:
        UnauthorizedError: header missing, token invalid, or user gone
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing bearer token")

    claims = decode_access_token(credentials.credentials)
    user = UserRepository(db).get_by_id(claims["sub"])
    if user is None:
        logger.warning("Token for unknown or deleted user %s", claims["sub"])
        raise UnauthorizedError("User not found")
    return AuthContext(user_id=user.id, email=user.email, role=user.role)


def require_admin(auth: AuthContext = Depends(get_current_user)) -> AuthContext:
    if not auth.is_admin:
        raise ForbiddenRoleError()
    return auth


def require_credits(
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
) -> AuthContext:
    """
    Advisory balance check run before a metered operation starts.

    Never debits; the orchestrator's debit after the LLM call is the
    authoritative check.
    """
    wallet = CreditService.get_wallet(db, auth.user_id)
    if wallet.balance <= 0:
        logger.info("Rejected metered request from user %s: no credits", auth.user_id)
        raise InsufficientCreditsError()
    return auth
