"""Free-form metered chat with the active (or requested) LLM provider."""

import logging
import threading
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from domain.schemas.llm_schemas import ChatRequest, ChatResponse
from services.credit_service import CreditService
from services.llm_service import LLMService

logger = logging.getLogger("pantrymind.chat")

RECIPE_CHAT_DESCRIPTION = "AI request - recipe chat"


class ChatService:
    @staticmethod
    def chat(
        db: Session,
        llm: LLMService,
        request: ChatRequest,
        user_id: UUID,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChatResponse:
        """Answer one chat message, then debit one credit. Nothing is stored."""
        response = llm.process_chat_request(request, cancel_event)
        CreditService.consume_credit(db, user_id, RECIPE_CHAT_DESCRIPTION)
        logger.info(
            "Chat answered for user %s by %s (%d tokens)",
            user_id,
            response.provider,
            response.usage.total_tokens,
        )
        return response
