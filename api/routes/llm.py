"""LLM provider management routes"""

from fastapi import APIRouter, Depends
import logging

from api.dependencies import AuthContext, get_current_user, get_llm_service, require_admin
from domain.schemas.llm_schemas import (
    EstimateTokensRequest,
    EstimateTokensResponse,
    ProvidersResponse,
    SetProviderRequest,
)
from services.llm_service import LLMService

router = APIRouter(prefix="/llm", tags=["LLM"])
logger = logging.getLogger("pantrymind.api.llm")


@router.get("/providers", response_model=ProvidersResponse)
def list_providers(
    auth: AuthContext = Depends(get_current_user),
    llm: LLMService = Depends(get_llm_service),
):
    """Supported vendors, the active one and its settings."""
    return ProvidersResponse(
        available=llm.available_providers(),
        current=llm.current_provider(),
        info=llm.provider_info(),
    )


@router.put("/provider", response_model=ProvidersResponse)
def set_provider(
    payload: SetProviderRequest,
    auth: AuthContext = Depends(require_admin),
    llm: LLMService = Depends(get_llm_service),
):
    """Switch the active provider (admin only). 400 if it is not configured."""
    llm.set_provider(payload.provider.value)
    return ProvidersResponse(
        available=llm.available_providers(),
        current=llm.current_provider(),
        info=llm.provider_info(),
    )


@router.post("/estimate-tokens", response_model=EstimateTokensResponse)
def estimate_tokens(
    payload: EstimateTokensRequest,
    auth: AuthContext = Depends(get_current_user),
    llm: LLMService = Depends(get_llm_service),
):
    return EstimateTokensResponse(
        text=payload.text,
        estimated_tokens=llm.estimate_tokens(payload.text),
        characters=len(payload.text),
        words=len(payload.text.split()),
    )
