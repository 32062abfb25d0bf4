"""Credit wallet and ledger routes"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies import AuthContext, get_current_user, require_admin
from domain.mappers import CreditMapper
from domain.models import get_db_session
from domain.schemas.credit_schemas import (
    AddCreditsRequest,
    TransactionFilter,
    TransactionListResponse,
    WalletResponse,
)
from services.credit_service import CreditService

router = APIRouter(prefix="/credits", tags=["Credits"])
logger = logging.getLogger("pantrymind.api.credits")


@router.get("/wallet", response_model=WalletResponse)
def get_wallet(
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Caller's wallet; created with the initial allocation on first access."""
    wallet = CreditService.get_wallet(db, auth.user_id)
    return CreditMapper.wallet_to_response(wallet)


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    type: Optional[str] = Query(None, description="add or consume (case-insensitive)"),
    from_: Optional[datetime] = Query(None, alias="from"),
    to: Optional[datetime] = Query(None),
    limit: int = Query(0, description="1-200, defaults to 50"),
    offset: int = Query(0),
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Newest-first page of the caller's ledger. Out-of-range paging is coerced."""
    filters = TransactionFilter(
        type=type, from_=from_, to=to, limit=limit, offset=offset
    ).normalized()
    transactions = CreditService.list_transactions(db, auth.user_id, filters)
    return TransactionListResponse(
        transactions=[CreditMapper.transaction_to_response(t) for t in transactions],
        limit=filters.limit,
        offset=filters.offset,
        count=len(transactions),
    )


@router.post("/add", response_model=WalletResponse)
def add_credits(
    payload: AddCreditsRequest,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db_session),
):
    """Grant credits to a user (admin only). Omitting user_id grants to the caller."""
    target = payload.user_id or auth.user_id
    wallet = CreditService.add_credit(
        db, auth.user_id, target, payload.amount, payload.description
    )
    return CreditMapper.wallet_to_response(wallet)
