"""Schemas for the credit ledger API"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

DEFAULT_TRANSACTION_LIMIT = 50
MAX_TRANSACTION_LIMIT = 200


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class WalletResponse(BaseModel):
    """Wallet snapshot; timestamps are RFC 3339 UTC strings"""

    wallet_id: UUID
    user_id: UUID
    balance: int
    created_at: str
    updated_at: str


class TransactionResponse(BaseModel):
    transaction_id: UUID
    wallet_id: UUID
    user_id: UUID
    amount: int
    type: str
    description: str
    created_at: str


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse] = Field(default_factory=list)
    limit: int
    offset: int
    count: int


class TransactionFilter(BaseModel):
    """Listing filter. Out-of-range paging values are coerced, never rejected."""

    type: Optional[str] = None
    from_: Optional[datetime] = Field(default=None, alias="from")
    to: Optional[datetime] = None
    limit: int = 0
    offset: int = 0

    model_config = {"populate_by_name": True}

    def normalized(self) -> "TransactionFilter":
        limit = self.limit
        if limit <= 0:
            limit = DEFAULT_TRANSACTION_LIMIT
        if limit > MAX_TRANSACTION_LIMIT:
            limit = MAX_TRANSACTION_LIMIT
        type_ = (self.type or "").strip().lower() or None
        return TransactionFilter(
            type=type_,
            from_=_as_utc(self.from_),
            to=_as_utc(self.to),
            limit=limit,
            offset=max(self.offset, 0),
        )


class AddCreditsRequest(BaseModel):
    """Admin grant. Omitting user_id grants to the caller."""

    user_id: Optional[UUID] = None
    amount: int = Field(..., description="Credits to add; must be positive")
    description: str = Field(default="", max_length=500)
