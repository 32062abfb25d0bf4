"""
Credit ledger mappers.
Handles transformation between ledger ORM models and their wire DTOs.
"""

from datetime import datetime, timezone
from typing import Optional

from domain.models import CreditWallet, CreditTransaction
from domain.schemas.credit_schemas import WalletResponse, TransactionResponse


def to_rfc3339(value: Optional[datetime]) -> str:
    """Render a timestamp as RFC 3339 UTC; naive values are taken to be UTC already."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class CreditMapper:
    """Mapper for wallet and transaction transformations."""

    @staticmethod
    def wallet_to_response(wallet: CreditWallet) -> WalletResponse:
        return WalletResponse(
            wallet_id=wallet.id,
            user_id=wallet.user_id,
            balance=wallet.balance,
            created_at=to_rfc3339(wallet.created_at),
            updated_at=to_rfc3339(wallet.updated_at),
        )

    @staticmethod
    def transaction_to_response(tx: CreditTransaction) -> TransactionResponse:
        return TransactionResponse(
            transaction_id=tx.id,
            wallet_id=tx.wallet_id,
            user_id=tx.user_id,
            amount=tx.amount,
            type=tx.type,
            description=tx.description or "",
            created_at=to_rfc3339(tx.created_at),
        )
