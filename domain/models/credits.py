"""
Credit ledger models: one wallet per user plus its append-only transaction log.
"""

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    DateTime,
    ForeignKey,
    Uuid,
    Index,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import uuid

from domain.models.database import Base, utcnow


class CreditWallet(Base):
    """Per-user credit balance"""

    __tablename__ = "credit_wallets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, unique=True)
    balance = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    transactions = relationship(
        "CreditTransaction", back_populates="wallet", lazy="raise"
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_credit_wallet_balance_nonneg"),
    )


class CreditTransaction(Base):
    """Immutable signed ledger entry"""

    __tablename__ = "credit_transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    wallet_id = Column(
        Uuid, ForeignKey("credit_wallets.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(Uuid, nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    # Position in the wallet ledger; assigned under the wallet lock
    sequence = Column(Integer, nullable=False)
    type = Column(String(16), nullable=False)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    wallet = relationship("CreditWallet", back_populates="transactions")

    __table_args__ = (
        Index("idx_credit_tx_wallet_created", "wallet_id", "created_at"),
        UniqueConstraint("wallet_id", "sequence", name="uq_credit_tx_wallet_sequence"),
        CheckConstraint("amount <> 0", name="ck_credit_tx_amount_nonzero"),
        CheckConstraint(
            "(type = 'consume' AND amount = -1) OR (type = 'add' AND amount > 0)",
            name="ck_credit_tx_sign_matches_type",
        ),
    )
