"""
Credit Repository - Data access layer for wallets and the credit transaction log
"""

import logging
from typing import Callable, List, Optional, TypeVar
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import CreditWallet, CreditTransaction, utcnow
from domain.schemas.credit_schemas import TransactionFilter

logger = logging.getLogger("pantrymind.repositories.credits")

T = TypeVar("T")


class CreditRepository(BaseRepository[CreditWallet]):
    """
    Repository for credit wallets and their transactions.

    Mutating helpers only flush; the enclosing ``with_tx`` scope owns the
    commit so a balance change and its ledger row land together.
    """

    def __init__(self, db: Session, in_transaction: bool = False):
        super().__init__(db, CreditWallet)
        self._in_transaction = in_transaction

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def with_tx(self, fn: Callable[["CreditRepository"], T]) -> T:
        """
        Run ``fn`` inside one database transaction and commit on success.

        ``fn`` receives a repository bound to the open transaction. Calling
        ``with_tx`` on that scoped repository runs ``fn`` inline instead of
        opening a second transaction on the same connection.
        """
        if self._in_transaction:
            return fn(self)

        scoped = CreditRepository(self.db, in_transaction=True)
        try:
            result = fn(scoped)
            self.db.commit()
            return result
        except Exception as exc:
            self.db.rollback()
            logger.debug("Credit transaction rolled back: %s", exc)
            raise

    # ------------------------------------------------------------------
    # Wallets
    # ------------------------------------------------------------------

    def get_wallet_by_user(self, user_id: UUID) -> Optional[CreditWallet]:
        return (
            self.db.query(CreditWallet)
            .filter(CreditWallet.user_id == user_id)
            .populate_existing()
            .first()
        )

    def get_wallet_for_update(self, user_id: UUID) -> Optional[CreditWallet]:
        """Read the wallet holding a row-exclusive lock until the transaction ends"""
        return (
            self.db.query(CreditWallet)
            .filter(CreditWallet.user_id == user_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def create_wallet(self, wallet: CreditWallet) -> CreditWallet:
        self.db.add(wallet)
        self.db.flush()
        return wallet

    def decrement_balance(self, wallet: CreditWallet) -> bool:
        """
        Take one credit off the wallet.

        The update is guarded by ``balance > 0`` so it can never drive the
        balance negative, even on backends where the row lock is a no-op.
        Returns False when nothing was left to take.
        """
        result = self.db.execute(
            update(CreditWallet)
            .where(CreditWallet.id == wallet.id, CreditWallet.balance > 0)
            .values(balance=CreditWallet.balance - 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        self.db.refresh(wallet)
        return True

    def increment_balance(self, wallet: CreditWallet, amount: int) -> CreditWallet:
        self.db.execute(
            update(CreditWallet)
            .where(CreditWallet.id == wallet.id)
            .values(balance=CreditWallet.balance + amount, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.refresh(wallet)
        return wallet

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def next_sequence(self, wallet_id: UUID) -> int:
        """Next ledger position for the wallet; caller holds the wallet lock"""
        current = (
            self.db.query(func.max(CreditTransaction.sequence))
            .filter(CreditTransaction.wallet_id == wallet_id)
            .scalar()
        )
        return (current or 0) + 1

    def create_transaction(self, tx: CreditTransaction) -> CreditTransaction:
        """Append ``tx`` to its wallet ledger at the next sequence position"""
        tx.sequence = self.next_sequence(tx.wallet_id)
        self.db.add(tx)
        self.db.flush()
        return tx

    def list_transactions(
        self, user_id: UUID, filters: TransactionFilter
    ) -> List[CreditTransaction]:
        """List a user's transactions newest first; ``filters`` must be normalized"""
        query = self.db.query(CreditTransaction).filter(
            CreditTransaction.user_id == user_id
        )
        if filters.type:
            query = query.filter(func.lower(CreditTransaction.type) == filters.type)
        if filters.from_ is not None:
            query = query.filter(CreditTransaction.created_at >= filters.from_)
        if filters.to is not None:
            query = query.filter(CreditTransaction.created_at <= filters.to)

        return (
            query.order_by(CreditTransaction.sequence.desc())
            .offset(filters.offset)
            .limit(filters.limit)
            .all()
        )

    def sum_transactions(self, wallet_id: UUID) -> int:
        """Signed sum of the wallet's ledger; equals the balance at rest"""
        total = (
            self.db.query(func.coalesce(func.sum(CreditTransaction.amount), 0))
            .filter(CreditTransaction.wallet_id == wallet_id)
            .scalar()
        )
        return int(total or 0)
