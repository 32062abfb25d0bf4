"""
Credit ledger service.

Business rules for the per-user credit wallet:

- a wallet is created lazily on first read with the configured initial balance,
  recorded as an ``add`` transaction ("Initial credit allocation");
- ``consume_credit`` takes exactly one credit under a row lock and appends a
  ``consume`` (-1) transaction in the same database transaction;
- ``add_credit`` (admin) locks or creates the target wallet, adds the amount and
  appends an ``add`` transaction.

The balance is always the signed sum of the wallet's transactions.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    AppError,
    InsufficientCreditsError,
    InvalidCreditAmountError,
    LedgerError,
)
from domain.enums import CreditTransactionType
from domain.models import CreditWallet, CreditTransaction
from domain.schemas.credit_schemas import TransactionFilter
from repositories import CreditRepository

logger = logging.getLogger("pantrymind.credits")

INITIAL_ALLOCATION_DESCRIPTION = "Initial credit allocation"
DEFAULT_CONSUME_DESCRIPTION = "LLM request"
DEFAULT_ADD_DESCRIPTION = "Manual credit adjustment"
# Credits are stored as 32-bit signed integers
MAX_CREDIT_BALANCE = 2**31 - 1


class CreditService:
    """Business logic for the credit ledger."""

    @staticmethod
    def _create_wallet(repo: CreditRepository, user_id: UUID) -> CreditWallet:
        """Insert a wallet plus its initial allocation; must run inside ``with_tx``"""
        initial = settings.initial_credit_balance
        wallet = repo.create_wallet(CreditWallet(user_id=user_id, balance=initial))
        if initial > 0:
            repo.create_transaction(
                CreditTransaction(
                    wallet_id=wallet.id,
                    user_id=user_id,
                    amount=initial,
                    type=CreditTransactionType.ADD.value,
                    description=INITIAL_ALLOCATION_DESCRIPTION,
                )
            )
        logger.info("Created credit wallet %s for user %s", wallet.id, user_id)
        return wallet

    @staticmethod
    def get_wallet(db: Session, user_id: UUID) -> CreditWallet:
        """
        Return the user's wallet, creating it on first access.

        Concurrent first use is resolved by the unique index on ``user_id``:
        the loser of the insert race rolls back and re-reads the winner's row.

        Raises:
            LedgerError: if the store fails
        """
        repo = CreditRepository(db)
        try:
            wallet = repo.get_wallet_by_user(user_id)
            if wallet is not None:
                return wallet
            return repo.with_tx(lambda tx: CreditService._create_wallet(tx, user_id))
        except IntegrityError:
            logger.info("Wallet for user %s created concurrently; re-reading", user_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load wallet for user %s", user_id)
            raise LedgerError(details={"user_id": str(user_id)}) from exc

        try:
            wallet = repo.get_wallet_by_user(user_id)
        except SQLAlchemyError as exc:
            raise LedgerError(details={"user_id": str(user_id)}) from exc
        if wallet is None:
            raise LedgerError("Wallet could not be created")
        return wallet

    @staticmethod
    def consume_credit(
        db: Session, user_id: UUID, description: str = ""
    ) -> CreditWallet:
        """
        Debit exactly one credit.

        Raises:
            InsufficientCreditsError: no wallet, or balance already at zero
            LedgerError: if the store fails
        """
        description = (description or "").strip() or DEFAULT_CONSUME_DESCRIPTION

        def _consume(repo: CreditRepository) -> CreditWallet:
            wallet = repo.get_wallet_for_update(user_id)
            if wallet is None or wallet.balance <= 0:
                raise InsufficientCreditsError()
            if not repo.decrement_balance(wallet):
                raise InsufficientCreditsError()
            repo.create_transaction(
                CreditTransaction(
                    wallet_id=wallet.id,
                    user_id=user_id,
                    amount=-1,
                    type=CreditTransactionType.CONSUME.value,
                    description=description,
                )
            )
            return wallet

        try:
            wallet = CreditRepository(db).with_tx(_consume)
        except AppError:
            raise
        except SQLAlchemyError as exc:
            logger.exception("Credit consume failed for user %s", user_id)
            raise LedgerError(details={"user_id": str(user_id)}) from exc

        logger.info(
            "Consumed 1 credit from user %s (%s); balance now %d",
            user_id,
            description,
            wallet.balance,
        )
        return wallet

    @staticmethod
    def add_credit(
        db: Session,
        actor_id: UUID,
        target_user_id: UUID,
        amount: int,
        description: str = "",
    ) -> CreditWallet:
        """
        Grant ``amount`` credits to the target user, creating the wallet if needed.

        Raises:
            InvalidCreditAmountError: amount is not positive, or the grant would
                push the balance past MAX_CREDIT_BALANCE
            LedgerError: if the store fails
        """
        if amount <= 0:
            raise InvalidCreditAmountError(details={"amount": amount})
        if amount > MAX_CREDIT_BALANCE:
            raise InvalidCreditAmountError(
                "Grant would exceed the maximum credit balance",
                details={"amount": amount},
            )
        description = (description or "").strip() or DEFAULT_ADD_DESCRIPTION

        def _add(repo: CreditRepository) -> CreditWallet:
            wallet = repo.get_wallet_for_update(target_user_id)
            if wallet is None:
                wallet = CreditService._create_wallet(repo, target_user_id)
            if wallet.balance + amount > MAX_CREDIT_BALANCE:
                raise InvalidCreditAmountError(
                    "Grant would exceed the maximum credit balance",
                    details={"amount": amount, "balance": wallet.balance},
                )
            repo.increment_balance(wallet, amount)
            repo.create_transaction(
                CreditTransaction(
                    wallet_id=wallet.id,
                    user_id=target_user_id,
                    amount=amount,
                    type=CreditTransactionType.ADD.value,
                    description=description,
                )
            )
            return wallet

        repo = CreditRepository(db)
        # A second pass covers losing the wallet-creation race to another request.
        for attempt in (1, 2):
            try:
                wallet = repo.with_tx(_add)
                break
            except IntegrityError as exc:
                if attempt == 2:
                    raise LedgerError() from exc
                logger.info(
                    "Wallet for user %s created concurrently; retrying grant",
                    target_user_id,
                )
            except SQLAlchemyError as exc:
                logger.exception("Credit grant failed for user %s", target_user_id)
                raise LedgerError(details={"user_id": str(target_user_id)}) from exc

        logger.info(
            "User %s added %d credits to user %s (%s); balance now %d",
            actor_id,
            amount,
            target_user_id,
            description,
            wallet.balance,
        )
        return wallet

    @staticmethod
    def list_transactions(
        db: Session, user_id: UUID, filters: TransactionFilter
    ) -> List[CreditTransaction]:
        """
        Newest-first page of the user's ledger.

        The wallet is materialized first so a brand-new user sees the
        initial allocation on their first listing.
        """
        CreditService.get_wallet(db, user_id)
        try:
            return CreditRepository(db).list_transactions(user_id, filters.normalized())
        except SQLAlchemyError as exc:
            raise LedgerError(details={"user_id": str(user_id)}) from exc
