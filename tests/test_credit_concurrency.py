"""
Concurrency tests for the credit ledger.

Each worker thread uses its own session on a shared file-backed SQLite
database, so the guarded balance update and the unique wallet index are what
keep the ledger consistent.
"""

import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.exceptions import InsufficientCreditsError
from domain.models import Base, CreditTransaction, CreditWallet
from repositories import CreditRepository
from services.credit_service import CreditService

from test_fixtures import make_engine, make_user


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    factory = sessionmaker(bind=engine, future=True)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def _consume(factory, user_id) -> bool:
    db = factory()
    try:
        CreditService.consume_credit(db, user_id, "AI request - concurrent")
        return True
    except InsufficientCreditsError:
        return False
    finally:
        db.close()


def _get_wallet_id(factory, user_id) -> uuid.UUID:
    db = factory()
    try:
        return CreditService.get_wallet(db, user_id).id
    finally:
        db.close()


def test_concurrent_consumes_never_overdraw(session_factory, monkeypatch):
    """
    20 simultaneous debits against a balance of 5.

    Verifies:
    - exactly 5 succeed and 15 see InsufficientCredits
    - balance ends at 0 with exactly 5 consume rows
    - balance equals the signed ledger sum
    """
    monkeypatch.setattr(settings, "initial_credit_balance", 5)
    setup = session_factory()
    user = make_user(setup)
    user_id = user.id
    CreditService.get_wallet(setup, user_id)
    setup.close()

    with ThreadPoolExecutor(max_workers=20) as pool:
        results = list(pool.map(lambda _: _consume(session_factory, user_id), range(20)))

    assert results.count(True) == 5
    assert results.count(False) == 15

    db = session_factory()
    try:
        wallet = db.query(CreditWallet).filter_by(user_id=user_id).one()
        assert wallet.balance == 0
        assert db.query(CreditTransaction).filter_by(type="consume").count() == 5
        assert CreditRepository(db).sum_transactions(wallet.id) == 0
    finally:
        db.close()


def test_concurrent_first_use_creates_one_wallet(session_factory):
    """
    Simultaneous first reads of a wallet.

    Verifies:
    - every caller gets the same wallet
    - exactly one wallet row and one initial allocation exist
    """
    setup = session_factory()
    user_id = make_user(setup).id
    setup.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        wallet_ids = list(
            pool.map(lambda _: _get_wallet_id(session_factory, user_id), range(8))
        )

    assert len(set(wallet_ids)) == 1
    db = session_factory()
    try:
        assert db.query(CreditWallet).filter_by(user_id=user_id).count() == 1
        assert db.query(CreditTransaction).filter_by(user_id=user_id).count() == 1
    finally:
        db.close()
