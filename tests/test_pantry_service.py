"""
Tests for pantry authorization and the ingredient reader used by the AI
pipeline.
"""

import uuid

import pytest
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenError, InvalidRequestError, UserNotFoundError
from domain.models import PantryUser
from repositories import PantryRepository
from services.pantry_service import PantryService

from test_fixtures import make_pantry, make_user, stock_item, stocked_pantry


def test_creator_is_owner_and_member(db_session: Session):
    owner = make_user(db_session)

    pantry = make_pantry(db_session, owner, "  Cabin  ")

    assert pantry.name == "Cabin"
    assert PantryService.is_owner(db_session, pantry.id, owner.id)
    assert PantryService.is_member(db_session, pantry.id, owner.id)


def test_member_is_not_owner(db_session: Session):
    owner = make_user(db_session)
    member = make_user(db_session, "member")
    pantry = make_pantry(db_session, owner)

    PantryService.add_user_to_pantry(db_session, pantry.id, owner.id, member.email.upper())

    assert PantryService.is_member(db_session, pantry.id, member.id)
    assert not PantryService.is_owner(db_session, pantry.id, member.id)
    assert [p.id for p in PantryService.list_pantries(db_session, member.id)] == [pantry.id]


def test_unknown_pantry_is_forbidden_not_missing(db_session: Session):
    """Outsiders learn nothing about whether a pantry exists"""
    user = make_user(db_session)

    with pytest.raises(ForbiddenError):
        PantryService.get_pantry(db_session, uuid.uuid4(), user.id)


def test_available_ingredients_skip_empty_and_trim(db_session: Session):
    owner = make_user(db_session)
    pantry = stocked_pantry(db_session, owner)
    stock_item(db_session, pantry, owner, "  Garlic ", 3, " un ")

    ingredients = PantryService.get_available_ingredients(db_session, pantry.id, owner.id)

    assert sorted((i.name, i.unit) for i in ingredients) == [
        ("Garlic", "un"),
        ("Rice", "g"),
        ("Tomato", "un"),
    ]


def test_available_ingredients_require_membership(db_session: Session):
    owner = make_user(db_session)
    outsider = make_user(db_session, "outsider")
    pantry = stocked_pantry(db_session, owner)

    with pytest.raises(ForbiddenError):
        PantryService.get_available_ingredients(db_session, pantry.id, outsider.id)


def test_add_unknown_email_is_not_found(db_session: Session):
    owner = make_user(db_session)
    pantry = make_pantry(db_session, owner)

    with pytest.raises(UserNotFoundError):
        PantryService.add_user_to_pantry(db_session, pantry.id, owner.id, "ghost@example.com")


def test_owner_cannot_remove_themself(db_session: Session):
    owner = make_user(db_session)
    pantry = make_pantry(db_session, owner)

    with pytest.raises(InvalidRequestError):
        PantryService.remove_user_from_pantry(db_session, pantry.id, owner.id, owner.email)


def test_only_owner_deletes_pantry(db_session: Session):
    owner = make_user(db_session)
    member = make_user(db_session, "member")
    pantry = make_pantry(db_session, owner)
    PantryService.add_user_to_pantry(db_session, pantry.id, owner.id, member.email)

    with pytest.raises(ForbiddenError):
        PantryService.delete_pantry(db_session, pantry.id, member.id)

    PantryService.delete_pantry(db_session, pantry.id, owner.id)

    assert PantryService.list_pantries(db_session, owner.id) == []


def test_pantry_keeps_exactly_one_owner_row(db_session: Session):
    """
    Verifies:
    - the creator holds the single owner membership
    - adding members never creates a second owner row
    """
    owner = make_user(db_session)
    member = make_user(db_session, "member")
    pantry = make_pantry(db_session, owner)
    PantryService.add_user_to_pantry(db_session, pantry.id, owner.id, member.email)

    owner_row = PantryRepository(db_session).get_owner_membership(pantry.id)
    owner_rows = (
        db_session.query(PantryUser)
        .filter_by(pantry_id=pantry.id, role="owner", deleted_at=None)
        .all()
    )

    assert owner_row.user_id == owner.id
    assert [row.user_id for row in owner_rows] == [owner.id]
