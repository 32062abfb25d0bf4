"""User routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from api.dependencies import AuthContext, get_current_user
from app.exceptions import UserNotFoundError
from domain.models import get_db_session
from domain.schemas.pantry_schemas import UserResponse
from repositories import UserRepository

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger("pantrymind.api.users")


@router.get("/me", response_model=UserResponse)
def get_me(
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """The authenticated caller."""
    user = UserRepository(db).get_by_id(auth.user_id)
    if not user:
        raise UserNotFoundError()
    return UserResponse.model_validate(user)
