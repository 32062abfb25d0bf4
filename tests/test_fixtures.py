"""
Shared test fixtures and utilities for the PantryMind test suite.

Tests run against an in-memory SQLite database and a real LLM registry whose
providers talk to ``httpx.MockTransport`` vendors, so every layer below the
vendor's HTTP endpoint is exercised.
"""

import json
import uuid
from typing import Generator, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from api.dependencies import get_llm_service
from domain.enums import ProviderName
from domain.models import Base, User, get_db_session
from domain.schemas.llm_schemas import LLMConfig
from domain.schemas.pantry_schemas import ItemCreate
from main import app
from repositories import UserRepository
from services.llm_service import LLMService
from services.pantry_service import PantryService
from services.token_service import issue_access_token


# Helper function to generate unique emails
def unique_email(prefix: str = "test") -> str:
    """Generate unique email address using UUID to avoid conflicts"""
    return f"{prefix}-{uuid.uuid4()}@example.com"


# Realistic default user profiles
REALISTIC_USERS = {
    "default": {"first_name": "Sarah", "last_name": "Martinez", "email_prefix": "sarah.martinez"},
    "member": {"first_name": "Michael", "last_name": "Chen", "email_prefix": "michael.chen"},
    "outsider": {"first_name": "Emma", "last_name": "Johnson", "email_prefix": "emma.johnson"},
    "admin": {"first_name": "Raj", "last_name": "Patel", "email_prefix": "raj.patel"},
}


# =============================================================================
# CANNED MODEL REPLIES
# =============================================================================

RECIPE_JSON = json.dumps(
    {
        "title": "Tomato Rice Skillet",
        "description": "One-pan rice simmered with tomatoes and garlic.",
        "ingredients": [
            {"name": "Rice", "amount": 200, "unit": "g"},
            {"name": "tomato", "amount": 3, "unit": "un"},
            {"name": "Parsley", "amount": None, "unit": "to taste"},
        ],
        "instructions": [
            {"step": 1, "description": "Toast the rice in oil.", "time": 3},
            {"step": 2, "description": "Add tomatoes and water, simmer.", "time": 18},
        ],
        "cooking_time": 25,
        "preparation_time": 5,
        "total_time": 30,
        "serving_size": 2,
        "difficulty": "easy",
        "meal_type": "dinner",
        "cuisine": "Mediterranean",
        "dietary_restrictions": ["vegetarian"],
        "nutrition_info": {"calories": 420, "protein": 9, "carbohydrates": 80, "fat": 7},
        "tips": ["Use day-old rice for a firmer texture."],
    }
)

# Fenced, with a bare fraction and a to-taste amount: only usable after repair
BROKEN_RECIPE_REPLY = (
    "Here is your recipe:\n```json\n"
    '{"title": "Half Batch Soup", "ingredients": ['
    '{"name": "tomato", "amount": 1/2, "unit": "kg"}, '
    '{"name": "salt", "amount": "a gosto", "unit": ""}], '
    '"instructions": [{"step": 1, "description": "Simmer."}]}\n```'
)

SHOPPING_LIST_JSON = json.dumps(
    {
        "items": [
            {
                "name": "Rice",
                "quantity": 2,
                "unit": "kg",
                "estimated_price": 20.0,
                "category": "grains",
                "priority": 1,
                "reason": "Staple",
            },
            {
                "name": "Eggs",
                "quantity": 12,
                "unit": "un",
                "estimated_price": 18.0,
                "category": "protein",
                "priority": 7,
                "reason": "Breakfast",
            },
        ],
        "reasoning": "Covers staples within budget.",
        "estimated_total": 38.0,
    }
)


def openai_completion(content: str, model: str = "gpt-test") -> dict:
    """Body of a successful OpenAI chat-completions reply"""
    return {
        "id": f"chatcmpl-{uuid.uuid4().hex[:8]}",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 120, "completion_tokens": 340, "total_tokens": 460},
    }


class ScriptedVendor:
    """
    Fake vendor endpoint for ``httpx.MockTransport``.

    Each reply is either a string (returned as the completion content), an int
    (returned as that HTTP status with a vendor error body), an
    ``httpx.Response`` or an exception instance (raised). Replies are consumed
    in order; the last one repeats once the script runs out.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        if isinstance(reply, int):
            return httpx.Response(reply, json={"error": {"message": f"upstream said {reply}"}})
        return httpx.Response(200, json=openai_completion(reply))

    @property
    def calls(self) -> int:
        return len(self.requests)

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def make_llm_service(vendor, retry_attempts: int = 0) -> LLMService:
    """Registry with one OpenAI provider wired to ``vendor``"""
    service = LLMService()
    service.add_provider_config(
        ProviderName.OPENAI.value,
        LLMConfig(
            provider=ProviderName.OPENAI,
            api_key="test-key",
            model="gpt-test",
            retry_attempts=retry_attempts,
            retry_delay=0,
        ),
        client=mock_client(vendor),
    )
    return service


# =============================================================================
# DATABASE SESSION FIXTURE
# =============================================================================


def make_engine(url: str = "sqlite://"):
    """SQLite engine with the schema created; in-memory URLs share one connection"""
    kwargs = {"connect_args": {"check_same_thread": False, "timeout": 30}}
    if url == "sqlite://":
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, future=True, **kwargs)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Fresh in-memory database per test.

    Yields:
        Session: SQLAlchemy session bound to a throwaway schema
    """
    engine = make_engine()
    SessionLocal = sessionmaker(bind=engine, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def llm_vendor() -> ScriptedVendor:
    """Vendor that answers every call with a valid recipe"""
    return ScriptedVendor(RECIPE_JSON)


@pytest.fixture
def api_client(db_session, llm_vendor) -> Generator[TestClient, None, None]:
    """TestClient bound to the test session and the scripted vendor"""
    llm = make_llm_service(llm_vendor)

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db_session] = _override_db
    app.dependency_overrides[get_llm_service] = lambda: llm
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        llm.close()


# =============================================================================
# FACTORIES
# =============================================================================


def make_user(
    db: Session,
    profile_type: str = "default",
    email: Optional[str] = None,
    role: str = "user",
) -> User:
    """
    Insert a user with realistic names.

    Example:
        >>> owner = make_user(db_session)  # Sarah Martinez
        >>> admin = make_user(db_session, "admin", role="admin")
    """
    profile = REALISTIC_USERS.get(profile_type, REALISTIC_USERS["default"])
    return UserRepository(db).create_user(
        email or unique_email(profile["email_prefix"]),
        first_name=profile["first_name"],
        last_name=profile["last_name"],
        role=role,
    )


def auth_headers(user: User) -> dict:
    token = issue_access_token(user.id, role=user.role, email=user.email)
    return {"Authorization": f"Bearer {token}"}


def make_pantry(db: Session, owner: User, name: str = "Home"):
    return PantryService.create_pantry(db, name, owner.id)


def stock_item(db: Session, pantry, user: User, name: str, quantity: float, unit: str = "g"):
    return PantryService.add_item(
        db, pantry.id, user.id, ItemCreate(name=name, quantity=quantity, unit=unit)
    )


def stocked_pantry(db: Session, owner: User):
    """Pantry holding rice and tomatoes plus one empty shelf item"""
    pantry = make_pantry(db, owner)
    stock_item(db, pantry, owner, "Rice", 1000, "g")
    stock_item(db, pantry, owner, "Tomato", 4, "un")
    stock_item(db, pantry, owner, "Saffron", 0, "g")
    return pantry
