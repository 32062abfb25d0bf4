"""
End-to-end API tests through FastAPI's TestClient.

The database is the per-test in-memory SQLite session and the LLM registry
talks to a scripted vendor (see test_fixtures), so each scenario runs the
real dependency chain: bearer auth -> credit guard -> service -> vendor.

Scenarios:
1. First use grants the initial allocation
2. Recipe generation settles exactly one credit
3. The credit guard rejects a drained wallet before any vendor call
4. A non-member cannot generate from someone else's pantry
5. A reply with a bare fraction is repaired and stored
"""

import uuid

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import settings
from domain.models import CreditTransaction, Recipe
from services.credit_service import CreditService
from services.token_service import issue_access_token

from test_fixtures import (
    BROKEN_RECIPE_REPLY,
    SHOPPING_LIST_JSON,
    auth_headers,
    make_user,
    stocked_pantry,
)


def drain_wallet(db: Session, user) -> None:
    CreditService.get_wallet(db, user.id)
    for _ in range(settings.initial_credit_balance):
        CreditService.consume_credit(db, user.id, "drain")


# =============================================================================
# AUTH AND ERROR FORMAT
# =============================================================================


def test_missing_bearer_token_is_401(api_client: TestClient):
    response = api_client.get("/credits/wallet")

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNAUTHORIZED"
    assert "X-Request-ID" in response.headers


def test_forged_and_expired_tokens_are_401(api_client: TestClient, db_session: Session):
    user = make_user(db_session)
    expired = issue_access_token(user.id, expires_minutes=-5)

    forged = api_client.get("/users/me", headers={"Authorization": "Bearer not.a.jwt"})
    stale = api_client.get("/users/me", headers={"Authorization": f"Bearer {expired}"})

    assert forged.status_code == 401
    assert stale.status_code == 401
    assert stale.json()["error"]["message"] == "Token expired"


def test_me_returns_caller(api_client: TestClient, db_session: Session):
    user = make_user(db_session)

    response = api_client.get("/users/me", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["email"] == user.email
    assert response.json()["first_name"] == "Sarah"


def test_schema_violation_is_422_validation_error(api_client: TestClient, db_session: Session):
    user = make_user(db_session)

    response = api_client.post("/pantries", json={}, headers=auth_headers(user))

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_health_check(api_client: TestClient):
    response = api_client.get("/health-check")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "ok"


# =============================================================================
# CREDITS
# =============================================================================


def test_first_use_grants_initial_allocation(api_client: TestClient, db_session: Session):
    """Scenario 1"""
    user = make_user(db_session)
    headers = auth_headers(user)

    wallet = api_client.get("/credits/wallet", headers=headers)
    history = api_client.get("/credits/transactions", headers=headers)

    assert wallet.status_code == 200
    assert wallet.json()["balance"] == settings.initial_credit_balance
    assert wallet.json()["created_at"].endswith("Z")
    assert history.json()["count"] == 1
    assert history.json()["limit"] == 50
    assert history.json()["transactions"][0]["description"] == "Initial credit allocation"


def test_transactions_filter_and_paging_coercion(api_client: TestClient, db_session: Session):
    user = make_user(db_session)
    CreditService.get_wallet(db_session, user.id)
    CreditService.consume_credit(db_session, user.id, "one")

    response = api_client.get(
        "/credits/transactions",
        params={"type": "CONSUME", "limit": 5000, "offset": -3},
        headers=auth_headers(user),
    )

    body = response.json()
    assert response.status_code == 200
    assert body["limit"] == 200
    assert body["offset"] == 0
    assert [t["type"] for t in body["transactions"]] == ["consume"]


def test_add_credits_requires_admin(api_client: TestClient, db_session: Session):
    user = make_user(db_session)

    response = api_client.post("/credits/add", json={"amount": 5}, headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN_ROLE"


def test_admin_grants_credits_to_user(api_client: TestClient, db_session: Session):
    admin = make_user(db_session, "admin", role="admin")
    user = make_user(db_session)

    granted = api_client.post(
        "/credits/add",
        json={"user_id": str(user.id), "amount": 15, "description": "Support refund"},
        headers=auth_headers(admin),
    )
    rejected = api_client.post(
        "/credits/add", json={"amount": 0}, headers=auth_headers(admin)
    )

    assert granted.status_code == 200
    assert granted.json()["balance"] == settings.initial_credit_balance + 15
    assert granted.json()["user_id"] == str(user.id)
    assert rejected.status_code == 400
    assert rejected.json()["error"]["code"] == "INVALID_CREDIT_AMOUNT"


# =============================================================================
# RECIPES
# =============================================================================


def test_generate_recipes_settles_one_credit(
    api_client: TestClient, db_session: Session, llm_vendor
):
    """Scenario 2"""
    owner = make_user(db_session)
    pantry = stocked_pantry(db_session, owner)

    response = api_client.post(
        "/recipes/generate",
        json={"pantry_id": str(pantry.id), "meal_type": "dinner", "cooking_time": 30},
        headers=auth_headers(owner),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 3
    assert len(body["recipes"]) == 3
    assert body["recipes"][0]["title"] == "Tomato Rice Skillet"
    assert llm_vendor.calls == 3

    wallet = api_client.get("/credits/wallet", headers=auth_headers(owner)).json()
    assert wallet["balance"] == settings.initial_credit_balance - 1
    listed = api_client.get("/recipes", headers=auth_headers(owner)).json()
    assert len(listed) == 3


def test_drained_wallet_is_rejected_before_vendor_call(
    api_client: TestClient, db_session: Session, llm_vendor
):
    """Scenario 3"""
    owner = make_user(db_session)
    pantry = stocked_pantry(db_session, owner)
    drain_wallet(db_session, owner)

    response = api_client.post(
        "/recipes/generate", json={"pantry_id": str(pantry.id)}, headers=auth_headers(owner)
    )

    assert response.status_code == 402
    assert response.json()["error"]["code"] == "INSUFFICIENT_CREDITS"
    assert llm_vendor.calls == 0
    assert db_session.query(Recipe).count() == 0


def test_foreign_pantry_is_forbidden(api_client: TestClient, db_session: Session, llm_vendor):
    """Scenario 4"""
    owner = make_user(db_session)
    outsider = make_user(db_session, "outsider")
    pantry = stocked_pantry(db_session, owner)

    response = api_client.post(
        "/recipes/generate", json={"pantry_id": str(pantry.id)}, headers=auth_headers(outsider)
    )

    assert response.status_code == 403
    assert llm_vendor.calls == 0
    consumes = db_session.query(CreditTransaction).filter_by(type="consume").count()
    assert consumes == 0


def test_fraction_reply_is_repaired(api_client: TestClient, db_session: Session, llm_vendor):
    """Scenario 5"""
    owner = make_user(db_session)
    pantry = stocked_pantry(db_session, owner)
    llm_vendor.replies = [BROKEN_RECIPE_REPLY]

    response = api_client.post(
        "/recipes/generate", json={"pantry_id": str(pantry.id)}, headers=auth_headers(owner)
    )

    assert response.status_code == 200
    amounts = [i["amount"] for i in response.json()["recipes"][0]["ingredients"]]
    assert amounts == [0.5, None]


def test_unparseable_reply_is_500_without_charge(
    api_client: TestClient, db_session: Session, llm_vendor
):
    owner = make_user(db_session)
    pantry = stocked_pantry(db_session, owner)
    llm_vendor.replies = ["I am not able to cook today."]

    response = api_client.post(
        "/recipes/generate", json={"pantry_id": str(pantry.id)}, headers=auth_headers(owner)
    )

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "INVALID_LLM_RESPONSE"
    assert "cook today" not in str(error)
    wallet = api_client.get("/credits/wallet", headers=auth_headers(owner)).json()
    assert wallet["balance"] == settings.initial_credit_balance


def test_invalid_recipe_request_is_400(api_client: TestClient, db_session: Session, llm_vendor):
    owner = make_user(db_session)
    pantry = stocked_pantry(db_session, owner)

    response = api_client.post(
        "/recipes/generate",
        json={"pantry_id": str(pantry.id), "meal_type": "brunch"},
        headers=auth_headers(owner),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"
    assert llm_vendor.calls == 0


def test_save_single_and_batch_recipes(api_client: TestClient, db_session: Session):
    owner = make_user(db_session)
    headers = auth_headers(owner)

    single = api_client.post("/recipes/save", json={"title": "Omelette"}, headers=headers)
    batch = api_client.post(
        "/recipes/save", json=[{"title": "Soup"}, {"title": "Salad"}], headers=headers
    )

    assert single.status_code == 201
    assert single.json()["count"] == 1
    assert batch.json()["count"] == 2

    recipe_id = single.json()["recipes"][0]["id"]
    fetched = api_client.get(f"/recipes/{recipe_id}", headers=headers)
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Omelette"

    deleted = api_client.delete(f"/recipes/{recipe_id}", headers=headers)
    missing = api_client.get(f"/recipes/{recipe_id}", headers=headers)
    assert deleted.status_code == 200
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "RECIPE_NOT_FOUND"


def test_chat_charges_one_credit(api_client: TestClient, db_session: Session, llm_vendor):
    user = make_user(db_session)
    llm_vendor.replies = ["Add a squeeze of lemon."]

    response = api_client.post(
        "/recipes/chat",
        json={"message": "How do I brighten a soup?", "context": "Vegan"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["response"] == "Add a squeeze of lemon."
    assert response.json()["provider"] == "openai"
    wallet = api_client.get("/credits/wallet", headers=auth_headers(user)).json()
    assert wallet["balance"] == settings.initial_credit_balance - 1


# =============================================================================
# SHOPPING LISTS
# =============================================================================


def test_generate_and_read_shopping_list(api_client: TestClient, db_session: Session, llm_vendor):
    owner = make_user(db_session)
    pantry = stocked_pantry(db_session, owner)
    llm_vendor.replies = [SHOPPING_LIST_JSON]
    headers = auth_headers(owner)

    created = api_client.post(
        "/shopping-lists/generate",
        json={"name": "Weekly run", "pantry_id": str(pantry.id), "max_budget": 120},
        headers=headers,
    )

    assert created.status_code == 201
    body = created.json()
    assert body["generated_by"] == "ai"
    assert body["total_budget"] == 120
    assert len(body["items"]) == 2

    summaries = api_client.get("/shopping-lists", headers=headers).json()
    assert [s["id"] for s in summaries] == [body["id"]]
    assert summaries[0]["item_count"] == 2
    assert api_client.get(f"/shopping-lists/{body['id']}", headers=headers).status_code == 200
    assert api_client.get(f"/shopping-lists/{uuid.uuid4()}", headers=headers).status_code == 404


# =============================================================================
# PANTRIES
# =============================================================================


def test_pantry_membership_flow(api_client: TestClient, db_session: Session):
    owner = make_user(db_session)
    member = make_user(db_session, "member")
    owner_headers = auth_headers(owner)
    member_headers = auth_headers(member)

    pantry = api_client.post("/pantries", json={"name": "Shared flat"}, headers=owner_headers)
    pantry_id = pantry.json()["id"]
    assert pantry.status_code == 201

    assert api_client.get(f"/pantries/{pantry_id}", headers=member_headers).status_code == 403

    added = api_client.post(
        f"/pantries/{pantry_id}/users", json={"email": member.email}, headers=owner_headers
    )
    duplicate = api_client.post(
        f"/pantries/{pantry_id}/users", json={"email": member.email}, headers=owner_headers
    )
    assert added.status_code == 201
    assert duplicate.status_code == 409

    item = api_client.post(
        f"/pantries/{pantry_id}/items",
        json={"name": "Lentils", "quantity": 500, "unit": "g", "price_per_unit": 0.01},
        headers=member_headers,
    )
    assert item.status_code == 201
    assert item.json()["total_price"] == 5.0

    members = api_client.get(f"/pantries/{pantry_id}/users", headers=member_headers).json()
    assert sorted(m["role"] for m in members) == ["member", "owner"]
    ingredients = api_client.get(f"/pantries/{pantry_id}/ingredients", headers=member_headers)
    assert [i["name"] for i in ingredients.json()] == ["Lentils"]

    by_member = api_client.request(
        "DELETE", f"/pantries/{pantry_id}/users", json={"email": owner.email}, headers=member_headers
    )
    self_removal = api_client.request(
        "DELETE", f"/pantries/{pantry_id}/users", json={"email": owner.email}, headers=owner_headers
    )
    removed = api_client.request(
        "DELETE", f"/pantries/{pantry_id}/users", json={"email": member.email}, headers=owner_headers
    )
    assert by_member.status_code == 403
    assert self_removal.status_code == 400
    assert removed.status_code == 200
    assert api_client.get(f"/pantries/{pantry_id}/items", headers=member_headers).status_code == 403


# =============================================================================
# LLM MANAGEMENT
# =============================================================================


def test_llm_provider_endpoints(api_client: TestClient, db_session: Session):
    user = make_user(db_session)
    admin = make_user(db_session, "admin", role="admin")

    providers = api_client.get("/llm/providers", headers=auth_headers(user))
    estimate = api_client.post(
        "/llm/estimate-tokens", json={"text": "chop two onions"}, headers=auth_headers(user)
    )
    not_admin = api_client.put(
        "/llm/provider", json={"provider": "openai"}, headers=auth_headers(user)
    )
    unconfigured = api_client.put(
        "/llm/provider", json={"provider": "gemini"}, headers=auth_headers(admin)
    )

    assert providers.status_code == 200
    assert providers.json()["current"] == "openai"
    assert sorted(providers.json()["available"]) == ["gemini", "openai"]
    assert providers.json()["info"]["model"] == "gpt-test"
    assert estimate.json()["words"] == 3
    assert estimate.json()["estimated_tokens"] == 3 + len("chop two onions") // 4
    assert not_admin.status_code == 403
    assert unconfigured.status_code == 400
