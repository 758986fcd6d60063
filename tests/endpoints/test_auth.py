from app.core.constants import UserRoleEnum
from tests.helpers.asserts import api_call, assert_error


def test_register_creates_learner(client):
    body = api_call(
        client, "POST", "/auth/register",
        json={"full_name": "New Learner", "email": "New.Learner@Example.com", "password": "supersecret"},
        expected_status=201
    )
    assert body["data"]["role"] == UserRoleEnum.LEARNER.value
    assert body["data"]["email"] == "new.learner@example.com"

    login = api_call(client, "POST", "/auth/login", json={"email": "new.learner@example.com", "password": "supersecret"})
    assert login["data"]["token"]["token_type"] == "bearer"
    assert login["data"]["user"]["full_name"] == "New Learner"


def test_register_duplicate_email_conflicts(client, user_factory):
    existing = user_factory(UserRoleEnum.LEARNER)

    response = client.post(
        "/auth/register",
        json={"full_name": "Someone", "email": existing.email.upper(), "password": "supersecret"}
    )

    assert_error(response, 409, "CONFLICT")


def test_validation_errors_are_bad_requests(client):
    response = client.post("/auth/register", json={"full_name": "Shorty", "email": "not-an-email", "password": "short"})

    error = assert_error(response, 400, "VALIDATION_ERROR")
    fields = {tuple(item["loc"])[-1] for item in error["details"]["validation_errors"]}
    assert {"email", "password"} <= fields


def test_login_rejects_bad_credentials(client, user_factory):
    user = user_factory(UserRoleEnum.LEARNER)

    response = client.post("/auth/login", json={"email": user.email, "password": "wrong-password"})

    assert_error(response, 401, "UNAUTHORIZED")


def test_me_requires_token(client, user_factory, auth_headers):
    assert_error(client.get("/auth/me"), 401, "UNAUTHORIZED")
    assert_error(client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"}), 401, "UNAUTHORIZED")

    user = user_factory(UserRoleEnum.INSTRUCTOR)
    body = api_call(client, "GET", "/auth/me", headers=auth_headers(user))
    assert body["data"]["id"] == user.id


def test_inactive_user_cannot_log_in(client, user_factory):
    user = user_factory(UserRoleEnum.LEARNER, is_active=False)

    response = client.post("/auth/login", json={"email": user.email, "password": "testpass123"})

    assert_error(response, 401, "UNAUTHORIZED")
