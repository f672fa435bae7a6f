import asyncio

import pytest

import auth
from errors import AuthError
from schemas import SignInIn, SignUpIn
from seed import seed_users


def test_sign_up_requires_all_fields():
    with pytest.raises(AuthError, match="Please fill in all fields"):
        auth.sign_up([], SignUpIn(name="", email="a@khemixall.com", password="pw"))


def test_sign_up_rejects_bad_email():
    with pytest.raises(AuthError, match="valid email"):
        auth.sign_up([], SignUpIn(name="Sam", email="not-an-email", password="pw"))


def test_sign_up_adds_user_with_hashed_password():
    users, user = auth.sign_up([], SignUpIn(name="Sam", email="sam@khemixall.com", password="secret"))
    assert users == [user]
    assert user.password_hash != "secret"
    assert auth.verify_password("secret", user.password_hash)
    assert "password_hash" not in user.model_dump()


def test_sign_up_rejects_duplicate_email():
    with pytest.raises(AuthError, match="already registered"):
        auth.sign_up(seed_users(), SignUpIn(name="Dup", email="USER@khemixall.com", password="pw"))


def test_admin_sign_in(settings):
    user = auth.sign_in([], SignInIn(email="admin@khemixall.com", password="admin"), settings)
    assert user.is_admin
    assert user.id == auth.ADMIN_USER_ID


def test_registered_user_sign_in_checks_password(settings):
    users = seed_users()
    user = auth.sign_in(users, SignInIn(email="user@khemixall.com", password="demo"), settings)
    assert user.id == "u1"
    with pytest.raises(AuthError, match="Invalid credentials"):
        auth.sign_in(users, SignInIn(email="user@khemixall.com", password="wrong"), settings)


def test_unknown_user_gets_demo_session(settings):
    user = auth.sign_in([], SignInIn(email="visitor@khemixall.com", password="anything"), settings)
    assert user.id == auth.demo_user_id("visitor@khemixall.com")
    assert user.id.startswith(auth.DEMO_USER_PREFIX)
    assert user.email == "visitor@khemixall.com"


def test_demo_ids_differ_per_email(settings):
    ana = auth.sign_in([], SignInIn(email="ana@khemixall.com", password="x"), settings)
    ben = auth.sign_in([], SignInIn(email="ben@khemixall.com", password="x"), settings)
    again = auth.sign_in([], SignInIn(email=" ANA@khemixall.com", password="y"), settings)
    assert ana.id != ben.id
    assert again.id == ana.id


def test_demo_sign_in_can_be_disabled(settings):
    strict = settings.model_copy(update={"allow_demo_signin": False})
    with pytest.raises(AuthError, match="Invalid credentials"):
        auth.sign_in([], SignInIn(email="visitor@khemixall.com", password="anything"), strict)


def test_missing_credentials_rejected(settings):
    with pytest.raises(AuthError):
        auth.sign_in([], SignInIn(email="", password=""), settings)


def test_authenticate_returns_result_instead_of_raising(settings):
    result = asyncio.run(auth.authenticate([], SignInIn(email="", password=""), settings))
    assert not result.succeeded
    assert result.error == "Invalid credentials"


def test_google_sign_in(settings):
    result = asyncio.run(auth.google_sign_in(settings))
    assert result.succeeded
    assert result.user.id.startswith("google_")


def test_access_token_round_trip(settings, customer):
    token = auth.token_for(customer, settings)
    assert auth.decode_access_token(token, settings) == customer.id
    other = settings.model_copy(update={"secret_key": "different"})
    assert auth.decode_access_token(token, other) is None
    assert auth.decode_access_token("garbage", settings) is None
