import datetime
import time

import jwt
import pytest

from conftest import TEST_SECRET
from identity import (
    EmailAlreadyExistsError,
    IdentityProvider,
    InvalidCredentialsError,
    InvalidTokenError,
    RevokedTokenError,
    UserNotFoundError,
    hash_password,
    verify_password,
)

WEEK = datetime.timedelta(days=7)


def test_password_hashing_roundtrip():
    stored = hash_password("hunter22")
    assert stored.startswith("pbkdf2_sha256$")
    assert verify_password("hunter22", stored)
    assert not verify_password("hunter23", stored)
    assert not verify_password("hunter22", "garbage")


def test_create_user_rejects_duplicate_email(run_db, identity):
    run_db(identity.create_user, "Grace@Example.com", "pw123")
    with pytest.raises(EmailAlreadyExistsError):
        run_db(identity.create_user, "grace@example.com", "other")


def test_password_sign_in(run_db, identity):
    account = run_db(identity.create_user, "grace@example.com", "pw123")
    token = run_db(identity.sign_in_with_password, "grace@example.com", "pw123")

    claims = identity.verify_id_token(token)
    assert claims["uid"] == account.uid
    assert claims["email"] == "grace@example.com"

    with pytest.raises(InvalidCredentialsError):
        run_db(identity.sign_in_with_password, "grace@example.com", "wrong")
    with pytest.raises(InvalidCredentialsError):
        run_db(identity.sign_in_with_password, "nobody@example.com", "pw123")


def test_get_user_by_email_unknown(run_db, identity):
    with pytest.raises(UserNotFoundError):
        run_db(identity.get_user_by_email, "nobody@example.com")


def test_session_cookie_roundtrip(run_db, identity):
    account = run_db(identity.create_user, "grace@example.com", "pw123")
    token = run_db(identity.sign_in_with_password, "grace@example.com", "pw123")
    cookie = identity.create_session_cookie(token, expires_in=WEEK)

    claims = run_db(identity.verify_session_cookie, cookie)
    assert claims["uid"] == account.uid
    assert claims["exp"] - claims["iat"] == int(WEEK.total_seconds())


def test_id_token_is_not_a_session_cookie(run_db, identity):
    run_db(identity.create_user, "grace@example.com", "pw123")
    token = run_db(identity.sign_in_with_password, "grace@example.com", "pw123")
    with pytest.raises(InvalidTokenError):
        run_db(identity.verify_session_cookie, token)


def test_tampered_cookie_rejected(run_db, identity):
    run_db(identity.create_user, "grace@example.com", "pw123")
    token = run_db(identity.sign_in_with_password, "grace@example.com", "pw123")
    cookie = identity.create_session_cookie(token, expires_in=WEEK)

    header, payload, signature = cookie.split(".")
    tampered = ".".join([header, payload[:-2] + ("xx" if not payload.endswith("xx") else "yy"), signature])
    with pytest.raises(InvalidTokenError):
        run_db(identity.verify_session_cookie, tampered)

    forged = IdentityProvider("another-secret-0123456789abcdef0123456789abcdef")
    with pytest.raises(InvalidTokenError):
        run_db(forged.verify_session_cookie, cookie)


def test_expired_cookie_rejected(run_db, identity):
    account = run_db(identity.create_user, "grace@example.com", "pw123")
    now = int(time.time())
    expired = jwt.encode(
        {
            "uid": account.uid,
            "sub": account.uid,
            "iss": "mockmate-identity",
            "typ": "session",
            "auth_time": now - 1000,
            "iat": now - 1000,
            "exp": now - 10,
        },
        TEST_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError, match="expired"):
        run_db(identity.verify_session_cookie, expired)


def test_session_requires_recent_sign_in(run_db, identity):
    account = run_db(identity.create_user, "grace@example.com", "pw123")
    now = int(time.time())
    stale = jwt.encode(
        {
            "uid": account.uid,
            "sub": account.uid,
            "iss": "mockmate-identity",
            "typ": "id",
            "auth_time": now - 600,
            "iat": now - 600,
            "exp": now + 3000,
        },
        TEST_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError, match="Recent sign-in"):
        identity.create_session_cookie(stale, expires_in=WEEK)


def test_session_duration_bounds(run_db, identity):
    run_db(identity.create_user, "grace@example.com", "pw123")
    token = run_db(identity.sign_in_with_password, "grace@example.com", "pw123")
    with pytest.raises(ValueError):
        identity.create_session_cookie(token, expires_in=datetime.timedelta(days=15))
    with pytest.raises(ValueError):
        identity.create_session_cookie(token, expires_in=datetime.timedelta(minutes=1))


def test_revoked_cookie_rejected(run_db, identity):
    account = run_db(identity.create_user, "grace@example.com", "pw123")
    token = run_db(identity.sign_in_with_password, "grace@example.com", "pw123")
    cookie = identity.create_session_cookie(token, expires_in=WEEK)

    run_db(identity.revoke_refresh_tokens, account.uid)

    with pytest.raises(RevokedTokenError):
        run_db(identity.verify_session_cookie, cookie)
    # revocation is only enforced when asked for
    assert run_db(identity.verify_session_cookie, cookie, check_revoked=False)["uid"] == account.uid
