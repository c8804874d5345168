"""In-process identity provider.

Issues short-lived ID tokens on password sign-in and exchanges them for
long-lived session cookies, mirroring the split between a client SDK and an
admin SDK. Tokens are HS256 JWTs; revocation is tracked per account as a
``tokens_valid_after`` timestamp.
"""
import datetime
import hashlib
import hmac
import logging
import os
import secrets
import time

import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Account

logger = logging.getLogger(__name__)

ID_TOKEN_TTL_SECONDS = 60 * 60
RECENT_SIGN_IN_SECONDS = 5 * 60
MIN_SESSION_SECONDS = 5 * 60
MAX_SESSION_SECONDS = 14 * 24 * 60 * 60
PBKDF2_ITERATIONS = 260_000


class IdentityError(Exception):
    pass


class EmailAlreadyExistsError(IdentityError):
    pass


class InvalidCredentialsError(IdentityError):
    pass


class UserNotFoundError(IdentityError):
    pass


class InvalidTokenError(IdentityError):
    pass


class RevokedTokenError(InvalidTokenError):
    pass


def hash_password(password: str, salt: str | None = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        _, iterations, salt, expected = stored.split("$")
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


class IdentityProvider:
    def __init__(self, secret: str, issuer: str = "mockmate-identity"):
        self._secret = secret
        self._issuer = issuer

    # ── Accounts ─────────────────────────────────────────

    async def create_user(self, db: AsyncSession, email: str, password: str) -> Account:
        email = email.strip().lower()
        existing = await db.execute(select(Account).where(Account.email == email))
        if existing.scalar_one_or_none():
            raise EmailAlreadyExistsError(f"{email} is already registered")

        account = Account(email=email, password_hash=hash_password(password))
        db.add(account)
        await db.commit()
        await db.refresh(account)
        logger.info("[IDENTITY] Created account uid=%s", account.uid)
        return account

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Account:
        result = await db.execute(select(Account).where(Account.email == email.strip().lower()))
        account = result.scalar_one_or_none()
        if not account:
            raise UserNotFoundError(f"No account for {email}")
        return account

    async def revoke_refresh_tokens(self, db: AsyncSession, uid: str) -> None:
        account = await db.get(Account, uid)
        if not account:
            raise UserNotFoundError(f"No account with uid {uid}")
        account.tokens_valid_after = int(time.time())
        await db.commit()

    # ── Tokens ───────────────────────────────────────────

    async def sign_in_with_password(self, db: AsyncSession, email: str, password: str) -> str:
        try:
            account = await self.get_user_by_email(db, email)
        except UserNotFoundError:
            raise InvalidCredentialsError("Invalid email or password")
        if not verify_password(password, account.password_hash):
            raise InvalidCredentialsError("Invalid email or password")

        now = int(time.time())
        return self._encode(
            {
                "uid": account.uid,
                "email": account.email,
                "auth_time": now,
                "iat": now,
                "exp": now + ID_TOKEN_TTL_SECONDS,
            },
            token_type="id",
        )

    def verify_id_token(self, id_token: str) -> dict:
        return self._decode(id_token, token_type="id")

    def create_session_cookie(self, id_token: str, expires_in: datetime.timedelta) -> str:
        seconds = int(expires_in.total_seconds())
        if not MIN_SESSION_SECONDS <= seconds <= MAX_SESSION_SECONDS:
            raise ValueError("Session duration must be between 5 minutes and 14 days")

        claims = self.verify_id_token(id_token)
        now = int(time.time())
        if now - int(claims.get("auth_time", 0)) > RECENT_SIGN_IN_SECONDS:
            raise InvalidTokenError("Recent sign-in required to create a session")

        return self._encode(
            {
                "uid": claims["uid"],
                "email": claims.get("email"),
                "auth_time": claims["auth_time"],
                "iat": now,
                "exp": now + seconds,
            },
            token_type="session",
        )

    async def verify_session_cookie(self, db: AsyncSession, cookie: str, check_revoked: bool = True) -> dict:
        claims = self._decode(cookie, token_type="session")
        if check_revoked:
            account = await db.get(Account, claims["uid"])
            if not account:
                raise RevokedTokenError("Account no longer exists")
            if int(claims["iat"]) <= int(account.tokens_valid_after or 0):
                raise RevokedTokenError("Session has been revoked")
        return claims

    def _encode(self, claims: dict, token_type: str) -> str:
        payload = {**claims, "iss": self._issuer, "sub": claims["uid"], "typ": token_type}
        return jwt.encode(payload, self._secret, algorithm="HS256")

    def _decode(self, token: str, token_type: str) -> dict:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=["HS256"],
                issuer=self._issuer,
                options={"require": ["exp", "iat", "sub"]},
                leeway=0,
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e
        if claims.get("typ") != token_type:
            raise InvalidTokenError(f"Expected a {token_type} token")
        return claims


_default_provider: IdentityProvider | None = None


def get_identity() -> IdentityProvider:
    global _default_provider
    if _default_provider is None:
        secret = os.getenv("IDENTITY_SECRET")
        if not secret:
            logger.warning("[IDENTITY] IDENTITY_SECRET not set; sessions will not survive a restart")
            secret = secrets.token_urlsafe(48)
        _default_provider = IdentityProvider(secret)
    return _default_provider
