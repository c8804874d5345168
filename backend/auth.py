import datetime
import logging
import os

from sqlalchemy.ext.asyncio import AsyncSession

from identity import IdentityError, IdentityProvider, UserNotFoundError
from models import User

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session"
SESSION_DURATION = 60 * 60 * 24 * 7  # seconds


def session_cookie_options() -> dict:
    return {
        "max_age": SESSION_DURATION,
        "httponly": True,
        "secure": os.getenv("APP_ENV", "development") == "production",
        "path": "/",
        "samesite": "lax",
    }


def user_to_dict(user: User) -> dict:
    return {"id": user.id, "name": user.name, "email": user.email}


async def sign_up(db: AsyncSession, uid: str, name: str, email: str) -> dict:
    try:
        if await db.get(User, uid):
            return {"success": False, "message": "User already exists. Please sign in."}

        db.add(User(id=uid, name=name, email=email))
        await db.commit()
        return {"success": True, "message": "Account created successfully. Please sign in."}
    except Exception:
        logger.exception("[AUTH] Error creating user uid=%s", uid)
        await db.rollback()
        return {"success": False, "message": "Failed to create account. Please try again."}


async def sign_in(db: AsyncSession, identity: IdentityProvider, email: str, id_token: str) -> tuple[dict, str | None]:
    """Exchange a fresh ID token for a session cookie.

    Returns the result payload and the cookie value to set (None on failure).
    """
    failed = {"success": False, "message": "Failed to log into account. Please try again."}
    try:
        await identity.get_user_by_email(db, email)
        cookie = identity.create_session_cookie(
            id_token, expires_in=datetime.timedelta(seconds=SESSION_DURATION)
        )
    except UserNotFoundError:
        return {"success": False, "message": "User does not exist. Create an account."}, None
    except (IdentityError, ValueError) as e:
        logger.warning("[AUTH] Sign-in failed for %s: %s", email, e)
        return failed, None
    except Exception:
        logger.exception("[AUTH] Error signing in %s", email)
        await db.rollback()
        return failed, None

    return {"success": True, "message": "Signed in successfully."}, cookie


async def get_current_user(db: AsyncSession, identity: IdentityProvider, session_cookie: str | None) -> User | None:
    if not session_cookie:
        return None

    try:
        claims = await identity.verify_session_cookie(db, session_cookie, check_revoked=True)
        return await db.get(User, claims["uid"])
    except IdentityError as e:
        logger.info("[AUTH] Rejected session cookie: %s", e)
        return None
    except Exception:
        logger.exception("[AUTH] Error loading current user")
        await db.rollback()
        return None


async def is_authenticated(db: AsyncSession, identity: IdentityProvider, session_cookie: str | None) -> bool:
    return await get_current_user(db, identity, session_cookie) is not None
