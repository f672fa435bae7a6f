"""
Sign-up / sign-in simulation, password hashing and access tokens.

There is no identity provider behind this: registered users live in the
store's user list, the admin account comes from settings, and unknown
email/password pairs get a demo session when ALLOW_DEMO_SIGNIN is on.
"""
import asyncio
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

import structlog
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from errors import AuthError
from schemas import Address, AuthResult, SignInIn, SignUpIn, User
from settings import Settings

logger = structlog.get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ADMIN_USER_ID = "admin1"
DEMO_USER_PREFIX = "demo_"


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Settings) -> Optional[str]:
    """Return the user id carried by ``token``, or None if it doesn't verify."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    return payload.get("sub")


def token_for(user: User, settings: Settings) -> str:
    return create_access_token({"sub": user.id, "admin": user.is_admin}, settings)


# -----
# Users
# -----

def find_user_by_email(users: Iterable[User], email: str) -> Optional[User]:
    email = email.strip().lower()
    return next((u for u in users if u.email.lower() == email), None)


def admin_user(settings: Settings) -> User:
    return User(id=ADMIN_USER_ID, name="Admin User", email=settings.admin_email, is_admin=True)


def demo_user_id(email: str) -> str:
    """Stable per email, so separate demo shoppers never share order history."""
    return DEMO_USER_PREFIX + uuid.uuid5(uuid.NAMESPACE_URL, "mailto:" + email.strip().lower()).hex[:12]


def sign_up(users: Sequence[User], form: SignUpIn) -> Tuple[List[User], User]:
    if not form.name or not form.email or not form.password:
        raise AuthError("Please fill in all fields")
    if find_user_by_email(users, form.email):
        raise AuthError("Email already registered")
    try:
        user = User(
            id=str(time.time_ns() // 1_000_000),
            name=form.name,
            email=form.email.strip(),
            address=Address(),
            password_hash=get_password_hash(form.password),
        )
    except ValidationError:
        raise AuthError("Please enter a valid email address")
    logger.info("user_registered", user_id=user.id)
    return [*users, user], user


def sign_in(users: Iterable[User], form: SignInIn, settings: Settings) -> User:
    if form.email == settings.admin_email and form.password == settings.admin_password:
        logger.info("sign_in", user_id=ADMIN_USER_ID, admin=True)
        return admin_user(settings)
    if not form.email or not form.password:
        raise AuthError("Invalid credentials")

    user = find_user_by_email(users, form.email)
    if user is not None:
        if user.password_hash and not verify_password(form.password, user.password_hash):
            raise AuthError("Invalid credentials")
        logger.info("sign_in", user_id=user.id)
        return user

    if not settings.allow_demo_signin:
        raise AuthError("Invalid credentials")
    try:
        demo = User(id=demo_user_id(form.email), name="Demo User", email=form.email.strip())
    except ValidationError:
        raise AuthError("Invalid credentials")
    logger.info("sign_in", user_id=demo.id, demo=True)
    return demo


def google_user() -> User:
    return User(id=f"google_{time.time_ns() // 1_000_000}", name="Google User", email="user@gmail.com")


# ---------------
# Async boundary
# ---------------

async def authenticate(users: Iterable[User], form: SignInIn, settings: Settings) -> AuthResult:
    await asyncio.sleep(settings.auth_delay)
    try:
        return AuthResult(user=sign_in(users, form, settings))
    except AuthError as exc:
        logger.info("sign_in_rejected", reason=exc.detail)
        return AuthResult(error=exc.detail)


async def register(users: Sequence[User], form: SignUpIn, settings: Settings) -> Tuple[List[User], AuthResult]:
    await asyncio.sleep(settings.auth_delay)
    try:
        users, user = sign_up(users, form)
    except AuthError as exc:
        logger.info("sign_up_rejected", reason=exc.detail)
        return list(users), AuthResult(error=exc.detail)
    return users, AuthResult(user=user)


async def google_sign_in(settings: Settings) -> AuthResult:
    await asyncio.sleep(settings.google_auth_delay)
    user = google_user()
    logger.info("sign_in", user_id=user.id, provider="google")
    return AuthResult(user=user)
