"""Accounts: password hashing, JWT access tokens and registration."""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from pantry_planner.config import get_settings
from pantry_planner.models.pantry import Pantry
from pantry_planner.models.user import User

logger = logging.getLogger(__name__)
settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DEFAULT_PANTRY_NAME = "Despensa principal"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(user_id: int, email: str) -> str:
    """Issue a signed token for a user, valid for the configured lifetime."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    claims = {"sub": str(user_id), "email": email, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def read_access_token(token: str) -> int | None:
    """Return the user id a token was issued for.

    None for tokens that are expired, badly signed or missing a numeric subject.
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    subject = claims.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Look up a user by email and check their password."""
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def create_user(db: Session, email: str, password: str, name: str | None = None) -> User:
    """Create an account together with its default pantry."""
    user = User(
        email=normalize_email(email),
        password_hash=get_password_hash(password),
        name=name,
    )
    db.add(user)
    db.flush()

    db.add(Pantry(user_id=user.id, name=DEFAULT_PANTRY_NAME, is_default=True))
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user
