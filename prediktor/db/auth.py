"""
Email/password accounts.

Passwords are stored as bcrypt hashes. A successful login yields a
SessionContext that callers carry explicitly (FastAPI session cookie,
Streamlit session state).
"""

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from prediktor.db.models import UserAccount
from prediktor.db.profiles import UserProfileService
from prediktor.models.schemas import utc_now

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
# bcrypt refuses longer input
MAX_PASSWORD_BYTES = 72

INVALID_CREDENTIALS = "The email address or password is incorrect."
INVALID_EMAIL = "The email address format is not valid."
EMAIL_IN_USE = "An account already exists for this email address."
WEAK_PASSWORD = f"The password must be at least {MIN_PASSWORD_LENGTH} characters long."
LONG_PASSWORD = f"The password must be at most {MAX_PASSWORD_BYTES} bytes long."


class AuthError(Exception):
    """Authentication failure carrying a message fit for end users."""


@dataclass(frozen=True)
class SessionContext:
    user_id: str
    email: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["SessionContext"]:
        if not data or not data.get("user_id") or not data.get("email"):
            return None
        return cls(user_id=data["user_id"], email=data["email"])


def _password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def _normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise AuthError(INVALID_EMAIL)
    return email


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register(self, email: str, password: str) -> SessionContext:
        """Create an account and its empty profile."""
        email = _normalize_email(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(WEAK_PASSWORD)
        if _password_too_long(password):
            raise AuthError(LONG_PASSWORD)
        if self.db.query(UserAccount).filter(UserAccount.email == email).first():
            raise AuthError(EMAIL_IN_USE)

        account = UserAccount(email=email, password_hash=hash_password(password))
        self.db.add(account)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise AuthError(EMAIL_IN_USE) from e

        UserProfileService(self.db).create_user_profile(account.user_id, email)
        logger.info(f"Registered user {account.user_id}")
        return SessionContext(user_id=account.user_id, email=email)

    def login(self, email: str, password: str) -> SessionContext:
        email = _normalize_email(email)
        account = self.db.query(UserAccount).filter(UserAccount.email == email).first()
        password = password or ""
        if (
            account is None
            or _password_too_long(password)
            or not verify_password(password, account.password_hash)
        ):
            logger.info("Rejected login attempt")
            raise AuthError(INVALID_CREDENTIALS)

        account.last_login_at = utc_now()
        self.db.commit()
        return SessionContext(user_id=account.user_id, email=account.email)
