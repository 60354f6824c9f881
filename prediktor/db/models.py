"""
SQLAlchemy ORM Models
Prediktor
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, Index
)
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime, timezone
import uuid

Base = declarative_base()

COLLECTIONS = ("analyses", "predictions", "businessPlans")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserAccount(Base):
    __tablename__ = "user_account"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), nullable=False, unique=True)
    password_hash = Column(String(128), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    last_login_at = Column(DateTime(timezone=True))

    profile = relationship(
        "UserProfileRecord", back_populates="account", uselist=False, cascade="all, delete-orphan"
    )


class UserProfileRecord(Base):
    """One profile per account; the full camelCase profile lives in `payload`."""
    __tablename__ = "user_profile"

    user_id = Column(String(36), ForeignKey("user_account.user_id"), primary_key=True)
    industry = Column(String(255), default="")
    is_profile_complete = Column(Boolean, default=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow)

    account = relationship("UserAccount", back_populates="profile")

    __table_args__ = (Index("ix_profile_industry", "industry"),)


class DocumentRecord(Base):
    """
    Append-only document store. `collection` is one of COLLECTIONS;
    `created_at` is the ISO-8601 timestamp the record was written with.
    """
    __tablename__ = "document"

    document_id = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(50), nullable=False)
    user_id = Column(String(36), nullable=False)
    created_at = Column(String(40), nullable=False)
    payload = Column(JSON, nullable=False)

    __table_args__ = (
        Index("ix_document_user", "collection", "user_id", "created_at"),
    )
