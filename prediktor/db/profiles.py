"""
User profiles: persistence and completeness checks.

A profile is complete when the five fields the analysis prompts rely on
(first name, last name, company name, industry, country) are all filled in.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from prediktor.db.models import UserProfileRecord
from prediktor.models.schemas import REQUIRED_PROFILE_FIELDS, UserProfile, UserProfileUpdate, utc_now
from prediktor.utils.validation import round_half_up

logger = logging.getLogger(__name__)

TOP_INDUSTRIES = 5


class ProfileNotFoundError(LookupError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No profile for user {user_id}")


def _field_value(profile: Union[UserProfile, Mapping[str, Any]], name: str) -> Any:
    if isinstance(profile, UserProfile):
        return getattr(profile, name)
    field = UserProfile.model_fields[name]
    return profile.get(field.alias, profile.get(name))


def is_profile_complete(profile: Union[UserProfile, Mapping[str, Any]]) -> bool:
    return all(_field_value(profile, name) for name in REQUIRED_PROFILE_FIELDS)


def profile_completion_percentage(profile: Union[UserProfile, Mapping[str, Any]]) -> int:
    filled = sum(1 for name in REQUIRED_PROFILE_FIELDS if _field_value(profile, name))
    return round_half_up(filled / len(REQUIRED_PROFILE_FIELDS) * 100)


def missing_profile_fields(profile: UserProfile) -> List[str]:
    return [
        UserProfile.model_fields[name].alias
        for name in REQUIRED_PROFILE_FIELDS
        if not getattr(profile, name)
    ]


class UserProfileService:
    """Profile reads and writes on one SQLAlchemy session. Errors propagate."""

    def __init__(self, db: Session):
        self.db = db

    def _record(self, user_id: str) -> Optional[UserProfileRecord]:
        return self.db.get(UserProfileRecord, user_id)

    def load_user_profile(self, user_id: str) -> Optional[UserProfile]:
        record = self._record(user_id)
        if record is None:
            return None
        return UserProfile.model_validate(record.payload)

    def create_user_profile(self, user_id: str, email: str) -> UserProfile:
        profile = UserProfile(email=email)
        record = UserProfileRecord(
            user_id=user_id,
            industry=profile.industry,
            is_profile_complete=profile.is_profile_complete,
            payload=profile.to_document(),
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )
        self.db.add(record)
        self.db.commit()
        logger.info(f"Created profile for user {user_id}")
        return profile

    def update_user_profile(
        self,
        user_id: str,
        changes: Union[UserProfileUpdate, Dict[str, Any]],
    ) -> UserProfile:
        """Merge `changes` into the stored profile and recompute completeness."""
        record = self._record(user_id)
        if record is None:
            raise ProfileNotFoundError(user_id)

        if not isinstance(changes, UserProfileUpdate):
            changes = UserProfileUpdate.model_validate(changes)

        current = UserProfile.model_validate(record.payload)
        merged = current.model_copy(update=changes.changes())
        merged = merged.model_copy(update={
            "updated_at": utc_now(),
            "is_profile_complete": is_profile_complete(merged),
        })

        record.payload = merged.to_document()
        record.industry = merged.industry
        record.is_profile_complete = merged.is_profile_complete
        record.updated_at = merged.updated_at
        self.db.commit()
        logger.info(
            f"Updated profile for user {user_id} "
            f"({profile_completion_percentage(merged)}% complete)"
        )
        return merged

    def get_users_by_industry(self, industry: str) -> List[UserProfile]:
        records = (
            self.db.query(UserProfileRecord)
            .filter(
                UserProfileRecord.industry == industry,
                UserProfileRecord.is_profile_complete.is_(True),
            )
            .all()
        )
        return [UserProfile.model_validate(r.payload) for r in records]

    def get_profile_stats(self) -> Dict[str, Any]:
        total = self.db.query(func.count(UserProfileRecord.user_id)).scalar() or 0
        complete = (
            self.db.query(func.count(UserProfileRecord.user_id))
            .filter(UserProfileRecord.is_profile_complete.is_(True))
            .scalar()
        ) or 0

        count = func.count(UserProfileRecord.user_id)
        top = (
            self.db.query(UserProfileRecord.industry, count)
            .filter(
                UserProfileRecord.is_profile_complete.is_(True),
                UserProfileRecord.industry != "",
            )
            .group_by(UserProfileRecord.industry)
            .order_by(count.desc(), UserProfileRecord.industry)
            .limit(TOP_INDUSTRIES)
            .all()
        )

        return {
            "totalUsers": total,
            "completeProfiles": complete,
            "incompleteProfiles": total - complete,
            "topIndustries": [{"industry": industry, "count": n} for industry, n in top],
        }
