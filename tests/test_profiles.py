"""
User profiles and email/password accounts.
"""

import pytest

from prediktor.db.auth import (
    EMAIL_IN_USE,
    INVALID_CREDENTIALS,
    INVALID_EMAIL,
    LONG_PASSWORD,
    WEAK_PASSWORD,
    AuthError,
    AuthService,
    SessionContext,
    hash_password,
    verify_password,
)
from prediktor.db.profiles import (
    ProfileNotFoundError,
    UserProfileService,
    is_profile_complete,
    missing_profile_fields,
    profile_completion_percentage,
)
from prediktor.models.schemas import UserProfile, UserProfileUpdate

COMPLETE = {
    "firstName": "Awa",
    "lastName": "Kone",
    "companyName": "Kone Distribution",
    "industry": "Commerce",
    "country": "Senegal",
}


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def auth(db):
    return AuthService(db)


@pytest.fixture
def profiles(db):
    return UserProfileService(db)


@pytest.fixture
def user(auth):
    return auth.register("Awa@Example.com", "secret42")


# ─── Completeness ────────────────────────────────────────────────────────────

class TestCompleteness:
    def test_empty_profile(self):
        profile = UserProfile()
        assert profile_completion_percentage(profile) == 0
        assert not is_profile_complete(profile)
        assert missing_profile_fields(profile) == [
            "firstName", "lastName", "companyName", "industry", "country",
        ]

    def test_partial_profile_rounds(self):
        profile = UserProfile(first_name="Awa", last_name="Kone")
        assert profile_completion_percentage(profile) == 40
        assert missing_profile_fields(profile) == ["companyName", "industry", "country"]

    def test_complete_mapping(self):
        assert is_profile_complete(COMPLETE)
        assert profile_completion_percentage(COMPLETE) == 100

    def test_blank_values_do_not_count(self):
        assert not is_profile_complete({**COMPLETE, "country": ""})


# ─── Profile Service ─────────────────────────────────────────────────────────

class TestUserProfileService:
    def test_registration_creates_empty_profile(self, user, profiles):
        profile = profiles.load_user_profile(user.user_id)
        assert profile.email == "awa@example.com"
        assert profile.is_profile_complete is False
        assert profile.currency == "FCFA"

    def test_unknown_user(self, profiles):
        assert profiles.load_user_profile("missing") is None
        with pytest.raises(ProfileNotFoundError):
            profiles.update_user_profile("missing", {"firstName": "X"})

    def test_update_merges_and_recomputes(self, user, profiles):
        before = profiles.load_user_profile(user.user_id)
        profiles.update_user_profile(user.user_id, {"firstName": "Awa", "phone": "+221"})
        partial = profiles.load_user_profile(user.user_id)
        assert partial.first_name == "Awa"
        assert partial.phone == "+221"
        assert partial.is_profile_complete is False
        assert partial.updated_at >= before.updated_at

        updated = profiles.update_user_profile(user.user_id, UserProfileUpdate(**COMPLETE))
        assert updated.is_profile_complete is True
        assert profiles.load_user_profile(user.user_id).phone == "+221"

    def test_update_ignores_unknown_fields(self, user, profiles):
        updated = profiles.update_user_profile(user.user_id, {"email": "x@y.z", "bogus": 1})
        assert updated.email == "awa@example.com"

    def test_users_by_industry_only_complete(self, auth, profiles):
        first = auth.register("one@example.com", "secret42")
        second = auth.register("two@example.com", "secret42")
        profiles.update_user_profile(first.user_id, COMPLETE)
        profiles.update_user_profile(second.user_id, {"industry": "Commerce"})

        found = profiles.get_users_by_industry("Commerce")
        assert [p.email for p in found] == ["one@example.com"]

    def test_profile_stats(self, auth, profiles):
        industries = ["Commerce", "Commerce", "Services", "Agriculture", "Tech", "Health", "Mining"]
        for i, industry in enumerate(industries):
            session = auth.register(f"user{i}@example.com", "secret42")
            profiles.update_user_profile(session.user_id, {**COMPLETE, "industry": industry})
        auth.register("incomplete@example.com", "secret42")

        stats = profiles.get_profile_stats()
        assert stats["totalUsers"] == 8
        assert stats["completeProfiles"] == 7
        assert stats["incompleteProfiles"] == 1
        assert len(stats["topIndustries"]) == 5
        assert stats["topIndustries"][0] == {"industry": "Commerce", "count": 2}


# ─── Auth ────────────────────────────────────────────────────────────────────

class TestAuthService:
    def test_password_hashing(self):
        hashed = hash_password("secret42")
        assert hashed != "secret42"
        assert verify_password("secret42", hashed)
        assert not verify_password("wrong", hashed)

    def test_register_normalizes_email(self, user):
        assert user.email == "awa@example.com"
        assert user.user_id

    def test_login(self, auth, user):
        session = auth.login("awa@example.com", "secret42")
        assert session == user

    def test_wrong_password(self, auth, user):
        with pytest.raises(AuthError, match=INVALID_CREDENTIALS):
            auth.login("awa@example.com", "secret43")

    def test_unknown_email_same_message(self, auth):
        with pytest.raises(AuthError) as exc:
            auth.login("ghost@example.com", "secret42")
        assert str(exc.value) == INVALID_CREDENTIALS

    @pytest.mark.parametrize("email", ["", "not-an-email", "a@b", "two words@example.com"])
    def test_invalid_email(self, auth, email):
        with pytest.raises(AuthError) as exc:
            auth.register(email, "secret42")
        assert str(exc.value) == INVALID_EMAIL

    def test_weak_password(self, auth):
        with pytest.raises(AuthError) as exc:
            auth.register("new@example.com", "12345")
        assert str(exc.value) == WEAK_PASSWORD

    @pytest.mark.parametrize("password", ["y" * 73, "\u00e9" * 37])
    def test_password_over_72_bytes(self, auth, password):
        with pytest.raises(AuthError) as exc:
            auth.register("new@example.com", password)
        assert str(exc.value) == LONG_PASSWORD

    def test_password_of_72_bytes_accepted(self, auth):
        session = auth.register("new@example.com", "y" * 72)
        assert auth.login("new@example.com", "y" * 72) == session

    def test_over_long_login_is_rejected(self, auth, user):
        with pytest.raises(AuthError, match=INVALID_CREDENTIALS):
            auth.login("awa@example.com", "secret42" + "y" * 80)

    def test_duplicate_email(self, auth, user):
        with pytest.raises(AuthError) as exc:
            auth.register("AWA@example.com", "another1")
        assert str(exc.value) == EMAIL_IN_USE


class TestSessionContext:
    def test_dict_round_trip(self):
        session = SessionContext(user_id="u1", email="a@b.co")
        assert SessionContext.from_dict(session.to_dict()) == session

    @pytest.mark.parametrize("data", [None, {}, {"user_id": "u1"}, {"email": "a@b.co"}])
    def test_incomplete_dict(self, data):
        assert SessionContext.from_dict(data) is None
