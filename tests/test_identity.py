# tests/test_identity.py

import uuid

import pytest

from app.core.exceptions import ConflictError, ValidationError
from app.models.profile import Profile
from app.schemas.profile import IdentityEvent, IdentityMetadata
from app.services import identity_service


def _event(identity_id=None, email="new@example.com", **metadata):
    return IdentityEvent(
        id=identity_id or uuid.uuid4(),
        email=email,
        metadata=metadata,
    )


class TestBootstrapProfile:
    def test_creates_profile_with_identity_id(self, db):
        event = _event(full_name="Noor Haddad", user_type="teacher")
        profile = identity_service.bootstrap_profile(db, event)

        assert profile.id == event.id
        assert profile.email == "new@example.com"
        assert profile.full_name == "Noor Haddad"
        assert profile.user_type == "teacher"
        assert profile.rating == 0
        assert profile.total_lessons == 0

    def test_defaults_name_and_role(self, db):
        profile = identity_service.bootstrap_profile(db, _event())
        assert profile.full_name == "New User"
        assert profile.user_type == "student"

    def test_blank_name_defaults(self, db):
        profile = identity_service.bootstrap_profile(db, _event(full_name="   "))
        assert profile.full_name == "New User"

    def test_unknown_role_rejected(self, db):
        with pytest.raises(ValidationError):
            identity_service.bootstrap_profile(db, _event(user_type="superuser"))

    def test_second_event_for_same_id_conflicts(self, db):
        identity_id = uuid.uuid4()
        identity_service.bootstrap_profile(db, _event(identity_id, full_name="First"))

        with pytest.raises(ConflictError):
            identity_service.bootstrap_profile(
                db, _event(identity_id, email="other@example.com", full_name="Second")
            )

        # The first profile is untouched and still readable
        profile = db.get(Profile, identity_id)
        assert profile.full_name == "First"
        assert profile.email == "new@example.com"

    def test_duplicate_email_conflicts(self, db):
        identity_service.bootstrap_profile(db, _event(email="dup@example.com"))
        with pytest.raises(ConflictError):
            identity_service.bootstrap_profile(db, _event(email="dup@example.com"))

    def test_overlong_name_rejected_not_truncated(self, db):
        event = IdentityEvent(
            id=uuid.uuid4(),
            email="long@example.com",
            metadata=IdentityMetadata.model_construct(full_name="N" * 101, user_type=None),
        )
        with pytest.raises(ValidationError):
            identity_service.bootstrap_profile(db, event)
        assert db.get(Profile, event.id) is None
