"""Tests for authentication dependencies."""

from datetime import timedelta

import pytest
from sqlmodel import Session

from app.core.dependencies import (
    get_current_admin,
    get_current_host_user,
    get_current_user,
    get_optional_user,
)
from app.core.security import create_access_token, create_refresh_token
from app.exceptions import InsufficientPermissionsError, InvalidTokenError


def access_token_for(user) -> str:
    return create_access_token({"sub": user.username, "role": user.role.value})


class TestGetCurrentUser:
    def test_valid_token(self, session: Session, volunteer):
        user = get_current_user(access_token_for(volunteer), session)
        assert user.id_user == volunteer.id_user

    def test_refresh_token_rejected(self, session: Session, volunteer):
        token = create_refresh_token({"sub": volunteer.username})
        with pytest.raises(InvalidTokenError):
            get_current_user(token, session)

    def test_expired_token(self, session: Session, volunteer):
        token = create_access_token({"sub": volunteer.username}, timedelta(seconds=-5))
        with pytest.raises(InvalidTokenError):
            get_current_user(token, session)

    def test_unknown_subject(self, session: Session):
        with pytest.raises(InvalidTokenError):
            get_current_user(create_access_token({"sub": "nobody"}), session)

    def test_inactive_user(self, session: Session, make_user):
        user = make_user("frozen", is_active=False)
        with pytest.raises(InvalidTokenError):
            get_current_user(access_token_for(user), session)


class TestOptionalUser:
    def test_no_token_is_anonymous(self, session: Session):
        assert get_optional_user(None, session) is None

    def test_bad_token_still_rejected(self, session: Session):
        with pytest.raises(InvalidTokenError):
            get_optional_user("garbage", session)


class TestRoleDependencies:
    def test_admin_passes(self, admin_user):
        assert get_current_admin(admin_user) is admin_user

    def test_host_is_not_admin(self, host_user):
        with pytest.raises(InsufficientPermissionsError):
            get_current_admin(host_user)

    def test_host_user_requires_profile(self, host_user, volunteer):
        assert get_current_host_user(host_user) is host_user
        with pytest.raises(InsufficientPermissionsError):
            get_current_host_user(volunteer)
