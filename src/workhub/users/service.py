from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import (
    optional_enum,
    parse_bool_field,
    require_email,
    require_max_length,
    require_min_length,
    require_non_empty,
)
from ..core.constants import (
    BIO_MAX_LENGTH,
    CHANGE_PASSWORD_MIN_LENGTH,
    NAME_MAX_LENGTH,
    PROFILE_FIELD_MAX_LENGTH,
    SIGNUP_PASSWORD_MIN_LENGTH,
)
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    NotFoundError,
    ValidationError,
)
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    name: str
    role: Role
    department: Optional[str]


def _to_session(user: User) -> SessionUser:
    return SessionUser(user_id=user.user_id, name=user.name, role=user.role, department=user.department)


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # placeholder or corrupted hashes
        return False


class AuthService:
    """Use cases: signup, login, change password."""

    def __init__(self, users: UserRepository):
        self._users = users

    def signup(self, *, name: str, email: str, password: str) -> SessionUser:
        name = require_non_empty(name, "name")
        require_max_length(name, "name", NAME_MAX_LENGTH)
        email = require_email(email)
        require_min_length(password, "password", SIGNUP_PASSWORD_MIN_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("email has already been taken", errors={"email": ["has already been taken"]})

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.MEMBER,
        )
        logger.info("User %s signed up", user_id)
        return SessionUser(user_id=user_id, name=name, role=Role.MEMBER, department=None)

    def authenticate(self, email: Optional[str], password: Optional[str], *, now: datetime | None = None) -> SessionUser:
        if not email or not password:
            raise BadRequestError("Email and password are required")

        user = self._users.get_by_email(email.strip().lower())
        if not user or not user.is_active or not _password_matches(user.password_hash, password):
            logger.info("Rejected login for %s", email)
            raise AuthenticationError("Invalid email or password")

        self._users.touch_last_login(user_id=user.user_id, at=now or now_local())
        return _to_session(user)

    def change_password(self, *, user_id: int, current_password: str, new_password: str, confirmation: str) -> None:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not current_password or not _password_matches(user.password_hash, current_password):
            raise AuthenticationError("Current password is incorrect")
        if new_password != confirmation:
            raise ValidationError(
                "Password confirmation doesn't match",
                errors={"password_confirmation": ["doesn't match password"]},
            )
        require_min_length(new_password, "password", CHANGE_PASSWORD_MIN_LENGTH)

        self._users.update_password(user_id=user_id, password_hash=generate_password_hash(new_password))
        logger.info("User %s changed password", user_id)


class UserService:
    """Use cases: list and manage users."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    def update_user(self, *, actor_id: int, user_id: int, data: dict) -> User:
        actor = self.get_user(actor_id)
        target = self.get_user(user_id)
        if not actor.is_admin and actor.user_id != target.user_id:
            raise AuthorizationError("You can only edit your own account")

        changes_access = "role" in data or "is_active" in data
        if changes_access:
            if not actor.is_admin:
                raise AuthorizationError("Only admins can change role or status")
            role = optional_enum(Role, data.get("role"), "role") or target.role
            is_active = parse_bool_field(data["is_active"], "is_active") if "is_active" in data else target.is_active

        self._apply_profile(target, data)
        if changes_access:
            self._users.update_access(user_id=target.user_id, role=role, is_active=is_active)

        return self.get_user(target.user_id)

    def update_profile(self, *, user_id: int, data: dict) -> User:
        user = self.get_user(user_id)
        self._apply_profile(user, data)
        return self.get_user(user_id)

    def delete_user(self, *, actor_id: int, user_id: int) -> None:
        actor = self.get_user(actor_id)
        target = self.get_user(user_id)
        if not actor.is_admin and actor.user_id != target.user_id:
            raise AuthorizationError("You can only delete your own account")

        if not self._users.delete_by_id(target.user_id):
            raise NotFoundError("User not found")
        logger.info("User %s deleted by %s", target.user_id, actor.user_id)

    def _apply_profile(self, user: User, data: dict) -> None:
        name = data.get("name", user.name)
        name = require_non_empty(name, "name")
        require_max_length(name, "name", NAME_MAX_LENGTH)

        department = data.get("department", user.department)
        position = data.get("position", user.position)
        bio = data.get("bio", user.bio)
        require_max_length(department, "department", PROFILE_FIELD_MAX_LENGTH)
        require_max_length(position, "position", PROFILE_FIELD_MAX_LENGTH)
        require_max_length(bio, "bio", BIO_MAX_LENGTH)

        self._users.update_profile(
            user_id=user.user_id,
            name=name,
            department=department or None,
            position=position or None,
            bio=bio,
        )
