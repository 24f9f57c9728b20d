from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def list_by_ids(self, user_ids: Sequence[int]) -> Sequence[User]:
        raise NotImplementedError

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        raise NotImplementedError

    def update_profile(
        self,
        *,
        user_id: int,
        name: str,
        department: Optional[str],
        position: Optional[str],
        bio: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def update_access(self, *, user_id: int, role: Role, is_active: bool) -> bool:
        raise NotImplementedError

    def update_password(self, *, user_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def touch_last_login(self, *, user_id: int, at: datetime) -> None:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError
