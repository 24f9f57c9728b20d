from __future__ import annotations

import logging
from typing import Any, Dict

from ..common.pagination import Page, PageRequest
from ..common.tags import parse_tags
from ..common.validators import optional_enum, parse_datetime_field, parse_enum, parse_int_field, require_non_empty
from ..core.constants import DEFAULT_MANUALS_PER_PAGE
from ..core.enums import AccessLevel, Department, EditPermission, ManualCategory, ManualStatus
from ..core.exceptions import AuthorizationError, NotFoundError
from ..users.repository import UserRepository
from .model import Manual, ManualQuery, Viewer
from .policy import can_edit, can_view
from .repository import ManualRepository

logger = logging.getLogger(__name__)

_ORDER_BY = {"title", "created_at", "updated_at"}


class ManualService:
    def __init__(self, manuals: ManualRepository, users: UserRepository):
        self._manuals = manuals
        self._users = users

    def viewer(self, user_id: int) -> Viewer:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return Viewer(user_id=user.user_id, department=user.department)

    def _get_or_404(self, manual_id: int) -> Manual:
        manual = self._manuals.get_by_id(int(manual_id))
        if not manual:
            raise NotFoundError("Manual not found")
        return manual

    def _page(self, query: ManualQuery, viewer: Viewer, params: Dict[str, Any]) -> Page[Manual]:
        paging = PageRequest.of(params.get("page"), params.get("per_page"), default_per_page=DEFAULT_MANUALS_PER_PAGE)
        items, total = self._manuals.search(query, viewer=viewer, offset=paging.offset, limit=paging.per_page)
        return Page(items=list(items), page=paging.page, per_page=paging.per_page, total_count=total)

    def list_manuals(self, *, actor_id: int, params: Dict[str, Any]) -> Page[Manual]:
        query = ManualQuery(
            department=optional_enum(Department, params.get("department"), "department"),
            category=optional_enum(ManualCategory, params.get("category"), "category"),
            title=params.get("query") or None,
        )
        return self._page(query, self.viewer(actor_id), params)

    def search(self, *, actor_id: int, params: Dict[str, Any]) -> Page[Manual]:
        # Unknown sort keys fall back to newest-updated first.
        order_by = params.get("order_by") if params.get("order_by") in _ORDER_BY else "updated_at"
        order = params.get("order") if params.get("order") in ("asc", "desc") else "desc"
        query = ManualQuery(
            department=optional_enum(Department, params.get("department"), "department"),
            category=optional_enum(ManualCategory, params.get("category"), "category"),
            title=params.get("title") or params.get("query") or None,
            content=params.get("content") or None,
            author_id=parse_int_field(params.get("author_id"), "author_id"),
            created_after=parse_datetime_field(params.get("created_after"), "created_after"),
            created_before=parse_datetime_field(params.get("created_before"), "created_before"),
            updated_after=parse_datetime_field(params.get("updated_after"), "updated_after"),
            updated_before=parse_datetime_field(params.get("updated_before"), "updated_before"),
            order_by=order_by,
            order=order,
        )
        return self._page(query, self.viewer(actor_id), params)

    def my_manuals(self, *, actor_id: int, params: Dict[str, Any]) -> Page[Manual]:
        query = ManualQuery(status=optional_enum(ManualStatus, params.get("status"), "status"), only_author=True)
        return self._page(query, self.viewer(actor_id), params)

    def get(self, *, actor_id: int, manual_id: int) -> Manual:
        manual = self._get_or_404(manual_id)
        if not can_view(manual, self.viewer(actor_id)):
            raise AuthorizationError("You don't have access to this manual")
        return manual

    def create(self, *, actor_id: int, data: Dict[str, Any]) -> Manual:
        fields = self._validated_fields(data, partial=False)
        fields["user_id"] = int(actor_id)
        manual_id = self._manuals.create(fields=fields)
        logger.info("Manual %s created by user %s", manual_id, actor_id)
        return self._get_or_404(manual_id)

    def update(self, *, actor_id: int, manual_id: int, data: Dict[str, Any]) -> Manual:
        manual = self._get_for_edit(actor_id, manual_id)
        self._manuals.update_fields(manual_id=manual.manual_id, fields=self._validated_fields(data, partial=True))
        return self._get_or_404(manual.manual_id)

    def delete(self, *, actor_id: int, manual_id: int) -> None:
        manual = self._get_for_edit(actor_id, manual_id)
        self._manuals.delete_by_id(manual.manual_id)
        logger.info("Manual %s deleted by user %s", manual.manual_id, actor_id)

    @staticmethod
    def categories() -> Dict[str, list]:
        return {
            "departments": [d.value for d in Department],
            "categories": [c.value for c in ManualCategory],
            "access_levels": [a.value for a in AccessLevel],
            "edit_permissions": [e.value for e in EditPermission],
        }

    def _get_for_edit(self, actor_id: int, manual_id: int) -> Manual:
        manual = self._get_or_404(manual_id)
        if not can_edit(manual, self.viewer(actor_id)):
            raise AuthorizationError("You don't have permission to edit this manual")
        return manual

    @staticmethod
    def _validated_fields(data: Dict[str, Any], *, partial: bool) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        if not partial or "title" in data:
            fields["title"] = require_non_empty(data.get("title"), "title")
        if not partial or "content" in data:
            fields["content"] = require_non_empty(data.get("content"), "content")
        if not partial or "department" in data:
            fields["department"] = parse_enum(Department, data.get("department"), "department")
        if not partial or "category" in data:
            fields["category"] = parse_enum(ManualCategory, data.get("category"), "category")

        defaults = (
            ("access_level", AccessLevel, AccessLevel.ALL),
            ("edit_permission", EditPermission, EditPermission.AUTHOR),
            ("status", ManualStatus, ManualStatus.DRAFT),
        )
        for key, enum_cls, default in defaults:
            if key in data:
                fields[key] = parse_enum(enum_cls, data.get(key), key)
            elif not partial:
                fields[key] = default

        if "tags" in data:
            fields["tags"] = parse_tags(data.get("tags"))
        return fields

