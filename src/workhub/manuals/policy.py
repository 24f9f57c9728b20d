"""Read/edit rules for manuals, kept free of I/O so the repository and tests share them."""

from __future__ import annotations

from ..core.enums import AccessLevel, EditPermission, ManualStatus
from .model import Manual, Viewer


def _same_department(manual: Manual, viewer: Viewer) -> bool:
    return bool(viewer.department) and viewer.department == manual.department.value


def is_accessible(manual: Manual, viewer: Viewer) -> bool:
    """Listed in browse/search results: published and allowed by access level."""
    if manual.status != ManualStatus.PUBLISHED:
        return False
    if manual.access_level == AccessLevel.ALL:
        return True
    if manual.access_level == AccessLevel.DEPARTMENT:
        return _same_department(manual, viewer)
    return manual.user_id == viewer.user_id


def can_view(manual: Manual, viewer: Viewer) -> bool:
    if manual.user_id == viewer.user_id:
        return True
    if manual.status == ManualStatus.DRAFT:
        return False
    return is_accessible(manual, viewer)


def can_edit(manual: Manual, viewer: Viewer) -> bool:
    if manual.edit_permission == EditPermission.DEPARTMENT:
        return manual.user_id == viewer.user_id or _same_department(manual, viewer)
    return manual.user_id == viewer.user_id
