from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..core.enums import AccessLevel, Department, EditPermission, ManualCategory, ManualStatus


@dataclass(frozen=True)
class Manual:
    """Internal document with department/category visibility rules."""

    manual_id: int
    user_id: int
    title: str
    content: str
    department: Department
    category: ManualCategory
    access_level: AccessLevel
    edit_permission: EditPermission
    status: ManualStatus
    tags: Tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author_name: Optional[str] = None


@dataclass(frozen=True)
class Viewer:
    """Who is looking: enough of the user to evaluate manual access."""

    user_id: int
    department: Optional[str]


@dataclass(frozen=True)
class ManualQuery:
    department: Optional[Department] = None
    category: Optional[ManualCategory] = None
    title: Optional[str] = None
    content: Optional[str] = None
    author_id: Optional[int] = None
    status: Optional[ManualStatus] = None
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None
    updated_after: Optional[datetime] = None
    updated_before: Optional[datetime] = None
    order_by: str = "updated_at"
    order: str = "desc"
    only_author: bool = False
