from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Task:
    task_id: int
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date]
    tags: Tuple[str, ...]
    user_id: int
    assigned_to: Optional[int] = None
    organization_id: Optional[int] = None
    parent_task_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def is_overdue(self, today: date) -> bool:
        return self.due_date is not None and self.due_date < today and not self.is_completed


@dataclass(frozen=True)
class TaskQuery:
    """Filters for listing parent tasks."""

    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    tag: Optional[str] = None
    organization_id: Optional[int] = None
    due_from: Optional[date] = None
    due_to: Optional[date] = None
    sort: str = "created_at"
    direction: str = "desc"
    only_mine: bool = False
