from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

from .model import Task, TaskQuery


class TaskRepository(Protocol):
    def create(self, *, fields: Dict[str, Any]) -> int:
        raise NotImplementedError

    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def update_fields(self, *, task_id: int, fields: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, task_id: int) -> bool:
        raise NotImplementedError

    def list_subtasks(self, parent_task_id: int) -> Sequence[Task]:
        raise NotImplementedError

    def search(
        self,
        query: TaskQuery,
        *,
        viewer_id: int,
        organization_ids: Sequence[int],
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[Sequence[Task], int]:
        """Visible parent tasks matching query, plus the total count before paging."""
        raise NotImplementedError
