from __future__ import annotations

import logging
from collections import Counter, OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Sequence

from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.tags import parse_tags
from ..common.validators import optional_enum, parse_date_field, parse_enum, parse_int_field, require_non_empty
from ..core.constants import DASHBOARD_RECENT_LIMIT, DASHBOARD_UPCOMING_DAYS, DEFAULT_TASKS_PER_PAGE
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from ..organizations.service import OrganizationService
from ..users.repository import UserRepository
from .model import Task, TaskQuery
from .repository import TaskRepository

logger = logging.getLogger(__name__)

_SORTS = {"created_at", "due_date", "priority"}


@dataclass(frozen=True)
class TaskDetail:
    task: Task
    subtasks: Sequence[Task]


@dataclass(frozen=True)
class Dashboard:
    recent: Sequence[Task]
    priority_counts: Dict[str, int]
    status_counts: Dict[str, int]
    upcoming: Sequence[Task]
    overdue: Sequence[Task]


def build_query(params: Dict[str, Any], *, only_mine: bool = False) -> TaskQuery:
    sort = params.get("sort_by") or params.get("sort") or "created_at"
    if sort not in _SORTS:
        sort = "created_at"
    direction = str(params.get("sort_direction") or params.get("direction") or "desc").lower()
    return TaskQuery(
        status=optional_enum(TaskStatus, params.get("status"), "status"),
        priority=optional_enum(TaskPriority, params.get("priority"), "priority"),
        tag=(params.get("tag") or None),
        organization_id=parse_int_field(params.get("organization_id"), "organization_id"),
        due_from=parse_date_field(params.get("due_date_from"), "due_date_from"),
        due_to=parse_date_field(params.get("due_date_to"), "due_date_to"),
        sort=sort,
        direction="asc" if direction == "asc" else "desc",
        only_mine=only_mine,
    )


class TaskService:
    def __init__(self, tasks: TaskRepository, users: UserRepository, organizations: OrganizationService):
        self._tasks = tasks
        self._users = users
        self._orgs = organizations

    # Access
    def _actor_is_admin(self, actor_id: int) -> bool:
        actor = self._users.get_by_id(int(actor_id))
        return bool(actor and actor.is_admin)

    def _can_view(self, task: Task, actor_id: int) -> bool:
        if actor_id in (task.user_id, task.assigned_to) or self._actor_is_admin(actor_id):
            return True
        return task.organization_id is not None and task.organization_id in self._orgs.organization_ids_for(actor_id)

    def _can_modify(self, task: Task, actor_id: int) -> bool:
        return actor_id in (task.user_id, task.assigned_to) or self._actor_is_admin(actor_id)

    def _get_or_404(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def _get_for_view(self, actor_id: int, task_id: int) -> Task:
        task = self._get_or_404(task_id)
        if not self._can_view(task, actor_id):
            raise AuthorizationError("You don't have access to this task")
        return task

    def _get_for_edit(self, actor_id: int, task_id: int) -> Task:
        task = self._get_or_404(task_id)
        if not self._can_modify(task, actor_id):
            raise AuthorizationError("You don't have permission to modify this task")
        return task

    # Validation
    def _validated_fields(self, actor_id: int, data: Dict[str, Any], *, partial: bool) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}

        if not partial or "title" in data:
            fields["title"] = require_non_empty(data.get("title"), "title")
        if "description" in data:
            fields["description"] = data.get("description") or None
        if "status" in data or not partial:
            fields["status"] = parse_enum(TaskStatus, data.get("status") or TaskStatus.PENDING.value, "status")
        if "priority" in data or not partial:
            fields["priority"] = parse_enum(TaskPriority, data.get("priority") or TaskPriority.MEDIUM.value, "priority")
        if "due_date" in data:
            fields["due_date"] = parse_date_field(data.get("due_date"), "due_date")
        if "tags" in data or "tag_list" in data:
            fields["tags"] = parse_tags(data.get("tags", data.get("tag_list")))

        if "organization_id" in data:
            org_id = parse_int_field(data.get("organization_id"), "organization_id")
            if org_id is not None:
                self._orgs.require_member(organization_id=org_id, user_id=actor_id)
            fields["organization_id"] = org_id

        if "assigned_to" in data:
            assignee = parse_int_field(data.get("assigned_to"), "assigned_to")
            if assignee is not None and not self._users.get_by_id(assignee):
                raise ValidationError("assigned_to must reference an existing user", errors={"assigned_to": ["not found"]})
            fields["assigned_to"] = assignee

        return fields

    @staticmethod
    def _validated_subtasks(items) -> List[Dict[str, Any]]:
        if items is None:
            return []
        if not isinstance(items, list):
            raise ValidationError("subtasks must be a list", errors={"subtasks": ["must be a list"]})
        out = []
        for item in items:
            if not isinstance(item, dict):
                raise ValidationError("subtasks must be objects", errors={"subtasks": ["invalid item"]})
            out.append(
                {
                    "id": parse_int_field(item.get("id"), "subtasks.id"),
                    "title": require_non_empty(item.get("title"), "subtasks.title"),
                    "completed": bool(item.get("completed")),
                }
            )
        return out

    # Use cases
    def create(self, *, actor_id: int, data: Dict[str, Any]) -> TaskDetail:
        fields = self._validated_fields(actor_id, data, partial=False)
        subtasks = self._validated_subtasks(data.get("subtasks"))
        fields["user_id"] = int(actor_id)
        fields.setdefault("assigned_to", int(actor_id))

        task_id = self._tasks.create(fields=fields)
        for sub in subtasks:
            self._create_subtask(fields, task_id, sub)
        logger.info("Task %s created by user %s", task_id, actor_id)
        return self.get(actor_id=actor_id, task_id=task_id)

    def _create_subtask(self, parent_fields: Dict[str, Any], parent_id: int, sub: Dict[str, Any]) -> None:
        self._tasks.create(
            fields={
                "title": sub["title"],
                "status": TaskStatus.COMPLETED if sub["completed"] else TaskStatus.PENDING,
                "priority": parent_fields.get("priority", TaskPriority.MEDIUM),
                "user_id": parent_fields["user_id"],
                "assigned_to": parent_fields.get("assigned_to"),
                "organization_id": parent_fields.get("organization_id"),
                "parent_task_id": parent_id,
            }
        )

    def list_tasks(self, *, actor_id: int, params: Dict[str, Any], only_mine: bool = False) -> Page[Task]:
        query = build_query(params, only_mine=only_mine)
        if query.organization_id is not None:
            self._orgs.require_member(organization_id=query.organization_id, user_id=actor_id)
        paging = PageRequest.of(params.get("page"), params.get("per_page"), default_per_page=DEFAULT_TASKS_PER_PAGE)
        items, total = self._tasks.search(
            query,
            viewer_id=int(actor_id),
            organization_ids=self._orgs.organization_ids_for(actor_id),
            offset=paging.offset,
            limit=paging.per_page,
        )
        return Page(items=list(items), page=paging.page, per_page=paging.per_page, total_count=total)

    def get(self, *, actor_id: int, task_id: int) -> TaskDetail:
        task = self._get_for_view(actor_id, task_id)
        return TaskDetail(task=task, subtasks=self._tasks.list_subtasks(task.task_id))

    def update(self, *, actor_id: int, task_id: int, data: Dict[str, Any]) -> TaskDetail:
        task = self._get_for_edit(actor_id, task_id)
        fields = self._validated_fields(actor_id, data, partial=True)
        subtasks = self._validated_subtasks(data.get("subtasks")) if "subtasks" in data else None

        self._tasks.update_fields(task_id=task.task_id, fields=fields)
        if subtasks is not None:
            self._sync_subtasks(task, subtasks)
        return self.get(actor_id=actor_id, task_id=task.task_id)

    def _sync_subtasks(self, parent: Task, items: List[Dict[str, Any]]) -> None:
        existing = {s.task_id: s for s in self._tasks.list_subtasks(parent.task_id)}
        keep: set[int] = set()
        parent_fields = {
            "user_id": parent.user_id,
            "assigned_to": parent.assigned_to,
            "organization_id": parent.organization_id,
            "priority": parent.priority,
        }
        for item in items:
            sub_id = item["id"]
            if sub_id is not None and sub_id in existing:
                keep.add(sub_id)
                self._tasks.update_fields(
                    task_id=sub_id,
                    fields={
                        "title": item["title"],
                        "status": TaskStatus.COMPLETED if item["completed"] else TaskStatus.PENDING,
                    },
                )
            else:
                self._create_subtask(parent_fields, parent.task_id, item)
        for sub_id in set(existing) - keep:
            self._tasks.delete_by_id(sub_id)

    def delete(self, *, actor_id: int, task_id: int) -> None:
        task = self._get_for_edit(actor_id, task_id)
        self._tasks.delete_by_id(task.task_id)
        logger.info("Task %s deleted by user %s", task.task_id, actor_id)

    def update_status(self, *, actor_id: int, task_id: int, status) -> Task:
        task = self._get_for_edit(actor_id, task_id)
        new_status = parse_enum(TaskStatus, status, "status")
        self._tasks.update_fields(task_id=task.task_id, fields={"status": new_status})
        return self._get_or_404(task.task_id)

    def assign(self, *, actor_id: int, task_id: int, user_id) -> Task:
        task = self._get_for_edit(actor_id, task_id)
        assignee_id = parse_int_field(user_id, "user_id")
        if assignee_id is None or not self._users.get_by_id(assignee_id):
            raise NotFoundError("User not found")
        self._tasks.update_fields(task_id=task.task_id, fields={"assigned_to": assignee_id})
        logger.info("Task %s assigned to user %s", task.task_id, assignee_id)
        return self._get_or_404(task.task_id)

    def toggle_subtask(self, *, actor_id: int, task_id: int, subtask_id: int) -> Task:
        parent = self._get_for_edit(actor_id, task_id)
        sub = self._tasks.get_by_id(int(subtask_id))
        if not sub or sub.parent_task_id != parent.task_id:
            raise NotFoundError("Subtask not found")
        new_status = TaskStatus.PENDING if sub.is_completed else TaskStatus.COMPLETED
        self._tasks.update_fields(task_id=sub.task_id, fields={"status": new_status})
        return self._get_or_404(sub.task_id)

    def batch_update(self, *, actor_id: int, items) -> List[Dict[str, Any]]:
        """Apply independent updates; one failure does not stop the others."""
        if not isinstance(items, list) or not items:
            raise ValidationError("tasks must be a non-empty list", errors={"tasks": ["can't be blank"]})

        results: List[Dict[str, Any]] = []
        for item in items:
            task_id = item.get("id") if isinstance(item, dict) else None
            try:
                parsed_id = parse_int_field(task_id, "id")
                if parsed_id is None:
                    raise ValidationError("id is required")
                changes = {k: v for k, v in item.items() if k != "id"}
                self.update(actor_id=actor_id, task_id=parsed_id, data=changes)
                results.append({"id": task_id, "success": True})
            except DomainError as e:
                results.append({"id": task_id, "success": False, "error": e.message})
        return results

    def calendar(self, *, actor_id: int, start: date, end: date) -> "OrderedDict[str, List[Task]]":
        if end < start:
            raise ValidationError("end_date must be on or after start_date")
        items, _ = self._tasks.search(
            TaskQuery(due_from=start, due_to=end, sort="due_date", direction="asc"),
            viewer_id=int(actor_id),
            organization_ids=self._orgs.organization_ids_for(actor_id),
        )
        grouped: "OrderedDict[str, List[Task]]" = OrderedDict()
        for t in sorted(items, key=lambda t: t.due_date):
            grouped.setdefault(t.due_date.isoformat(), []).append(t)
        return grouped

    def dashboard(self, *, actor_id: int, now: datetime | None = None) -> Dashboard:
        today = (now or now_local()).date()
        items, _ = self._tasks.search(
            TaskQuery(sort="created_at", direction="desc"),
            viewer_id=int(actor_id),
            organization_ids=self._orgs.organization_ids_for(actor_id),
        )
        items = list(items)

        priority_counts = Counter(t.priority.value for t in items)
        status_counts = Counter(t.status.value for t in items)
        horizon = today + timedelta(days=DASHBOARD_UPCOMING_DAYS)
        open_with_due = [t for t in items if t.due_date is not None and not t.is_completed]

        return Dashboard(
            recent=items[:DASHBOARD_RECENT_LIMIT],
            priority_counts={p.value: priority_counts.get(p.value, 0) for p in TaskPriority},
            status_counts={s.value: status_counts.get(s.value, 0) for s in TaskStatus},
            upcoming=sorted((t for t in open_with_due if today <= t.due_date <= horizon), key=lambda t: t.due_date),
            overdue=sorted((t for t in open_with_due if t.due_date < today), key=lambda t: t.due_date),
        )
