from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

from ..common.tags import parse_tags, tags_to_str
from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_count, fetchall, fetchone, in_clause, opt_int, set_clause, where
from .model import Task, TaskQuery
from .repository import TaskRepository

_COLUMNS = (
    "task_id, title, description, status, priority, due_date, tags, user_id, "
    "assigned_to, organization_id, parent_task_id, created_at, updated_at"
)

_WRITABLE = {
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "tags",
    "user_id",
    "assigned_to",
    "organization_id",
    "parent_task_id",
}

_ORDER_BY = {
    "created_at": "created_at",
    "due_date": "due_date IS NULL, due_date",
    "priority": "FIELD(priority, 'high', 'medium', 'low')",
}


def _to_task(row: dict) -> Task:
    return Task(
        task_id=int(row["task_id"]),
        title=row["title"],
        description=row.get("description"),
        status=TaskStatus(row["status"]),
        priority=TaskPriority(row["priority"]),
        due_date=row.get("due_date"),
        tags=parse_tags(row.get("tags")),
        user_id=int(row["user_id"]),
        assigned_to=opt_int(row.get("assigned_to")),
        organization_id=opt_int(row.get("organization_id")),
        parent_task_id=opt_int(row.get("parent_task_id")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _db_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - _WRITABLE
    if unknown:
        raise ValueError(f"Unknown task columns: {sorted(unknown)}")
    out: Dict[str, Any] = {}
    for k, v in fields.items():
        if k == "tags":
            v = tags_to_str(v)
        elif hasattr(v, "value"):
            v = v.value
        out[k] = v
    return out


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, fields: Dict[str, Any]) -> int:
        values = _db_values(fields)
        cols = ", ".join(values)
        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO tasks({cols}) VALUES({placeholders})", tuple(values.values()))
            return int(cur.lastrowid)

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE task_id=%s", (task_id,))
            row = fetchone(cur)
            return _to_task(row) if row else None

    def update_fields(self, *, task_id: int, fields: Dict[str, Any]) -> bool:
        if not fields:
            return True
        sql, params = set_clause(_db_values(fields))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE tasks SET {sql} WHERE task_id=%s", params + (task_id,))
            return cur.rowcount > 0

    def delete_by_id(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (task_id,))
            return cur.rowcount > 0

    def list_subtasks(self, parent_task_id: int) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM tasks WHERE parent_task_id=%s ORDER BY task_id",
                (parent_task_id,),
            )
            return [_to_task(r) for r in fetchall(cur)]

    def search(
        self,
        query: TaskQuery,
        *,
        viewer_id: int,
        organization_ids: Sequence[int],
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[Sequence[Task], int]:
        clauses = ["parent_task_id IS NULL"]
        params: list = []

        if query.only_mine:
            clauses.append("(user_id=%s OR assigned_to=%s)")
            params += [viewer_id, viewer_id]
        else:
            orgs_sql, orgs_params = in_clause(list(organization_ids))
            clauses.append(f"(user_id=%s OR assigned_to=%s OR organization_id IN {orgs_sql})")
            params += [viewer_id, viewer_id, *orgs_params]

        if query.status:
            clauses.append("status=%s")
            params.append(query.status.value)
        if query.priority:
            clauses.append("priority=%s")
            params.append(query.priority.value)
        if query.tag:
            clauses.append("tags LIKE %s")
            params.append(f"%{query.tag}%")
        if query.organization_id:
            clauses.append("organization_id=%s")
            params.append(query.organization_id)
        if query.due_from:
            clauses.append("due_date >= %s")
            params.append(query.due_from)
        if query.due_to:
            clauses.append("due_date <= %s")
            params.append(query.due_to)

        where_sql = where(clauses)
        order = _ORDER_BY.get(query.sort, "created_at")
        direction = "ASC" if query.direction.lower() == "asc" else "DESC"
        if query.sort == "priority":
            # FIELD() ranks high first; flip so "desc" means high first.
            direction = "DESC" if direction == "ASC" else "ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM tasks {where_sql}", tuple(params))
            total = fetch_count(cur)

            sql = f"SELECT {_COLUMNS} FROM tasks {where_sql} ORDER BY {order} {direction}, task_id DESC"
            page_params = list(params)
            if limit is not None:
                sql += " LIMIT %s OFFSET %s"
                page_params += [int(limit), int(offset)]
            cur.execute(sql, tuple(page_params))
            return [_to_task(r) for r in fetchall(cur)], total
