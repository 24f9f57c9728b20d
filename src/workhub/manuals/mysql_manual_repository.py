from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.enums import AccessLevel, Department, EditPermission, ManualCategory, ManualStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_count, fetchall, fetchone, set_clause, where
from ..common.tags import parse_tags, tags_to_str
from .model import Manual, ManualQuery, Viewer
from .repository import ManualRepository

_COLUMNS = (
    "mn.manual_id, mn.user_id, mn.title, mn.content, mn.department, mn.category, mn.access_level, "
    "mn.edit_permission, mn.status, mn.tags, mn.created_at, mn.updated_at, u.name AS author_name"
)

_WRITABLE = {"user_id", "title", "content", "department", "category", "access_level", "edit_permission", "status", "tags"}

_ORDER_COLUMNS = {"title": "mn.title", "created_at": "mn.created_at", "updated_at": "mn.updated_at"}


def _to_manual(row: dict) -> Manual:
    return Manual(
        manual_id=int(row["manual_id"]),
        user_id=int(row["user_id"]),
        title=row["title"],
        content=row["content"],
        department=Department(row["department"]),
        category=ManualCategory(row["category"]),
        access_level=AccessLevel(row["access_level"]),
        edit_permission=EditPermission(row["edit_permission"]),
        status=ManualStatus(row["status"]),
        tags=parse_tags(row.get("tags")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        author_name=row.get("author_name"),
    )


def _db_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - _WRITABLE
    if unknown:
        raise ValueError(f"Unknown manual columns: {sorted(unknown)}")
    out: Dict[str, Any] = {}
    for k, v in fields.items():
        if k == "tags":
            v = tags_to_str(v)
        elif hasattr(v, "value"):
            v = v.value
        out[k] = v
    return out


class MySQLManualRepository(ManualRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, fields: Dict[str, Any]) -> int:
        values = _db_values(fields)
        cols = ", ".join(values)
        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO manuals({cols}) VALUES({placeholders})", tuple(values.values()))
            return int(cur.lastrowid)

    def get_by_id(self, manual_id: int) -> Optional[Manual]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM manuals mn JOIN users u ON u.user_id = mn.user_id WHERE mn.manual_id=%s",
                (manual_id,),
            )
            row = fetchone(cur)
            return _to_manual(row) if row else None

    def update_fields(self, *, manual_id: int, fields: Dict[str, Any]) -> bool:
        if not fields:
            return True
        sql, params = set_clause(_db_values(fields))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE manuals SET {sql} WHERE manual_id=%s", params + (manual_id,))
            return cur.rowcount > 0

    def delete_by_id(self, manual_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM manuals WHERE manual_id=%s", (manual_id,))
            return cur.rowcount > 0

    def search(
        self,
        query: ManualQuery,
        *,
        viewer: Viewer,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[Sequence[Manual], int]:
        clauses: list[str] = []
        params: list = []

        if query.only_author:
            clauses.append("mn.user_id=%s")
            params.append(viewer.user_id)
        else:
            clauses.append(
                "(mn.status='published' AND (mn.access_level='all'"
                " OR (mn.access_level='department' AND mn.department=%s)"
                " OR (mn.access_level='specific' AND mn.user_id=%s)))"
            )
            params += [viewer.department or "", viewer.user_id]

        simple = (
            ("mn.department=%s", query.department.value if query.department else None),
            ("mn.category=%s", query.category.value if query.category else None),
            ("mn.status=%s", query.status.value if query.status else None),
            ("mn.user_id=%s", query.author_id),
            ("mn.created_at >= %s", query.created_after),
            ("mn.created_at <= %s", query.created_before),
            ("mn.updated_at >= %s", query.updated_after),
            ("mn.updated_at <= %s", query.updated_before),
        )
        for clause, value in simple:
            if value is not None:
                clauses.append(clause)
                params.append(value)
        if query.title:
            clauses.append("mn.title LIKE %s")
            params.append(f"%{query.title}%")
        if query.content:
            clauses.append("mn.content LIKE %s")
            params.append(f"%{query.content}%")

        where_sql = where(clauses)
        order_col = _ORDER_COLUMNS.get(query.order_by, "mn.updated_at")
        direction = "ASC" if query.order == "asc" else "DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM manuals mn {where_sql}", tuple(params))
            total = fetch_count(cur)

            sql = (
                f"SELECT {_COLUMNS} FROM manuals mn JOIN users u ON u.user_id = mn.user_id "
                f"{where_sql} ORDER BY {order_col} {direction}, mn.manual_id DESC"
            )
            page_params = list(params)
            if limit is not None:
                sql += " LIMIT %s OFFSET %s"
                page_params += [int(limit), int(offset)]
            cur.execute(sql, tuple(page_params))
            return [_to_manual(r) for r in fetchall(cur)], total
