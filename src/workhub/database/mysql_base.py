from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def fetch_count(cur) -> int:
    row = cur.fetchone()
    if not row:
        return 0
    return int(row["total"] if isinstance(row, dict) else row[0])


def in_clause(values: Sequence[Any]) -> Tuple[str, Tuple[Any, ...]]:
    """Placeholder list for `col IN (...)`; an empty list matches nothing."""
    if not values:
        return "(NULL)", ()
    return "(" + ",".join(["%s"] * len(values)) + ")", tuple(values)


def set_clause(fields: Dict[str, Any]) -> Tuple[str, Tuple[Any, ...]]:
    """`col=%s, ...` for an UPDATE; column names come from code, never from input."""
    return ", ".join(f"{k}=%s" for k in fields), tuple(fields.values())


def as_bool(value: Any) -> bool:
    return bool(int(value)) if value is not None else False


def opt_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def where(clauses: Iterable[str]) -> str:
    parts = [c for c in clauses if c]
    return ("WHERE " + " AND ".join(parts)) if parts else ""
