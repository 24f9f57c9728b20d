from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..common.codes import random_code
from ..core.constants import ORGANIZATION_CODE_LENGTH
from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    sql = _strip_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s", schema_path)


def ensure_demo_data(db_config: dict) -> None:
    """Upsert demo accounts and a demo organization they both belong to."""

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_user(name: str, email: str, password: str, role: str, department: str) -> int:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    "UPDATE users SET name=%s, password_hash=%s, role=%s, department=%s, is_active=1 WHERE email=%s",
                    (name, password_hash, role, department, email),
                )
                return int(existing["user_id"])
            cur.execute(
                "INSERT INTO users (name, email, password_hash, role, department) VALUES (%s, %s, %s, %s, %s)",
                (name, email, password_hash, role, department),
            )
            return int(cur.lastrowid)

        admin_id = upsert_user("Admin Demo", "admin@example.com", "admin123", "admin", "hr")
        member_id = upsert_user("Member Demo", "member@example.com", "member123", "member", "dev")

        cur.execute("SELECT organization_id FROM organizations WHERE name=%s", ("Demo Org",))
        row = cur.fetchone()
        if row:
            org_id = int(row["organization_id"])
        else:
            cur.execute(
                "INSERT INTO organizations (name, description, invite_code) VALUES (%s, %s, %s)",
                ("Demo Org", "Seeded organization", random_code(ORGANIZATION_CODE_LENGTH)),
            )
            org_id = int(cur.lastrowid)

        for user_id, role in ((admin_id, "admin"), (member_id, "member")):
            cur.execute(
                "INSERT IGNORE INTO organization_memberships (organization_id, user_id, role) VALUES (%s, %s, %s)",
                (org_id, user_id, role),
            )

        conn.commit()
    finally:
        conn.close()
    logger.info("Demo data ready")


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
