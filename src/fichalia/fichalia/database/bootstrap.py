from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path
from typing import Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.enums import Role
from .connection import DBConfig

logger = logging.getLogger(__name__)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def split_sql_statements(sql: str) -> Iterator[str]:
    """Split a schema file on ``;`` outside quotes, dropping ``--`` comment lines."""
    lines = [line for line in sql.splitlines() if not line.lstrip().startswith("--")]
    sql = "\n".join(lines)
    # Schema files must work regardless of the configured database name.
    sql = re.sub(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$", "", sql)

    buf: list[str] = []
    quote = None
    for ch in sql:
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
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
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    target = DBConfig.from_dict(db_config)
    sql = Path(schema_path).read_text(encoding="utf-8")

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in split_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s", schema_path)


def ensure_admin(db_config: dict, *, email: str, password: str, full_name: str = "Administrador") -> None:
    """Create (or reactivate) the bootstrap admin profile."""
    target = DBConfig.from_dict(db_config)
    email = email.strip().lower()

    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT id FROM profiles WHERE email=%s", (email,))
        existing = cur.fetchone()
        if existing:
            cur.execute(
                "UPDATE profiles SET password_hash=%s, role=%s, active=1 WHERE email=%s",
                (generate_password_hash(password), Role.ADMIN.value, email),
            )
        else:
            cur.execute(
                """
                INSERT INTO profiles (id, email, full_name, role, active, password_hash)
                VALUES (%s, %s, %s, %s, 1, %s)
                """,
                (str(uuid.uuid4()), email, full_name, Role.ADMIN.value, generate_password_hash(password)),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("Admin profile %s ready", email)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
