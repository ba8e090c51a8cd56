from __future__ import annotations

from pathlib import Path

from fichalia.database.bootstrap import split_sql_statements

SCHEMA = Path(__file__).resolve().parents[1] / "database" / "schema.sql"


def test_split_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- seed; not a statement
    CREATE DATABASE IF NOT EXISTS other;
    USE other;
    INSERT INTO t(a) VALUES ('x;y');
    INSERT INTO t(a) VALUES ("z")
    """

    assert list(split_sql_statements(sql)) == [
        "INSERT INTO t(a) VALUES ('x;y')",
        'INSERT INTO t(a) VALUES ("z")',
    ]


def test_schema_file_creates_both_tables():
    statements = list(split_sql_statements(SCHEMA.read_text(encoding="utf-8")))

    assert len(statements) == 2
    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS profiles")
    assert statements[1].startswith("CREATE TABLE IF NOT EXISTS time_entries")
