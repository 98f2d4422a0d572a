import pytest

from hrm_mcp.modules.mcp.errors import InvalidQuery
from hrm_mcp.modules.mcp.sanitizer import prepare, remove_sql_comments


def test_strips_comments_and_trailing_semicolon():
    sanitized = prepare("-- headcount\nSELECT * FROM employees /* all of them */;")
    assert sanitized.sql == "SELECT * FROM employees"


def test_keeps_lowercase_select():
    assert prepare("  select 1  ").sql == "select 1"


@pytest.mark.parametrize("raw", [None, "", "   ", 42, "-- only a comment", ";;"])
def test_rejects_empty_input(raw):
    with pytest.raises(InvalidQuery):
        prepare(raw)


def test_rejects_multiple_statements():
    with pytest.raises(InvalidQuery, match="Only single SELECT statements are allowed"):
        prepare("SELECT 1; DROP TABLE employees")


def test_rejects_non_select():
    with pytest.raises(InvalidQuery, match="Only SELECT queries are allowed"):
        prepare("UPDATE employees SET status = 'inactive'")


def test_rejects_with_clause():
    with pytest.raises(InvalidQuery, match="Only SELECT queries are allowed"):
        prepare("WITH t AS (SELECT 1) SELECT * FROM t")


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT * FROM information_schema.tables",
        "SELECT relname FROM PG_CATALOG.pg_class",
    ],
)
def test_rejects_catalog_access(sql):
    with pytest.raises(InvalidQuery, match="system catalog"):
        prepare(sql)


@pytest.mark.parametrize(
    "sql, keyword",
    [
        ("SELECT * FROM employees WHERE 1=1 OR delete", "delete"),
        ("SELECT grant FROM privileges", "grant"),
        ("SELECT * FROM t WHERE commit = 1", "commit"),
    ],
)
def test_rejects_blocked_keywords(sql, keyword):
    with pytest.raises(InvalidQuery, match=f"blocked keyword: {keyword}"):
        prepare(sql)


def test_blocked_keywords_match_whole_words_only():
    sql = "SELECT created_at, updated_at, deleted_flag FROM employees"
    assert prepare(sql).sql == sql


def test_semicolon_inside_literal_is_rejected():
    with pytest.raises(InvalidQuery):
        prepare("SELECT * FROM employees WHERE first_name = 'a;b'")


def test_remove_sql_comments_handles_multiline_blocks():
    assert remove_sql_comments("SELECT /* a\nb */ 1 -- tail") == "SELECT  1"
