import pytest

from hrm_mcp.modules.mcp.errors import TableNotFound
from hrm_mcp.modules.mcp.introspector import MAX_FOREIGN_KEY_PREVIEW, SchemaIntrospector

HRM_TABLES = {
    "attendances",
    "candidates",
    "competencies",
    "departments",
    "designations",
    "documents",
    "employee_competencies",
    "employees",
    "goals",
    "interviews",
    "job_openings",
    "leave_applications",
    "leave_types",
    "locations",
    "performance_reviews",
    "salary_structures",
}


@pytest.fixture
def introspector(engine):
    return SchemaIntrospector(engine, schema="public")


def test_schema_name_is_ignored_outside_postgres(introspector):
    assert introspector.schema is None
    assert set(introspector.table_names()) == HRM_TABLES


def test_compact_schema_previews_foreign_keys(introspector):
    schema = introspector.compact_schema()
    assert schema["summary"]["totalTables"] == len(HRM_TABLES)

    by_name = {entry["table"]: entry for entry in schema["tables"]}
    employees = by_name["employees"]
    assert employees["primaryKeys"] == ["employee_id"]
    assert employees["foreignKeyCount"] == 4
    assert len(employees["foreignKeysPreview"]) == MAX_FOREIGN_KEY_PREVIEW
    assert all(" -> " in preview for preview in employees["foreignKeysPreview"])

    assert by_name["departments"]["foreignKeyCount"] == 0
    assert "get_table_info" in schema["note"]


def test_full_schema_lists_columns_and_relationships(introspector):
    schema = introspector.full_schema()
    tables = {entry["name"]: entry for entry in schema["tables"]}
    assert set(tables) == HRM_TABLES

    department_columns = {column["name"] for column in tables["departments"]["columns"]}
    assert {"department_id", "department_name", "created_at"} <= department_columns

    # incoming references are listed on the referenced table too
    incoming = [
        rel for rel in tables["departments"]["relationships"] if rel["to_table"] == "departments"
    ]
    assert {rel["from_table"] for rel in incoming} == {"employees", "job_openings"}


def test_table_info(introspector):
    info = introspector.table_info("employees")
    assert info["tableName"] == "employees"
    assert info["totalRows"] == 4
    assert len(info["sampleData"]) == 3
    assert info["primaryKeys"] == ["employee_id"]
    referenced = {fk["referenced_table"] for fk in info["foreignKeys"]}
    assert referenced == {"departments", "designations", "locations", "employees"}
    assert any(column["column_name"] == "email" for column in info["columns"])


def test_table_info_unknown_table(introspector):
    with pytest.raises(TableNotFound, match="Table 'payroll_runs' does not exist"):
        introspector.table_info("payroll_runs")


def test_column_hints_skip_unknown_tables(introspector):
    hints = introspector.column_hints(['"departments"', "ghosts"], max_columns=2)
    assert list(hints) == ["departments"]
    assert len(hints["departments"]) == 2
