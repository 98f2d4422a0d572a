import pytest
from fastapi.testclient import TestClient

from hrm_mcp.main import create_app
from hrm_mcp.routers import mcp as mcp_router


@pytest.fixture
def client(dispatcher):
    mcp_router.dispatcher = dispatcher
    with TestClient(create_app(use_lifespan=False)) as test_client:
        yield test_client
    mcp_router.dispatcher = None


@pytest.fixture
def offline_client():
    mcp_router.dispatcher = None
    with TestClient(create_app(use_lifespan=False)) as test_client:
        yield test_client


def test_root(client):
    body = client.get("/").json()
    assert body["modules"] == {"mcp": "/api/mcp", "health": "/api/health"}


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["components"]["database"] == "operational"
    assert body["tools"] == 18


def test_health_without_dispatcher(offline_client):
    response = offline_client.get("/api/health")
    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_status_and_capabilities(client):
    status = client.get("/api/mcp/status").json()
    assert status["data"]["serverStatus"] == "online"
    assert status["data"]["availableTools"] == 18

    capabilities = client.get("/api/mcp/capabilities").json()["data"]
    assert capabilities["limits"] == {
        "maxResultRows": 1000,
        "previewRows": 10,
        "queryTimeoutSeconds": 30,
    }
    assert capabilities["providers"] == ["claude", "gemini"]
    assert capabilities["capabilities"]["prompts"]["count"] == 3


def test_list_tools(client):
    full = client.get("/api/mcp/tools").json()["data"]
    assert full["count"] == 18
    assert "description" in str(full["tools"][0]["inputSchema"])

    compact = client.get("/api/mcp/tools", params={"compact": "true"}).json()["data"]
    assert compact["count"] == 18
    assert all("description" not in str(tool["inputSchema"]) for tool in compact["tools"])


def test_select_tools(client):
    body = client.post(
        "/api/mcp/tools/select", json={"query": "show me employee salaries with their skills"}
    ).json()["data"]
    names = [tool["name"] for tool in body["tools"]]
    assert "execute_sql_query" in names
    assert "get_job_openings" not in names
    assert body["stats"]["selectedCount"] == len(names)


def test_select_tools_requires_query(client):
    assert client.post("/api/mcp/tools/select", json={"query": ""}).status_code == 422


def test_call_tool_success(client):
    response = client.post(
        "/api/mcp/tools/call",
        json={"name": "execute_sql_query", "arguments": {"query": "SELECT department_name FROM departments"}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["isError"] is False
    assert "| department_name |" in body["data"]["content"][0]["text"]


def test_call_tool_failures_are_http_200(client):
    unknown = client.post("/api/mcp/tools/call", json={"name": "delete_everything"})
    assert unknown.status_code == 200
    assert unknown.json()["status"] == "error"
    assert unknown.json()["data"]["content"][0]["text"] == "Unknown tool: delete_everything"

    rejected = client.post(
        "/api/mcp/tools/call",
        json={"name": "execute_sql_query", "arguments": {"query": "DROP TABLE employees"}},
    )
    assert rejected.json()["data"]["isError"] is True
    assert "Only SELECT queries are allowed" in rejected.json()["data"]["content"][0]["text"]


def test_call_tool_content_items_are_text_only(client):
    response = client.post("/api/mcp/tools/call", json={"name": "get_departments"})
    for body in (response.json(), client.post("/api/mcp/tools/call", json={"name": "nope"}).json()):
        assert [set(item) for item in body["data"]["content"]] == [{"type", "text"}]


def test_call_tool_uses_forwarded_identity(client):
    response = client.post(
        "/api/mcp/tools/call",
        headers={"X-User-Id": "hr-admin-7", "X-User-Roles": "hr, admin"},
        json={
            "name": "create_leave_request",
            "arguments": {
                "employeeId": "e-carol",
                "leaveTypeId": "lt-annual",
                "startDate": "2031-03-02",
                "endDate": "2031-03-03",
                "reason": "Wedding",
            },
        },
    )
    assert response.json()["status"] == "success"
    assert '"applied_by": "hr-admin-7"' in response.json()["data"]["content"][0]["text"]


def test_call_tool_without_dispatcher(offline_client):
    response = offline_client.post("/api/mcp/tools/call", json={"name": "get_departments"})
    assert response.status_code == 503


def test_schema_endpoint(client):
    compact = client.get("/api/mcp/schema").json()["data"]
    assert compact["summary"]["totalTables"] == 16

    detailed = client.get("/api/mcp/schema", params={"detailed": "true"}).json()["data"]
    assert len(detailed["tables"]) == 16


def test_prompts(client):
    prompts = client.get("/api/mcp/prompts").json()["data"]["prompts"]
    assert [prompt["name"] for prompt in prompts] == [
        "employee_onboarding_check",
        "attendance_analysis",
        "recruitment_pipeline_review",
    ]

    rendered = client.post(
        "/api/mcp/prompts/get", json={"name": "employee_onboarding_check", "arguments": {"days": 14}}
    ).json()["data"]
    assert "last 14 days" in rendered["messages"][0]["content"]["text"]

    missing = client.post("/api/mcp/prompts/get", json={"name": "tarot_reading"})
    assert missing.status_code == 404
