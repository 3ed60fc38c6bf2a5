"""HTTP tests for the tool catalog and agent-tool connection routes."""

import uuid

import pytest

from app.models.agent_tool import AgentTool


@pytest.fixture
def agent(make_agent):
    return make_agent()


@pytest.fixture
def tool(make_tool):
    return make_tool()


@pytest.fixture
def tools_url(project, agent) -> str:
    return f"/api/projects/{project.id}/agents/{agent.id}/tools"


@pytest.fixture
def connection_id(api_client, tools_url, tool, auth_headers) -> str:
    response = api_client.post(
        tools_url,
        json={"tool_id": str(tool.id), "position": {"x": 10, "y": 20}},
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()["id"]


class TestCatalog:
    def test_list_catalog(self, api_client, tool, auth_headers) -> None:
        response = api_client.get("/api/tools", headers=auth_headers)

        assert response.status_code == 200
        assert [t["name"] for t in response.json()] == ["send-email"]


class TestConnectTool:
    """POST /api/projects/{project_id}/agents/{agent_id}/tools"""

    def test_connect_starts_disabled(self, api_client, tools_url, connection_id, auth_headers) -> None:
        response = api_client.get(tools_url, headers=auth_headers)

        assert response.status_code == 200
        [detail] = response.json()
        assert detail["id"] == connection_id
        assert detail["tool_name"] == "send-email"
        assert detail["config"] == {}
        assert detail["is_enabled"] is False
        assert detail["position"] == {"x": 10, "y": 20}

    def test_connect_unknown_tool(self, api_client, tools_url, auth_headers) -> None:
        response = api_client.post(
            tools_url,
            json={"tool_id": str(uuid.uuid4()), "position": {"x": 0, "y": 0}},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Tool not found"

    def test_connect_twice_conflicts(self, api_client, tools_url, tool, connection_id, auth_headers) -> None:
        response = api_client.post(
            tools_url,
            json={"tool_id": str(tool.id), "position": {"x": 0, "y": 0}},
            headers=auth_headers,
        )

        assert response.status_code == 409

    def test_other_user_forbidden(self, api_client, tools_url, tool, other_auth_headers) -> None:
        response = api_client.post(
            tools_url,
            json={"tool_id": str(tool.id), "position": {"x": 0, "y": 0}},
            headers=other_auth_headers,
        )

        assert response.status_code == 403

    def test_agent_in_another_project(self, api_client, agent, tool, auth_headers) -> None:
        response = api_client.get(f"/api/projects/{uuid.uuid4()}/agents/{agent.id}/tools", headers=auth_headers)
        assert response.status_code == 404


class TestConfigureTool:
    """PUT /api/projects/{project_id}/agents/{agent_id}/tools/{connection_id}"""

    def test_valid_config_enables_tool(self, db, api_client, tools_url, connection_id, auth_headers) -> None:
        response = api_client.put(
            f"{tools_url}/{connection_id}",
            json={"config": {"sender_email": "bot@example.com"}, "position": {"x": 1, "y": 2}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["is_enabled"] is True
        assert body["config"] == {"sender_email": "bot@example.com"}
        assert body["position"] == {"x": 1, "y": 2}

    def test_missing_required_field(self, api_client, tools_url, connection_id, auth_headers) -> None:
        response = api_client.put(
            f"{tools_url}/{connection_id}",
            json={"config": {"sender_email": "  "}},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Missing required fields: sender_email"

    def test_invalid_email(self, db, api_client, tools_url, connection_id, auth_headers) -> None:
        response = api_client.put(
            f"{tools_url}/{connection_id}",
            json={"config": {"sender_email": "not-an-email"}},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid email format in field: sender_email"
        db.expire_all()
        assert db.get(AgentTool, uuid.UUID(connection_id)).is_enabled is False

    def test_unknown_connection(self, api_client, tools_url, auth_headers) -> None:
        response = api_client.put(
            f"{tools_url}/{uuid.uuid4()}",
            json={"config": {"sender_email": "bot@example.com"}},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Tool connection not found"


class TestToggleAndDelete:
    def test_toggle(self, api_client, tools_url, connection_id, auth_headers) -> None:
        response = api_client.patch(
            f"{tools_url}/{connection_id}/toggle",
            json={"is_enabled": True},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["is_enabled"] is True

    def test_delete(self, db, api_client, tools_url, connection_id, auth_headers) -> None:
        response = api_client.delete(f"{tools_url}/{connection_id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        db.expire_all()
        assert db.get(AgentTool, uuid.UUID(connection_id)) is None


class TestToolTest:
    """POST .../tools/{connection_id}/test"""

    def test_unconfigured_tool(self, api_client, tools_url, connection_id, auth_headers, tool_executor) -> None:
        response = api_client.post(
            f"{tools_url}/{connection_id}/test",
            json={"test_data": {"body": "Hi"}},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Tool is not configured yet"
        tool_executor.execute_tool.assert_not_called()

    def test_runs_with_saved_config(self, api_client, tools_url, connection_id, auth_headers, tool_executor) -> None:
        api_client.put(
            f"{tools_url}/{connection_id}",
            json={"config": {"sender_email": "bot@example.com"}},
            headers=auth_headers,
        )

        response = api_client.post(
            f"{tools_url}/{connection_id}/test",
            json={"test_data": {"body": "Hi"}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        tool_executor.execute_tool.assert_awaited_once_with(
            "https://tools.example.com/send-email",
            {"sender_email": "bot@example.com"},
            {"body": "Hi"},
        )
