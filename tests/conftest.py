"""Shared pytest fixtures for the test suite.

Provides an in-memory database, fake platform clients and an HTTP client
wired to both through dependency overrides.
"""

import os

os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("ELEVENLABS_API_KEY", "test-elevenlabs-key")
os.environ.setdefault("DIGITALOCEAN_API_TOKEN", "test-do-token")
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret")

from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import Base, get_db
from app.main import app
from app.models import Agent, AgentStatus, Project, Tool
from app.services.bridge_tasks import BridgeDeploymentTasks, get_bridge_tasks
from app.services.deployment_orchestrator import DeploymentOrchestrator, get_orchestrator
from app.services.digitalocean_client import DigitalOceanClient
from app.services.elevenlabs_client import ElevenLabsClient
from app.services.tool_executor import ToolExecutor, get_tool_executor

OWNER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def project(db: Session) -> Project:
    project = Project(user_id=OWNER_ID, name="Demo project")
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@pytest.fixture
def make_agent(db: Session, project: Project) -> Callable[..., Agent]:
    """Factory for agents with a complete, undeployed config by default."""

    def _make(**overrides: Any) -> Agent:
        values = {
            "project_id": project.id,
            "agent_name": "Support Agent",
            "system_prompt": "You are a helpful support agent.",
            "voice_id": "voice-123",
            "first_message": "",
            "status": AgentStatus.DRAFT,
        }
        values.update(overrides)
        agent = Agent(**values)
        db.add(agent)
        db.commit()
        db.refresh(agent)
        return agent

    return _make


@pytest.fixture
def make_tool(db: Session) -> Callable[..., Tool]:
    """Factory for catalog tools with one required constant field."""

    def _make(**overrides: Any) -> Tool:
        values = {
            "name": "send-email",
            "description": "Sends an email",
            "deployment_url": "https://tools.example.com/send-email",
            "schema_template": {
                "api_schema": {
                    "request_body_schema": {
                        "properties": [
                            {"id": "sender_email", "value_type": "constant_value", "required": True},
                            {"id": "body", "value_type": "llm_prompt", "required": True},
                        ]
                    }
                }
            },
        }
        values.update(overrides)
        tool = Tool(**values)
        db.add(tool)
        db.commit()
        db.refresh(tool)
        return tool

    return _make


@pytest.fixture
def voice_client() -> AsyncMock:
    client = AsyncMock(spec=ElevenLabsClient)
    client.create_agent.return_value = "eid-1"
    client.update_agent.return_value = {}
    return client


@pytest.fixture
def cloud_client() -> AsyncMock:
    client = AsyncMock(spec=DigitalOceanClient)
    client.create_app.return_value = {"id": "app-1"}
    client.get_app.return_value = {
        "id": "app-1",
        "active_deployment": {"phase": "ACTIVE"},
        "live_url": "https://bridge.ondigitalocean.app",
    }
    return client


@pytest.fixture
def orchestrator(voice_client: AsyncMock, cloud_client: AsyncMock) -> DeploymentOrchestrator:
    return DeploymentOrchestrator(
        voice_client=voice_client,
        cloud_client=cloud_client,
        poll_interval=0,
        max_attempts=60,
    )


@pytest.fixture
def bridge_tasks(session_factory) -> BridgeDeploymentTasks:
    return BridgeDeploymentTasks(session_factory=session_factory)


@pytest.fixture
def tool_executor() -> AsyncMock:
    executor = AsyncMock(spec=ToolExecutor)
    executor.execute_tool.return_value = {
        "success": True,
        "message": "Test executed successfully",
        "response": {"ok": True},
    }
    return executor


def make_token(user_id: str = OWNER_ID) -> str:
    return jwt.encode({"sub": user_id}, settings.auth_secret_key, algorithm=settings.auth_algorithm)


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def other_auth_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(OTHER_USER_ID)}"}


@pytest.fixture
def api_client(
    session_factory,
    orchestrator: DeploymentOrchestrator,
    bridge_tasks: BridgeDeploymentTasks,
    tool_executor: AsyncMock,
) -> Generator[TestClient, None, None]:
    """HTTP client with the database and outbound services overridden."""

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_bridge_tasks] = lambda: bridge_tasks
    app.dependency_overrides[get_tool_executor] = lambda: tool_executor

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def mock_bridge_tasks() -> MagicMock:
    tasks = MagicMock(spec=BridgeDeploymentTasks)
    tasks.is_running.return_value = False
    return tasks
