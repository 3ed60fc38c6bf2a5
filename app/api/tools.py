"""
Tool API endpoints: catalog listing and agent-tool connections.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_user_id
from app.core.database import get_db
from app.core.exceptions import NotFoundError
from app.models.agent import Agent
from app.models.schemas import (
    AgentToolConfigUpdate,
    AgentToolConnect,
    AgentToolDetail,
    AgentToolResponse,
    AgentToolTest,
    AgentToolToggle,
    ToolResponse,
    ToolTestResult,
)
from app.services import agent_service, tool_service
from app.services.tool_executor import ToolExecutor, get_tool_executor

router = APIRouter(prefix="/api", tags=["tools"])


def _owned_agent(db: Session, user_id: str, project_id: UUID, agent_id: UUID) -> Agent:
    agent = agent_service.get_owned_agent(db, user_id, agent_id)
    if agent.project_id != project_id:
        raise NotFoundError("Agent")
    return agent


@router.get("/tools", response_model=List[ToolResponse])
async def list_tools(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Catalog of tools that can be attached to an agent."""
    return tool_service.list_catalog(db)


@router.get("/projects/{project_id}/agents/{agent_id}/tools", response_model=List[AgentToolDetail])
async def list_agent_tools(
    project_id: UUID,
    agent_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    agent = _owned_agent(db, user_id, project_id, agent_id)
    return tool_service.list_agent_tools(db, agent)


@router.post(
    "/projects/{project_id}/agents/{agent_id}/tools",
    response_model=AgentToolResponse,
    status_code=201,
)
async def connect_tool(
    project_id: UUID,
    agent_id: UUID,
    payload: AgentToolConnect,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Attach a catalog tool to the agent, disabled until configured."""
    agent = _owned_agent(db, user_id, project_id, agent_id)
    return tool_service.connect_tool(db, agent, payload)


@router.put(
    "/projects/{project_id}/agents/{agent_id}/tools/{connection_id}",
    response_model=AgentToolResponse,
)
async def update_tool_config(
    project_id: UUID,
    agent_id: UUID,
    connection_id: UUID,
    payload: AgentToolConfigUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Save a tool config; a valid config enables the tool."""
    agent = _owned_agent(db, user_id, project_id, agent_id)
    return tool_service.update_tool_config(db, agent, connection_id, payload)


@router.delete("/projects/{project_id}/agents/{agent_id}/tools/{connection_id}")
async def delete_tool_connection(
    project_id: UUID,
    agent_id: UUID,
    connection_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    agent = _owned_agent(db, user_id, project_id, agent_id)
    tool_service.delete_tool_connection(db, agent, connection_id)
    return {"success": True}


@router.patch(
    "/projects/{project_id}/agents/{agent_id}/tools/{connection_id}/toggle",
    response_model=AgentToolResponse,
)
async def toggle_tool(
    project_id: UUID,
    agent_id: UUID,
    connection_id: UUID,
    payload: AgentToolToggle,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    agent = _owned_agent(db, user_id, project_id, agent_id)
    return tool_service.toggle_tool(db, agent, connection_id, payload.is_enabled)


@router.post(
    "/projects/{project_id}/agents/{agent_id}/tools/{connection_id}/test",
    response_model=ToolTestResult,
)
async def test_tool(
    project_id: UUID,
    agent_id: UUID,
    connection_id: UUID,
    payload: AgentToolTest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    executor: ToolExecutor = Depends(get_tool_executor),
):
    """Call the tool webhook with its saved config and sample data."""
    agent = _owned_agent(db, user_id, project_id, agent_id)
    return await tool_service.run_tool_test(db, agent, connection_id, payload.test_data, executor)
