"""
Tool service for connecting catalog tools to agents and configuring them.
"""
import logging
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.agent import Agent
from app.models.agent_tool import AgentTool
from app.models.schemas import AgentToolConfigUpdate, AgentToolConnect, AgentToolDetail
from app.models.tool import Tool
from app.services.tool_executor import ToolExecutor
from app.utils.tool_validation import validate_tool_config

logger = logging.getLogger(__name__)


def list_catalog(db: Session) -> List[Tool]:
    """All catalog tools, oldest first."""
    return db.query(Tool).order_by(Tool.created_at.asc()).all()


def list_agent_tools(db: Session, agent: Agent) -> List[AgentToolDetail]:
    """Connections of an agent joined with their catalog entries."""
    rows = (
        db.query(AgentTool, Tool)
        .join(Tool, AgentTool.tool_id == Tool.id)
        .filter(AgentTool.agent_id == agent.id)
        .order_by(AgentTool.created_at.asc())
        .all()
    )

    return [
        AgentToolDetail(
            id=connection.id,
            tool_id=connection.tool_id,
            tool_name=tool.name,
            tool_description=tool.description,
            deployment_url=tool.deployment_url,
            schema_template=tool.schema_template,
            config=connection.config or {},
            position=connection.position,
            is_enabled=connection.is_enabled,
            created_at=connection.created_at,
        )
        for connection, tool in rows
    ]


def get_connection(db: Session, agent: Agent, connection_id: UUID) -> AgentTool:
    connection = db.query(AgentTool).filter(
        AgentTool.id == connection_id,
        AgentTool.agent_id == agent.id,
    ).first()
    if not connection:
        raise NotFoundError("Tool connection")
    return connection


def connect_tool(db: Session, agent: Agent, data: AgentToolConnect) -> AgentTool:
    """
    Attach a catalog tool to an agent.

    The connection starts disabled with an empty config; it is enabled
    once a config passing the tool's schema is saved.
    """
    tool = db.get(Tool, data.tool_id)
    if not tool:
        raise NotFoundError("Tool")

    existing = db.query(AgentTool).filter(
        AgentTool.agent_id == agent.id,
        AgentTool.tool_id == data.tool_id,
    ).first()
    if existing:
        raise ConflictError("Tool already connected to this agent")

    connection = AgentTool(
        agent_id=agent.id,
        tool_id=tool.id,
        config={},
        position=data.position.model_dump(),
        is_enabled=False,
    )
    db.add(connection)
    db.commit()
    db.refresh(connection)

    logger.info(f"[Tools] Connected tool {tool.name} to agent {agent.id}")
    return connection


def update_tool_config(db: Session, agent: Agent, connection_id: UUID, data: AgentToolConfigUpdate) -> AgentTool:
    """Validate and store a tool config, enabling the connection."""
    connection = get_connection(db, agent, connection_id)

    validate_tool_config(connection.tool.schema_template, data.config)

    connection.config = data.config
    connection.is_enabled = True
    if data.position is not None:
        connection.position = data.position.model_dump()

    db.commit()
    db.refresh(connection)

    logger.info(f"[Tools] Configured tool connection {connection.id} on agent {agent.id}")
    return connection


def toggle_tool(db: Session, agent: Agent, connection_id: UUID, is_enabled: bool) -> AgentTool:
    connection = get_connection(db, agent, connection_id)
    connection.is_enabled = is_enabled
    db.commit()
    db.refresh(connection)
    return connection


def delete_tool_connection(db: Session, agent: Agent, connection_id: UUID):
    connection = get_connection(db, agent, connection_id)
    db.delete(connection)
    db.commit()
    logger.info(f"[Tools] Removed tool connection {connection_id} from agent {agent.id}")


async def run_tool_test(
    db: Session,
    agent: Agent,
    connection_id: UUID,
    test_data: Dict[str, Any],
    executor: ToolExecutor,
) -> Dict[str, Any]:
    """Send the saved config plus sample data to the tool's webhook."""
    connection = get_connection(db, agent, connection_id)

    if not connection.config:
        raise ValidationError("Tool is not configured yet")

    return await executor.execute_tool(connection.tool.deployment_url, connection.config, test_data)
