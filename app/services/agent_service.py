"""
Agent service for project-scoped agent reads and config edits.
"""
import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from app.models.agent import Agent, AgentStatus, DEFAULT_REACT_FLOW_DATA
from app.models.project import Project
from app.models.schemas import AgentCreate, AgentUpdate

logger = logging.getLogger(__name__)


def verify_project_ownership(db: Session, user_id: str, project_id: UUID) -> Project:
    """
    Return the project if it belongs to the user.

    A project owned by someone else is reported as missing, so callers
    cannot probe for other users' project ids.

    Raises:
        NotFoundError: If no project matches ``(project_id, user_id)``
    """
    project = db.query(Project).filter(
        Project.id == project_id,
        Project.user_id == user_id,
    ).first()

    if not project:
        raise NotFoundError("Project")
    return project


def get_project_agent_by_id(db: Session, project_id: UUID, agent_id: UUID) -> Agent:
    """Fetch an agent by its ``(id, project_id)`` pair."""
    agent = db.query(Agent).filter(
        Agent.id == agent_id,
        Agent.project_id == project_id,
    ).first()

    if not agent:
        raise NotFoundError("Agent")
    return agent


def get_owned_agent(db: Session, user_id: str, agent_id: UUID) -> Agent:
    """
    Fetch an agent through its parent project's owner.

    Raises:
        NotFoundError: If the agent does not exist
        UnauthorizedError: If the agent's project belongs to another user
    """
    row: Tuple[Agent, str] = (
        db.query(Agent, Project.user_id)
        .join(Project, Agent.project_id == Project.id)
        .filter(Agent.id == agent_id)
        .first()
    )

    if not row:
        raise NotFoundError("Agent")

    agent, owner_id = row
    if owner_id != user_id:
        raise UnauthorizedError()
    return agent


def list_agents(db: Session, project_id: UUID) -> List[Agent]:
    """All agents of a project, newest first."""
    return (
        db.query(Agent)
        .filter(Agent.project_id == project_id)
        .order_by(Agent.created_at.desc())
        .all()
    )


def get_project_agent(db: Session, project_id: UUID) -> Agent:
    """
    Return the single agent of a project.

    One agent per project is a convention only; when several exist the
    oldest one is returned.
    """
    agent = (
        db.query(Agent)
        .filter(Agent.project_id == project_id)
        .order_by(Agent.created_at.asc())
        .first()
    )
    if not agent:
        raise NotFoundError("Agent for this project")
    return agent


def create_agent(db: Session, project_id: UUID, data: AgentCreate) -> Agent:
    """Save a new DRAFT agent. Nothing is sent to the voice platform."""
    agent = Agent(
        project_id=project_id,
        agent_name=data.agent_name,
        system_prompt=data.system_prompt or "",
        voice_id=data.voice_id or "",
        first_message=data.first_message or "",
        react_flow_data=data.react_flow_data or dict(DEFAULT_REACT_FLOW_DATA),
        status=AgentStatus.DRAFT,
        elevenlabs_agent_id=None,
    )

    db.add(agent)
    db.commit()
    db.refresh(agent)

    logger.info(f"[Agents] Created agent {agent.id} in project {project_id}")
    return agent


def update_agent_config(db: Session, agent: Agent, data: AgentUpdate) -> Agent:
    """
    Apply a partial config edit in the database only.

    Status and external identifiers are never touched here; pushing the
    new config to a deployed agent is a separate sync call.
    """
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update. Please provide at least one field.")

    for field, value in changes.items():
        setattr(agent, field, value)

    db.commit()
    db.refresh(agent)

    logger.info(f"[Agents] Updated config of agent {agent.id}: {sorted(changes)}")
    return agent
