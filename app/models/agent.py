"""
Agent model for storing agent configuration and deployment state.
"""
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, JSON, String, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class AgentStatus(str, enum.Enum):
    """Deployment state machine.

    DRAFT -> DEPLOYING -> ACTIVE -> DEPLOYING_BRIDGE -> PUBLISHED.
    Any in-flight state falls to ERROR on failure; ERROR may retry the
    phase whose external identifier is still unset.
    """

    DRAFT = "DRAFT"
    DEPLOYING = "DEPLOYING"
    ACTIVE = "ACTIVE"
    DEPLOYING_BRIDGE = "DEPLOYING_BRIDGE"
    PUBLISHED = "PUBLISHED"
    ERROR = "ERROR"


DEFAULT_REACT_FLOW_DATA = {"position": {"x": 250, "y": 200}}


class Agent(Base):
    """Agent model representing a project's conversational agent."""

    __tablename__ = "agents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    agent_name = Column(String(255), nullable=False)
    system_prompt = Column(Text, nullable=False, default="")
    voice_id = Column(String(100), nullable=False, default="")
    first_message = Column(Text, nullable=False, default="")
    react_flow_data = Column(JSON, nullable=True, default=lambda: dict(DEFAULT_REACT_FLOW_DATA))
    status = Column(
        Enum(AgentStatus, name="agent_status", native_enum=False, length=32),
        nullable=False,
        default=AgentStatus.DRAFT,
    )

    # Phase 1 is done iff elevenlabs_agent_id is set
    elevenlabs_agent_id = Column(String(255), nullable=True)
    # Phase 2 is done iff digitalocean_app_id is set
    digitalocean_app_id = Column(String(255), nullable=True)
    deployment_url = Column(String(500), nullable=True)
    deployed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    project = relationship("Project", back_populates="agents")
    tools = relationship("AgentTool", back_populates="agent", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Agent(id={self.id}, agent_name={self.agent_name}, status={self.status})>"
