"""
Join table for agent-tool connections.
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, JSON, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from app.core.database import Base


class AgentTool(Base):
    """A catalog tool attached to an agent, with its per-agent config."""

    __tablename__ = "agent_tools"
    __table_args__ = (UniqueConstraint("agent_id", "tool_id", name="uq_agent_tools_agent_tool"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    agent_id = Column(
        Uuid,
        ForeignKey("agents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tool_id = Column(
        Uuid,
        ForeignKey("tools.id", ondelete="CASCADE"),
        nullable=False,
    )
    config = Column(JSON, nullable=False, default=dict)
    position = Column(JSON, nullable=False)  # canvas coordinates {x, y}
    is_enabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    agent = relationship("Agent", back_populates="tools")
    tool = relationship("Tool")

    def __repr__(self):
        return f"<AgentTool(agent_id={self.agent_id}, tool_id={self.tool_id})>"
