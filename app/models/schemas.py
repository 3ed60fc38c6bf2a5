"""
Pydantic schemas for API request/response validation.
"""
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.agent import AgentStatus


# ============================================
# Agent Schemas
# ============================================

class AgentCreate(BaseModel):
    """Schema for creating an agent. Nothing is deployed yet."""
    agent_name: str = Field(..., min_length=1, max_length=255)
    system_prompt: Optional[str] = Field(None, description="Conversation prompt")
    voice_id: Optional[str] = Field(None, max_length=100, description="Voice platform voice ID")
    first_message: Optional[str] = Field(None, description="Greeting spoken when a call starts")
    react_flow_data: Optional[Dict[str, Any]] = Field(None, description="Canvas node data")


class AgentUpdate(BaseModel):
    """Schema for editing agent config (database only)."""
    agent_name: Optional[str] = Field(None, min_length=1, max_length=255)
    system_prompt: Optional[str] = None
    voice_id: Optional[str] = Field(None, max_length=100)
    first_message: Optional[str] = None
    react_flow_data: Optional[Dict[str, Any]] = None

    @field_validator("agent_name", "system_prompt", "voice_id", "first_message")
    @classmethod
    def not_null(cls, value):
        # Fields may be omitted, but these columns cannot hold null
        if value is None:
            raise ValueError("must not be null")
        return value


class AgentResponse(BaseModel):
    """Schema for agent response."""
    id: UUID
    project_id: UUID
    agent_name: str
    system_prompt: str
    voice_id: str
    first_message: str
    react_flow_data: Optional[Dict[str, Any]] = None
    status: AgentStatus
    elevenlabs_agent_id: Optional[str] = None
    digitalocean_app_id: Optional[str] = None
    deployment_url: Optional[str] = None
    deployed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeploymentStatusResponse(BaseModel):
    """Deployment progress for an agent."""
    agent_id: UUID
    status: AgentStatus
    elevenlabs_agent_id: Optional[str] = None
    digitalocean_app_id: Optional[str] = None
    deployment_url: Optional[str] = None
    deployed_at: Optional[datetime] = None
    bridge_task_running: bool = False


# ============================================
# Tool Schemas
# ============================================

class Position(BaseModel):
    """Canvas coordinates of a tool node."""
    x: float
    y: float


class ToolResponse(BaseModel):
    """Schema for a catalog tool."""
    id: UUID
    name: str
    description: Optional[str] = None
    deployment_url: str
    schema_template: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AgentToolConnect(BaseModel):
    """Schema for connecting a catalog tool to an agent."""
    tool_id: UUID
    position: Position


class AgentToolConfigUpdate(BaseModel):
    """Schema for configuring a connected tool."""
    config: Dict[str, Any]
    position: Optional[Position] = None


class AgentToolToggle(BaseModel):
    """Schema for enabling or disabling a connected tool."""
    is_enabled: bool


class AgentToolTest(BaseModel):
    """Sample payload sent to the tool's webhook together with its config."""
    test_data: Dict[str, Any]


class AgentToolResponse(BaseModel):
    """Schema for an agent-tool connection."""
    id: UUID
    agent_id: UUID
    tool_id: UUID
    config: Dict[str, Any]
    position: Dict[str, Any]
    is_enabled: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AgentToolDetail(BaseModel):
    """Agent-tool connection joined with its catalog entry."""
    id: UUID
    tool_id: UUID
    tool_name: str
    tool_description: Optional[str] = None
    deployment_url: str
    schema_template: Optional[Dict[str, Any]] = None
    config: Dict[str, Any]
    position: Dict[str, Any]
    is_enabled: bool
    created_at: Optional[datetime] = None


class ToolTestResult(BaseModel):
    """Outcome of a tool test call."""
    success: bool
    message: Optional[str] = None
    response: Optional[Any] = None
    error: Optional[str] = None
