"""
Database models package.
"""
from app.models.project import Project
from app.models.agent import Agent, AgentStatus
from app.models.tool import Tool
from app.models.agent_tool import AgentTool

__all__ = ["Project", "Agent", "AgentStatus", "Tool", "AgentTool"]
