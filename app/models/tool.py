"""
Tool model for the catalog of attachable webhook integrations.
"""
from sqlalchemy import Column, String, Text, JSON, DateTime, Uuid
from sqlalchemy.sql import func
import uuid

from app.core.database import Base


class Tool(Base):
    """Catalog entry for an external webhook tool."""

    __tablename__ = "tools"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    deployment_url = Column(String(500), nullable=False)
    schema_template = Column(JSON, nullable=True)  # api_schema with request body properties
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Tool(id={self.id}, name={self.name})>"
