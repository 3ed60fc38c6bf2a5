"""
Database initialization.
Creates the tables for every model registered on the metadata.
"""
import logging
from typing import List, Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from app.core.database import Base, engine as default_engine
from app.models import Agent, AgentTool, Project, Tool  # noqa: F401  register models

logger = logging.getLogger(__name__)


def init_db(bind: Optional[Engine] = None) -> List[str]:
    """
    Create missing tables and return the table names present afterwards.

    Existing tables are left untouched; there is no migration step.
    """
    bind = bind or default_engine
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=bind)

    tables = sorted(inspect(bind).get_table_names())
    logger.info(f"Database ready with tables: {', '.join(tables)}")
    return tables


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
