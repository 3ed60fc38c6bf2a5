"""
Background bridge deployments.

The request handler claims DEPLOYING_BRIDGE and returns right away; the
provisioning and poll loop continue in an asyncio task that owns its own
database session. Clients follow progress through the agent status.
"""
import asyncio
import logging
from typing import Callable, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.models.agent import Agent, AgentStatus
from app.services import agent_state
from app.services.deployment_orchestrator import DeploymentOrchestrator

logger = logging.getLogger(__name__)


class BridgeDeploymentTasks:
    """Tracks running bridge deployments per agent."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory
        self._tasks: Dict[UUID, asyncio.Task] = {}

    def is_running(self, agent_id: UUID) -> bool:
        task = self._tasks.get(agent_id)
        return task is not None and not task.done()

    def get(self, agent_id: UUID) -> Optional[asyncio.Task]:
        return self._tasks.get(agent_id)

    def start(self, orchestrator: DeploymentOrchestrator, agent_id: UUID) -> asyncio.Task:
        """
        Schedule provisioning for an agent already in DEPLOYING_BRIDGE.

        Must be called from a running event loop.
        """
        task = asyncio.create_task(self._run(orchestrator, agent_id))
        self._tasks[agent_id] = task
        task.add_done_callback(lambda t: self._forget(agent_id, t))
        logger.info(f"[Bridge] Background deployment started for agent {agent_id}")
        return task

    async def cancel(self, agent_id: UUID) -> bool:
        """
        Cancel a running deployment and wait for it to wind down.

        Returns:
            True if a running task was cancelled
        """
        task = self._tasks.get(agent_id)
        if task is None or task.done():
            return False

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        # A task cancelled before its first step never reaches provision_bridge's
        # error handling; the transition only applies while still DEPLOYING_BRIDGE
        db = self._session_factory()
        try:
            agent_state.mark_error(db, agent_id, AgentStatus.DEPLOYING_BRIDGE)
        finally:
            db.close()

        logger.info(f"[Bridge] Background deployment cancelled for agent {agent_id}")
        return True

    async def _run(self, orchestrator: DeploymentOrchestrator, agent_id: UUID) -> Optional[Agent]:
        db = self._session_factory()
        try:
            agent = db.get(Agent, agent_id)
            if agent is None:
                logger.error(f"[Bridge] Agent {agent_id} disappeared before provisioning")
                return None
            return await orchestrator.provision_bridge(db, agent)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # provision_bridge has already moved the agent to ERROR
            logger.error(f"[Bridge] Background deployment for agent {agent_id} ended with error: {e}")
            return None
        finally:
            db.close()

    def _forget(self, agent_id: UUID, task: asyncio.Task):
        if self._tasks.get(agent_id) is task:
            del self._tasks[agent_id]


# Global instance
bridge_tasks = BridgeDeploymentTasks()


def get_bridge_tasks() -> BridgeDeploymentTasks:
    """Dependency returning the shared task registry."""
    return bridge_tasks
