"""
Compare-and-set status transitions for the agent deployment state machine.

Every transition is a single conditional UPDATE: it only applies when the
persisted status (and the identifier columns guarding the phase) still
match what the caller expects. Zero affected rows means a concurrent
request got there first.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidStateError, NotFoundError
from app.models.agent import Agent, AgentStatus

logger = logging.getLogger(__name__)

# Phase 1 can start from a fresh agent or retry after a failure
PHASE1_SOURCES = (AgentStatus.DRAFT, AgentStatus.ERROR)
# Phase 2 can start once phase 1 succeeded or retry after a failure
PHASE2_SOURCES = (AgentStatus.ACTIVE, AgentStatus.ERROR)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _reload(db: Session, agent_id: UUID) -> Agent:
    agent = db.get(Agent, agent_id, populate_existing=True)
    if agent is None:
        raise NotFoundError("Agent")
    return agent


def transition(
    db: Session,
    agent_id: UUID,
    expected: Iterable[AgentStatus],
    target: AgentStatus,
    *guards: Any,
    **values: Any,
) -> Optional[Agent]:
    """
    Move an agent to ``target`` if its status is one of ``expected``.

    Args:
        db: Database session
        agent_id: Agent to transition
        expected: Statuses the row must currently hold
        target: New status
        *guards: Extra WHERE clauses (e.g. identifier IS NULL)
        **values: Extra columns to write in the same UPDATE

    Returns:
        The reloaded agent, or None if the row did not match
    """
    expected = tuple(expected)
    stmt = (
        update(Agent)
        .where(Agent.id == agent_id, Agent.status.in_(expected), *guards)
        .values(status=target, **values)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()

    if result.rowcount != 1:
        logger.warning(
            f"[State] Agent {agent_id}: transition to {target.value} rejected "
            f"(expected one of {[s.value for s in expected]})"
        )
        return None

    logger.info(f"[State] Agent {agent_id} -> {target.value}")
    return _reload(db, agent_id)


def begin_phase1(db: Session, agent_id: UUID) -> Agent:
    """Claim phase 1: DRAFT/ERROR -> DEPLOYING while no ElevenLabs id is set."""
    agent = transition(
        db,
        agent_id,
        PHASE1_SOURCES,
        AgentStatus.DEPLOYING,
        Agent.elevenlabs_agent_id.is_(None),
    )
    if agent is None:
        raise InvalidStateError(
            "Agent deployment is already in progress or complete",
            InvalidStateError.TRANSITION_CONFLICT,
        )
    return agent


def complete_phase1(db: Session, agent_id: UUID, elevenlabs_agent_id: str) -> Agent:
    """DEPLOYING -> ACTIVE, recording the ElevenLabs id."""
    agent = transition(
        db,
        agent_id,
        (AgentStatus.DEPLOYING,),
        AgentStatus.ACTIVE,
        elevenlabs_agent_id=elevenlabs_agent_id,
        deployed_at=utcnow(),
    )
    if agent is None:
        raise InvalidStateError(
            "Agent left DEPLOYING before the deployment finished",
            InvalidStateError.TRANSITION_CONFLICT,
        )
    return agent


def begin_phase2(db: Session, agent_id: UUID) -> Agent:
    """Claim phase 2: ACTIVE/ERROR -> DEPLOYING_BRIDGE once phase 1 is done and no app exists."""
    agent = transition(
        db,
        agent_id,
        PHASE2_SOURCES,
        AgentStatus.DEPLOYING_BRIDGE,
        Agent.elevenlabs_agent_id.is_not(None),
        Agent.digitalocean_app_id.is_(None),
    )
    if agent is None:
        raise InvalidStateError(
            "Bridge deployment is already in progress or complete",
            InvalidStateError.TRANSITION_CONFLICT,
        )
    return agent


def complete_phase2(db: Session, agent_id: UUID, app_id: str, deployment_url: str) -> Agent:
    """DEPLOYING_BRIDGE -> PUBLISHED, recording the app id and live URL."""
    agent = transition(
        db,
        agent_id,
        (AgentStatus.DEPLOYING_BRIDGE,),
        AgentStatus.PUBLISHED,
        digitalocean_app_id=app_id,
        deployment_url=deployment_url,
        deployed_at=utcnow(),
    )
    if agent is None:
        raise InvalidStateError(
            "Agent left DEPLOYING_BRIDGE before the bridge went live",
            InvalidStateError.TRANSITION_CONFLICT,
        )
    return agent


def mark_error(db: Session, agent_id: UUID, in_flight: AgentStatus) -> Optional[Agent]:
    """
    Force an in-flight phase to ERROR.

    Only applies while the agent is still in ``in_flight``, so a failed
    attempt never overwrites the outcome of another request.
    """
    db.rollback()
    return transition(db, agent_id, (in_flight,), AgentStatus.ERROR)


def touch_deployed_at(db: Session, agent_id: UUID) -> Agent:
    """Refresh ``deployed_at`` after a config sync. Status is left alone."""
    db.execute(
        update(Agent)
        .where(Agent.id == agent_id)
        .values(deployed_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return _reload(db, agent_id)
