"""
Agent API endpoints: config, deployment and bridge provisioning.
"""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.auth import get_current_user_id
from app.core.database import get_db
from app.models.schemas import (
    AgentCreate,
    AgentResponse,
    AgentUpdate,
    DeploymentStatusResponse,
)
from app.services import agent_service
from app.services.bridge_tasks import BridgeDeploymentTasks, get_bridge_tasks
from app.services.deployment_orchestrator import DeploymentOrchestrator, get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects/{project_id}", tags=["agents"])
bridge_router = APIRouter(prefix="/api/agents", tags=["deployment"])


@router.get("/agents", response_model=List[AgentResponse])
async def list_agents(
    project_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the agents of a project, newest first."""
    agent_service.verify_project_ownership(db, user_id, project_id)
    return agent_service.list_agents(db, project_id)


@router.post("/agents", response_model=AgentResponse, status_code=201)
async def create_agent(
    project_id: UUID,
    payload: AgentCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a DRAFT agent. Deployment is a separate step."""
    agent_service.verify_project_ownership(db, user_id, project_id)
    return agent_service.create_agent(db, project_id, payload)


@router.get("/agents/agent", response_model=AgentResponse)
@router.get("/agent", response_model=AgentResponse)
async def get_project_agent(
    project_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Return the project's agent."""
    agent_service.verify_project_ownership(db, user_id, project_id)
    return agent_service.get_project_agent(db, project_id)


@router.put("/agents/{agent_id}", response_model=AgentResponse)
async def update_agent(
    project_id: UUID,
    agent_id: UUID,
    payload: AgentUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Edit agent config in the database without touching ElevenLabs."""
    agent_service.verify_project_ownership(db, user_id, project_id)
    agent = agent_service.get_project_agent_by_id(db, project_id, agent_id)
    return agent_service.update_agent_config(db, agent, payload)


@router.patch("/agents/{agent_id}", response_model=AgentResponse)
async def redeploy_agent(
    project_id: UUID,
    agent_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator),
):
    """
    Sync the saved config to an agent already deployed on ElevenLabs.

    Returns 400 if the agent was never deployed or its config is
    incomplete, 500 with the provider detail if ElevenLabs rejects it.
    """
    agent_service.verify_project_ownership(db, user_id, project_id)
    agent = agent_service.get_project_agent_by_id(db, project_id, agent_id)
    return await orchestrator.update_deployed_agent(db, agent)


@router.post("/agents/{agent_id}/deploy", response_model=AgentResponse)
async def deploy_agent(
    project_id: UUID,
    agent_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator),
):
    """
    Deploy the agent to ElevenLabs for the first time.

    Returns 400 if already deployed or config is incomplete, 404 if the
    agent is missing, 500 with the provider detail on failure.
    """
    agent_service.verify_project_ownership(db, user_id, project_id)
    agent = agent_service.get_project_agent_by_id(db, project_id, agent_id)
    return await orchestrator.deploy_agent(db, agent)


@bridge_router.post("/{agent_id}/deploy-bridge", response_model=AgentResponse)
async def deploy_bridge(
    agent_id: UUID,
    response: Response,
    background: bool = Query(False, description="Return immediately and provision in the background"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator),
    tasks: BridgeDeploymentTasks = Depends(get_bridge_tasks),
):
    """
    Deploy the bridge service for an agent already on ElevenLabs.

    By default waits until the bridge is live (up to the poll ceiling)
    and returns the published agent with its deployment_url. With
    ``background=true`` it returns 202 once DEPLOYING_BRIDGE is claimed;
    progress is read from ``GET /api/agents/{agent_id}/status``.
    """
    agent = agent_service.get_owned_agent(db, user_id, agent_id)

    if not background:
        return await orchestrator.deploy_bridge(db, agent)

    agent = orchestrator.begin_bridge_deployment(db, agent)
    tasks.start(orchestrator, agent.id)
    response.status_code = status.HTTP_202_ACCEPTED
    return agent


@bridge_router.delete("/{agent_id}/deploy-bridge", response_model=AgentResponse)
async def cancel_bridge_deployment(
    agent_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    tasks: BridgeDeploymentTasks = Depends(get_bridge_tasks),
):
    """Cancel a background bridge deployment. The agent ends in ERROR."""
    agent = agent_service.get_owned_agent(db, user_id, agent_id)
    cancelled = await tasks.cancel(agent.id)
    if not cancelled:
        logger.info(f"[Bridge] No running deployment to cancel for agent {agent_id}")
    db.refresh(agent)
    return agent


@bridge_router.get("/{agent_id}/status", response_model=DeploymentStatusResponse)
async def get_deployment_status(
    agent_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    tasks: BridgeDeploymentTasks = Depends(get_bridge_tasks),
):
    """Current deployment state of an agent."""
    agent = agent_service.get_owned_agent(db, user_id, agent_id)
    return DeploymentStatusResponse(
        agent_id=agent.id,
        status=agent.status,
        elevenlabs_agent_id=agent.elevenlabs_agent_id,
        digitalocean_app_id=agent.digitalocean_app_id,
        deployment_url=agent.deployment_url,
        deployed_at=agent.deployed_at,
        bridge_task_running=tasks.is_running(agent.id),
    )
