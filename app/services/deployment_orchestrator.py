"""
Deployment orchestrator for agents and their bridge services.

Phase 1 creates the conversational agent on ElevenLabs. Phase 2 provisions
a bridge app on DigitalOcean bound to that agent and polls it until it is
live. Every phase is claimed with a compare-and-set status transition and
any outbound failure forces the agent to ERROR before it is re-raised.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    IncompleteConfigError,
    InvalidStateError,
    ProvisioningTimeoutError,
)
from app.models.agent import Agent, AgentStatus
from app.services import agent_state
from app.services.digitalocean_client import DigitalOceanClient, digitalocean_client
from app.services.elevenlabs_client import ElevenLabsClient, build_agent_payload, elevenlabs_client
from app.utils.naming import derive_application_name

logger = logging.getLogger(__name__)

REQUIRED_AGENT_FIELDS = ("agent_name", "system_prompt", "voice_id")


def missing_agent_fields(agent: Agent) -> List[str]:
    """Fields that must be non-empty before the agent can reach the voice platform."""
    return [field for field in REQUIRED_AGENT_FIELDS if not getattr(agent, field)]


def check_agent_config(agent: Agent):
    missing = missing_agent_fields(agent)
    if missing:
        raise IncompleteConfigError(missing)


def agent_payload(agent: Agent) -> Dict[str, Any]:
    return build_agent_payload(
        agent_name=agent.agent_name,
        system_prompt=agent.system_prompt,
        voice_id=agent.voice_id,
        first_message=agent.first_message,
    )


def build_app_spec(app_name: str, elevenlabs_agent_id: str, api_key: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the App Platform spec for a bridge service.

    The spec names a single service built from the bridge template,
    listening on the configured HTTP port, with exactly two runtime
    environment entries: the ElevenLabs API key (secret) and the agent id.
    """
    return {
        "name": app_name,
        "region": settings.bridge_region,
        "services": [
            {
                "name": settings.bridge_service_name,
                "github": {
                    "repo": settings.bridge_repo,
                    "branch": settings.bridge_branch,
                    "deploy_on_push": True,
                },
                "run_command": settings.bridge_run_command,
                "environment_slug": settings.bridge_environment_slug,
                "instance_size_slug": settings.bridge_instance_size,
                "instance_count": 1,
                "http_port": settings.bridge_http_port,
                "envs": [
                    {
                        "key": "ELEVENLABS_API_KEY",
                        "value": api_key or settings.elevenlabs_api_key,
                        "type": "SECRET",
                        "scope": "RUN_TIME",
                    },
                    {
                        "key": "ELEVENLABS_AGENT_ID",
                        "value": elevenlabs_agent_id,
                        "type": "GENERAL",
                        "scope": "RUN_TIME",
                    },
                ],
            }
        ],
    }


def live_url_of(app: Dict[str, Any]) -> Tuple[str, Optional[str]]:
    """
    Extract the deployment phase and live URL from an app object.

    Returns:
        ``(phase, live_url)``; phase is ``PENDING`` when there is no
        active deployment yet
    """
    phase = (app.get("active_deployment") or {}).get("phase") or "PENDING"
    return phase, app.get("live_url")


class DeploymentOrchestrator:
    """Drives the two-phase agent deployment state machine."""

    def __init__(
        self,
        voice_client: Optional[ElevenLabsClient] = None,
        cloud_client: Optional[DigitalOceanClient] = None,
        poll_interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        self.voice_client = voice_client or elevenlabs_client
        self.cloud_client = cloud_client or digitalocean_client
        self.poll_interval = settings.bridge_poll_interval if poll_interval is None else poll_interval
        self.max_attempts = settings.bridge_poll_max_attempts if max_attempts is None else max_attempts

    # ------------------------------------------------------------------
    # Phase 1: voice platform
    # ------------------------------------------------------------------

    async def deploy_agent(self, db: Session, agent: Agent) -> Agent:
        """
        Create the agent on ElevenLabs for the first time.

        Raises:
            InvalidStateError: Agent already has an ElevenLabs id, or another
                request is deploying it
            IncompleteConfigError: agent_name, system_prompt or voice_id is empty
            ProviderFailureError: ElevenLabs call failed (agent left in ERROR)
        """
        if agent.elevenlabs_agent_id:
            raise InvalidStateError(
                "Agent is already deployed. Use the update endpoint to modify it.",
                InvalidStateError.ALREADY_DEPLOYED,
            )
        check_agent_config(agent)

        agent_id = agent.id
        agent = agent_state.begin_phase1(db, agent_id)

        try:
            logger.info(f"[Deploy] Creating agent {agent_id} in ElevenLabs...")
            elevenlabs_agent_id = await self.voice_client.create_agent(agent_payload(agent))
            logger.info(f"[Deploy] Agent {agent_id} created in ElevenLabs: {elevenlabs_agent_id}")
            return agent_state.complete_phase1(db, agent_id, elevenlabs_agent_id)
        except Exception as e:
            logger.error(f"[Deploy] Deploying agent {agent_id} failed: {e}")
            self._mark_error(db, agent_id, AgentStatus.DEPLOYING)
            raise

    async def update_deployed_agent(self, db: Session, agent: Agent) -> Agent:
        """
        Push the current config to an already deployed agent.

        This is a config sync, not a phase transition: only ``deployed_at``
        changes and failures leave the status untouched.

        Raises:
            InvalidStateError: Agent has not been deployed yet
            IncompleteConfigError: agent_name, system_prompt or voice_id is empty
            ProviderFailureError: ElevenLabs call failed
        """
        if not agent.elevenlabs_agent_id:
            raise InvalidStateError(
                "Agent is not deployed yet. Use the deploy endpoint first.",
                InvalidStateError.NOT_DEPLOYED,
            )
        check_agent_config(agent)

        logger.info(f"[Deploy] Updating agent {agent.id} in ElevenLabs...")
        await self.voice_client.update_agent(agent.elevenlabs_agent_id, agent_payload(agent))
        logger.info(f"[Deploy] Agent {agent.id} redeployed")
        return agent_state.touch_deployed_at(db, agent.id)

    # ------------------------------------------------------------------
    # Phase 2: bridge on the cloud platform
    # ------------------------------------------------------------------

    def begin_bridge_deployment(self, db: Session, agent: Agent) -> Agent:
        """
        Check phase 2 preconditions and claim the DEPLOYING_BRIDGE state.

        Raises:
            InvalidStateError: Phase 1 missing, bridge already deployed, or
                another request is deploying the bridge
        """
        if not agent.elevenlabs_agent_id:
            raise InvalidStateError(
                "Agent must be deployed to ElevenLabs first.",
                InvalidStateError.PHASE1_REQUIRED,
            )
        if agent.digitalocean_app_id:
            raise InvalidStateError(
                "This agent already has a bridge deployed.",
                InvalidStateError.ALREADY_BRIDGED,
            )
        return agent_state.begin_phase2(db, agent.id)

    async def provision_bridge(self, db: Session, agent: Agent) -> Agent:
        """
        Create the bridge app and wait until it is live.

        Expects the agent to already be in DEPLOYING_BRIDGE. Any failure,
        including cancellation, moves it to ERROR before propagating.
        """
        agent_id = agent.id
        app_id = None
        try:
            app_name = derive_application_name(agent.agent_name, agent_id)
            logger.info(f"[Bridge] App name for agent {agent_id}: {app_name}")
            spec = build_app_spec(app_name, agent.elevenlabs_agent_id)

            logger.info("[Bridge] Creating app in DigitalOcean...")
            app = await self.cloud_client.create_app(spec)
            app_id = app["id"]
            logger.info(f"[Bridge] App created with ID: {app_id}")

            live_url = await self.wait_for_live_url(app_id)
            logger.info(f"[Bridge] App {app_id} live at: {live_url}")

            return agent_state.complete_phase2(db, agent_id, app_id, live_url)
        except (Exception, asyncio.CancelledError) as e:
            if app_id:
                logger.error(f"[Bridge] App {app_id} was created but agent {agent_id} was not published")
            logger.error(f"[Bridge] Bridge deployment for agent {agent_id} failed: {e!r}")
            self._mark_error(db, agent_id, AgentStatus.DEPLOYING_BRIDGE)
            raise

    async def deploy_bridge(self, db: Session, agent: Agent) -> Agent:
        """Run phase 2 end to end and return the published agent."""
        agent = self.begin_bridge_deployment(db, agent)
        return await self.provision_bridge(db, agent)

    def _mark_error(self, db: Session, agent_id, in_flight: AgentStatus):
        # Called while handling a failure; the original error must keep propagating
        try:
            agent_state.mark_error(db, agent_id, in_flight)
        except SQLAlchemyError as e:
            logger.error(f"[Deploy] Could not move agent {agent_id} from {in_flight.value} to ERROR: {e}")

    async def wait_for_live_url(self, app_id: str) -> str:
        """
        Poll the app until its active deployment is ACTIVE and it has a live URL.

        Polls every ``poll_interval`` seconds, at most ``max_attempts`` times.

        Raises:
            ProvisioningTimeoutError: If the ceiling is reached first
        """
        logger.info(f"[Bridge] Waiting for app {app_id} to become active...")
        for attempt in range(1, self.max_attempts + 1):
            app = await self.cloud_client.get_app(app_id)
            phase, live_url = live_url_of(app)
            logger.info(f"[Bridge] Attempt {attempt}: Status = {phase}")

            # Both must hold: the platform can report ACTIVE before the URL propagates
            if phase == "ACTIVE" and live_url:
                return live_url

            if attempt < self.max_attempts:
                await asyncio.sleep(self.poll_interval)

        raise ProvisioningTimeoutError(app_id, self.max_attempts, self.poll_interval)


# Global instance
deployment_orchestrator = DeploymentOrchestrator()


def get_orchestrator() -> DeploymentOrchestrator:
    """Dependency returning the shared orchestrator."""
    return deployment_orchestrator
