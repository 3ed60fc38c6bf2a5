"""Service modules."""
from app.services.deployment_orchestrator import (
    DeploymentOrchestrator,
    deployment_orchestrator,
)
from app.services.bridge_tasks import BridgeDeploymentTasks, bridge_tasks

__all__ = [
    "DeploymentOrchestrator",
    "deployment_orchestrator",
    "BridgeDeploymentTasks",
    "bridge_tasks",
]
