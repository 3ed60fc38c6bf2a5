"""
Exception hierarchy for agent deployment and tool management.

Every error carries a machine-readable code and the HTTP status it maps
to, so routers never translate errors by hand.
"""
from typing import Any, Dict, Optional


class AgentFactoryError(Exception):
    """Base exception for the service.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error code.
        status_code: HTTP status the error is rendered with.
        details: Optional diagnostic payload (e.g. a provider response body).
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON responses."""
        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFoundError(AgentFactoryError):
    """Project, agent, tool or tool connection does not exist."""

    status_code = 404

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found", "NOT_FOUND")
        self.resource = resource


class UnauthorizedError(AgentFactoryError):
    """Authenticated user does not own the resource."""

    status_code = 403

    def __init__(self, message: str = "User not authorized for this agent") -> None:
        super().__init__(message, "UNAUTHORIZED")


class InvalidStateError(AgentFactoryError):
    """A deployment phase was requested from a state that does not allow it."""

    status_code = 400

    ALREADY_DEPLOYED = "ALREADY_DEPLOYED"
    NOT_DEPLOYED = "NOT_DEPLOYED"
    PHASE1_REQUIRED = "PHASE1_REQUIRED"
    ALREADY_BRIDGED = "ALREADY_BRIDGED"
    TRANSITION_CONFLICT = "TRANSITION_CONFLICT"

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message, code)


class IncompleteConfigError(AgentFactoryError):
    """Agent is missing fields required by the voice platform."""

    status_code = 400

    def __init__(self, missing) -> None:
        self.missing = list(missing)
        super().__init__(
            "Agent must have agent_name, system_prompt, and voice_id configured "
            f"(missing: {', '.join(self.missing)})",
            "INCOMPLETE_CONFIG",
        )


class ValidationError(AgentFactoryError):
    """Request payload is structurally valid but semantically rejected."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message, "VALIDATION")


class ToolConfigError(ValidationError):
    """Tool connection config does not satisfy the catalog schema."""


class ConflictError(AgentFactoryError):
    """Resource already exists."""

    status_code = 409

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFLICT")


class ProviderFailureError(AgentFactoryError):
    """An external platform returned an error or a malformed response.

    Attributes:
        provider: Name of the platform ("elevenlabs", "digitalocean").
        upstream_status: HTTP status returned by the platform, if any.
    """

    status_code = 500

    def __init__(
        self,
        provider: str,
        message: str,
        upstream_status: Optional[int] = None,
        details: Optional[Any] = None,
        code: str = "PROVIDER_FAILURE",
    ) -> None:
        super().__init__(f"[{provider}] {message}", code, details=details)
        self.provider = provider
        self.upstream_status = upstream_status


class ProvisioningFailedError(ProviderFailureError):
    """Provider accepted the request but returned no resource identifier."""

    def __init__(self, provider: str, message: str, details: Optional[Any] = None) -> None:
        super().__init__(provider, message, details=details, code="PROVISIONING_FAILED")


class ProvisioningTimeoutError(AgentFactoryError):
    """Bridge app did not become live within the poll ceiling."""

    status_code = 500

    def __init__(self, app_id: str, attempts: int, interval: float) -> None:
        super().__init__(
            f"App {app_id} did not report a live URL after {attempts} checks "
            f"({attempts * interval:.0f}s)",
            "PROVISIONING_TIMEOUT",
            details={"app_id": app_id, "attempts": attempts},
        )
        self.app_id = app_id
        self.attempts = attempts
