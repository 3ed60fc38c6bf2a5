"""
ElevenLabs Conversational AI client for creating and updating agents.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ProviderFailureError, ProvisioningFailedError

logger = logging.getLogger(__name__)

PROVIDER = "elevenlabs"


def build_agent_payload(
    agent_name: str,
    system_prompt: str,
    voice_id: str,
    first_message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the create/update request body for a conversational agent.

    An empty first message falls back to the configured default greeting.
    """
    return {
        "name": agent_name,
        "conversation_config": {
            "agent": {
                "prompt": {"prompt": system_prompt},
                "first_message": first_message or settings.default_first_message,
                "language": settings.elevenlabs_language,
            },
            "tts": {"voice_id": voice_id},
        },
    }


def _response_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class ElevenLabsClient:
    """Client for the ElevenLabs agents API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.elevenlabs_api_key
        self.base_url = base_url or settings.elevenlabs_base_url
        self.timeout = timeout or settings.http_timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"xi-api-key": self.api_key, "Content-Type": "application/json"},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[ElevenLabs] {method} {path} failed: {e}")
            raise ProviderFailureError(PROVIDER, f"Request failed: {e}")

        if response.is_error:
            detail = _response_detail(response)
            logger.error(f"[ElevenLabs] {method} {path} returned {response.status_code}: {detail}")
            raise ProviderFailureError(
                PROVIDER,
                f"{method} {path} returned {response.status_code}",
                upstream_status=response.status_code,
                details=detail,
            )

        if not response.content:
            return {}
        body = _response_detail(response)
        if not isinstance(body, dict):
            raise ProviderFailureError(
                PROVIDER,
                f"{method} {path} returned a non-JSON body",
                upstream_status=response.status_code,
                details=body,
            )
        return body

    async def create_agent(self, payload: Dict[str, Any]) -> str:
        """
        Create a conversational agent.

        Returns:
            The ElevenLabs agent id

        Raises:
            ProviderFailureError: On transport errors or non-2xx responses
            ProvisioningFailedError: If the response carries no agent_id
        """
        body = await self._request("POST", "/convai/agents/create", payload)
        agent_id = body.get("agent_id")
        if not agent_id:
            raise ProvisioningFailedError(
                PROVIDER,
                "Failed to create agent - no agent_id returned",
                details=body,
            )
        return agent_id

    async def update_agent(self, elevenlabs_agent_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Patch an existing conversational agent with a full config payload."""
        return await self._request("PATCH", f"/convai/agents/{elevenlabs_agent_id}", payload)


# Global instance
elevenlabs_client = ElevenLabsClient()
