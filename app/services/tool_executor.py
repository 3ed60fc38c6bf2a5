"""
Tool executor service for calling a tool's webhook with test data.
"""
from typing import Dict, Any, Optional
import logging

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Service for executing tool webhooks."""

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout or settings.tool_test_timeout
        self._transport = transport

    async def execute_tool(
        self, deployment_url: str, config: Dict[str, Any], test_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        POST the tool config merged with test data to the tool webhook.

        Test data wins over config on key clashes. Tool failures are
        reported in the result rather than raised.

        Args:
            deployment_url: Webhook URL from the catalog entry
            config: Saved per-agent tool config
            test_data: Sample input supplied by the user

        Returns:
            Dict with 'success' and either 'message'/'response' or 'error'
        """
        payload = {**config, **test_data}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(deployment_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[Tools] Error calling {deployment_url}: {e}")
            return {"success": False, "error": f"Failed to execute tool: {e}"}

        body = self._parse_body(response)

        if response.is_error:
            error_message = body.get("error") if isinstance(body, dict) else None
            error_message = error_message or f"HTTP {response.status_code}"
            logger.error(f"[Tools] {deployment_url} returned {response.status_code}: {body}")
            return {"success": False, "error": f"Failed to execute tool: {error_message}"}

        return {
            "success": True,
            "message": "Test executed successfully",
            "response": body,
        }

    def _parse_body(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text


# Global instance
tool_executor = ToolExecutor()


def get_tool_executor() -> ToolExecutor:
    """Dependency returning the shared tool executor."""
    return tool_executor
