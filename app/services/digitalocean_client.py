"""
DigitalOcean App Platform client for provisioning bridge services.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ProviderFailureError

logger = logging.getLogger(__name__)

PROVIDER = "digitalocean"


def _response_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class DigitalOceanClient:
    """Client for the DigitalOcean apps API."""

    def __init__(
        self,
        api_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token or settings.digitalocean_api_token
        self.base_url = base_url or settings.digitalocean_base_url
        self.timeout = timeout or settings.http_timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_token}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[DigitalOcean] {method} {path} failed: {e}")
            raise ProviderFailureError(PROVIDER, f"Request failed: {e}")

        if response.is_error:
            detail = _response_detail(response)
            logger.error(f"[DigitalOcean] {method} {path} returned {response.status_code}: {detail}")
            raise ProviderFailureError(
                PROVIDER,
                f"{method} {path} returned {response.status_code}",
                upstream_status=response.status_code,
                details=detail,
            )

        body = _response_detail(response)
        app = body.get("app") if isinstance(body, dict) else None
        if not isinstance(app, dict):
            raise ProviderFailureError(
                PROVIDER,
                f"{method} {path} returned no app object",
                upstream_status=response.status_code,
                details=body,
            )
        return app

    async def create_app(self, spec: Dict[str, Any]) -> Dict[str, Any]:
        """
        Submit an app spec.

        Returns:
            The created app object; its ``id`` is guaranteed to be present
        """
        app = await self._request("POST", "/apps", {"spec": spec})
        if not app.get("id"):
            raise ProviderFailureError(PROVIDER, "Created app has no id", details=app)
        return app

    async def get_app(self, app_id: str) -> Dict[str, Any]:
        """Read the current state of an app."""
        return await self._request("GET", f"/apps/{app_id}")


# Global instance
digitalocean_client = DigitalOceanClient()
