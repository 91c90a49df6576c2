"""HTTP client for the local control endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from posturemax.bus.messages import Ack

logger = logging.getLogger(__name__)


class CommandClient:
    """Sends commands and hotkeys to a running posturemax instance."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8765",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the HTTP client and verify endpoint connectivity."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            logger.info("Connected to endpoint at %s", self._base_url)
        except Exception as e:
            await self._client.aclose()
            self._client = None
            raise CommandClientError(f"Failed to connect to endpoint: {e}", path="/health") from e

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from endpoint")

    async def send(self, command: str, **payload: Any) -> Ack:
        """Post a command by wire name, e.g. ``send("set-transparency", level="visible")``."""
        resp = await self._request("POST", "/commands", {"type": command, **payload})
        return Ack.model_validate(resp.json())

    async def press_hotkey(self, chord: str) -> None:
        await self._request("POST", "/hotkey", {"chord": chord})
        logger.debug("Sent hotkey: %s", chord)

    async def get_state(self) -> dict[str, Any]:
        resp = await self._request("GET", "/state")
        return resp.json()

    async def get_report(self) -> dict[str, Any] | None:
        try:
            resp = await self._request("GET", "/report")
        except CommandClientError as e:
            if e.status_code == 404:
                return None
            raise
        return resp.json()

    async def _request(self, method: str, path: str, payload: dict | None = None) -> httpx.Response:
        if self._client is None:
            raise CommandClientError("Not connected to endpoint", path=path)
        try:
            resp = await self._client.request(method, path, json=payload)
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            raise CommandClientError(
                f"HTTP request to {path} failed: {e}",
                path=path,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise CommandClientError(f"HTTP request to {path} failed: {e}", path=path) from e

    async def __aenter__(self) -> CommandClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


class CommandClientError(Exception):
    """Raised when the control endpoint cannot be reached or rejects a request."""

    def __init__(self, message: str, path: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.status_code = status_code
