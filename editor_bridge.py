"""
editor_bridge.py - HTTP client for the editor host's message bus.

The editor extension exposes its internal message bus over a small REST
endpoint (localhost:3000 by default). Every request is a channel/message
pair plus positional arguments, mirroring how editor panels talk to the
scene and asset-db processes.

Used by the MCP server and can be run standalone for testing.

Usage:
    python editor_bridge.py --info              # Check if the editor is reachable
    python editor_bridge.py --dump <uuid>       # Print the raw node dump
"""

import argparse
import asyncio
import json
import logging
import os
import sys
import time
from typing import Any, Optional

import httpx

from inspector_mcp.metrics import metrics

logger = logging.getLogger("inspector-mcp.bridge")

BASE_URL = os.environ.get("EDITOR_BRIDGE_URL", "http://127.0.0.1:3000")
TIMEOUT = float(os.environ.get("EDITOR_BRIDGE_TIMEOUT", "10.0"))
MAX_RESPONSE_BYTES = 10 * 1024 * 1024  # 10 MB cap on JSON responses

# Circuit breaker settings
CB_FAILURE_THRESHOLD = int(os.environ.get("EDITOR_BRIDGE_CB_THRESHOLD", "5"))
CB_RECOVERY_TIMEOUT = float(os.environ.get("EDITOR_BRIDGE_CB_COOLDOWN", "30.0"))

# Connection pool settings
POOL_MAX_CONNECTIONS = 10
POOL_MAX_KEEPALIVE = 5


class EditorBridgeError(Exception):
    """Base class for collaborator failures."""


class EditorConnectionError(EditorBridgeError):
    """The editor host could not be reached (or the breaker is open)."""


class EditorRequestError(EditorBridgeError):
    """The editor host answered with an error."""

    def __init__(self, channel: str, message: str, error: str):
        super().__init__(f"{channel}/{message} failed: {error}")
        self.channel = channel
        self.message = message
        self.error = error


# ══════════════════════════════════════════════════════════════════════════════
# Circuit Breaker
# ══════════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """Circuit breaker guarding the editor message bus.

    States:
    - CLOSED: requests pass through
    - OPEN: too many consecutive transport failures, requests fail fast
    - HALF_OPEN: cooldown elapsed; a single trial request is let through and
      its outcome closes or reopens the breaker. A trial that never reports
      back frees its slot after another cooldown.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = CB_FAILURE_THRESHOLD,
                 recovery_timeout: float = CB_RECOVERY_TIMEOUT):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._state = self.CLOSED
        self._failure_count = 0
        self._last_failure_time = 0.0
        self._trial_started: Optional[float] = None

    @property
    def state(self) -> str:
        if self._state == self.OPEN and self._retry_in() == 0:
            self._state = self.HALF_OPEN
            logger.info("Circuit breaker -> HALF_OPEN (editor may be back)")
        return self._state

    def _retry_in(self) -> float:
        return max(0.0, self.recovery_timeout - (time.time() - self._last_failure_time))

    def allow_request(self) -> bool:
        state = self.state
        if state == self.CLOSED:
            return True
        if state == self.OPEN:
            return False
        now = time.time()
        if self._trial_started is not None and now - self._trial_started < self.recovery_timeout:
            return False
        self._trial_started = now
        return True

    def record_success(self):
        if self._state != self.CLOSED:
            logger.info("Circuit breaker -> CLOSED (editor reachable again)")
        self._state = self.CLOSED
        self._failure_count = 0
        self._trial_started = None

    def record_failure(self):
        self._failure_count += 1
        self._last_failure_time = time.time()
        self._trial_started = None
        if self._state == self.HALF_OPEN or self._failure_count >= self.failure_threshold:
            if self._state != self.OPEN:
                logger.warning(
                    "Circuit breaker -> OPEN after %d failures (cooldown %.0fs)",
                    self._failure_count, self.recovery_timeout,
                )
            self._state = self.OPEN

    def fail_fast_error(self, channel: str, message: str) -> EditorConnectionError:
        return EditorConnectionError(
            f"Circuit breaker OPEN: refused {channel}/{message}, editor unreachable after "
            f"{self._failure_count} consecutive failures. Retry in {self._retry_in():.0f}s, "
            f"or check that the editor is running with the bridge extension enabled."
        )

    def snapshot(self) -> dict:
        state = self.state
        return {
            "state": state,
            "consecutive_failures": self._failure_count,
            "retry_in_s": round(self._retry_in(), 1) if state == self.OPEN else 0.0,
        }


def _parse_response(r: httpx.Response, channel: str, message: str) -> Any:
    """Decode a /message response, enforcing the size cap."""
    if len(r.content) > MAX_RESPONSE_BYTES:
        raise EditorRequestError(
            channel, message,
            f"response too large ({len(r.content)} bytes, max {MAX_RESPONSE_BYTES})",
        )
    try:
        body = r.json()
    except json.JSONDecodeError as e:
        raise EditorRequestError(channel, message, f"invalid JSON response: {e}") from e
    if isinstance(body, dict) and body.get("error"):
        raise EditorRequestError(channel, message, str(body["error"]))
    return body.get("result") if isinstance(body, dict) else body


# ══════════════════════════════════════════════════════════════════════════════
# Async client (for MCP server)
# ══════════════════════════════════════════════════════════════════════════════

class AsyncEditorBridge:
    """Async wrapper around the editor message bus (httpx.AsyncClient)."""

    def __init__(self, base_url: str = BASE_URL, timeout: float = TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            limits=httpx.Limits(
                max_connections=POOL_MAX_CONNECTIONS,
                max_keepalive_connections=POOL_MAX_KEEPALIVE,
            ),
            transport=transport,
        )
        self._cb = CircuitBreaker()

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def info(self) -> dict:
        r = await self._client.get("/info")
        r.raise_for_status()
        return r.json()

    async def is_connected(self) -> bool:
        try:
            await self.info()
            self._cb.record_success()
            return True
        except (httpx.ConnectError, httpx.TimeoutException):
            self._cb.record_failure()
            return False

    async def request(self, channel: str, message: str, *args: Any) -> Any:
        """Send one message to the editor and return its result."""
        metrics.inc("requests.total")
        if not self._cb.allow_request():
            metrics.inc("requests.circuit_breaker_rejected")
            raise self._cb.fail_fast_error(channel, message)
        with metrics.request(channel, message):
            try:
                r = await self._client.post(
                    "/message",
                    json={"channel": channel, "message": message, "args": list(args)},
                )
                r.raise_for_status()
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                self._cb.record_failure()
                metrics.inc("requests.error")
                logger.error("Editor connection failed: %s", e)
                raise EditorConnectionError(f"Connection failed: {e}") from e
            except httpx.HTTPStatusError as e:
                self._cb.record_success()
                metrics.inc("requests.error")
                raise EditorRequestError(channel, message, f"HTTP {e.response.status_code}") from e
        self._cb.record_success()
        result = _parse_response(r, channel, message)
        metrics.inc("requests.success")
        return result

    async def broadcast(self, message: str, *args: Any) -> None:
        await self.request("broadcast", message, *args)

    # Scene process

    async def query_node(self, uuid: str) -> Optional[dict]:
        return await self.request("scene", "query-node", uuid)

    async def query_component(self, uuid: str) -> Optional[dict]:
        return await self.request("scene", "query-component", uuid)

    async def query_node_tree(self) -> Optional[dict]:
        return await self.request("scene", "query-node-tree")

    async def set_property(self, uuid: str, path: str, dump: dict) -> Any:
        return await self.request("scene", "set-property", {"uuid": uuid, "path": path, "dump": dump})

    async def snapshot(self) -> None:
        await self.request("scene", "snapshot")

    async def query_material(self, uuid: str) -> Optional[dict]:
        return await self.request("scene", "query-material", uuid)

    async def apply_material(self, uuid: str, material_dump: dict) -> Any:
        return await self.request("scene", "apply-material", uuid, material_dump)

    async def query_all_effects(self) -> Any:
        return await self.request("scene", "query-all-effects")

    async def query_physics_material(self, uuid: str) -> Optional[dict]:
        return await self.request("scene", "query-physics-material", uuid)

    async def change_physics_material(self, material_meta: dict) -> dict:
        return await self.request("scene", "change-physics-material", material_meta)

    async def apply_physics_material(self, uuid: str, material_meta: dict) -> Any:
        return await self.request("scene", "apply-physics-material", uuid, material_meta)

    # Asset database

    async def query_asset_info(self, uuid: str) -> Optional[dict]:
        return await self.request("asset-db", "query-asset-info", uuid)

    async def query_asset_meta(self, uuid: str) -> Optional[dict]:
        return await self.request("asset-db", "query-asset-meta", uuid)

    async def save_asset_meta(self, uuid: str, meta: dict) -> Any:
        return await self.request("asset-db", "save-asset-meta", uuid, json.dumps(meta))

    # Project configuration

    async def query_project_config(self) -> Optional[dict]:
        return await self.request("project", "query-config", "project")

    async def set_project_config(self, path: str, value: Any) -> Any:
        return await self.request("project", "set-config", "project", path, value)


# ------------------------------------------------------------------
# CLI entry point for testing
# ------------------------------------------------------------------

async def _run_cli(args) -> int:
    async with AsyncEditorBridge() as editor:
        if not await editor.is_connected():
            print(f"ERROR: Cannot reach the editor at {BASE_URL}")
            print("Make sure the editor is running with the bridge extension enabled.")
            return 1

        if args.dump:
            dump = await editor.query_node(args.dump) or await editor.query_component(args.dump)
            print(json.dumps(dump, indent=2))
            return 0

        print("Connected to the editor")
        print(json.dumps(await editor.info(), indent=2))
        return 0


def main():
    parser = argparse.ArgumentParser(description="Editor message bus bridge")
    parser.add_argument("--info", action="store_true", help="Check if the editor is reachable")
    parser.add_argument("--dump", metavar="UUID", help="Print the raw dump of a node or component")
    args = parser.parse_args()
    sys.exit(asyncio.run(_run_cli(args)))


if __name__ == "__main__":
    main()
