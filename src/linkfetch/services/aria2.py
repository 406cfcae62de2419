"""JSON-RPC client for a user's remote aria2 download daemon."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from linkfetch.core.config import (
    ARIA2_MAX_CONNECTIONS_PER_SERVER,
    ARIA2_MIN_SPLIT_SIZE,
    ARIA2_SPLIT,
)
from linkfetch.core.models import OptionValue, RemoteDaemonConfig

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
METHOD_GET_VERSION = "aria2.getVersion"
METHOD_ADD_URI = "aria2.addUri"


class Aria2RpcError(RuntimeError):
    """Raised internally for transport or protocol level RPC failures."""

    def __init__(self, reason: str, *, code: int | None = None) -> None:
        """Initialize the error with the human-readable reason."""
        self.reason = reason
        self.code = code
        super().__init__(reason)


@dataclass(frozen=True, slots=True)
class ConnectivityResult:
    """Outcome of a version query against the daemon."""

    ok: bool
    version: str | None = None
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class DownloadResult:
    """Outcome of enqueueing one download."""

    ok: bool
    task_id: str | None = None
    reason: str | None = None


def build_rpc_payload(
    method: str,
    params: list[Any],
    *,
    secret: str | None = None,
) -> dict[str, Any]:
    """Build the JSON-RPC envelope, prepending the token when set."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
        "id": str(int(time.time() * 1000)),
        "params": [f"token:{secret}", *params] if secret else list(params),
    }


def build_download_options(
    config: RemoteDaemonConfig,
    filename: str | None = None,
) -> dict[str, OptionValue]:
    """Default performance options overlaid with the user's own options."""
    options: dict[str, OptionValue] = {
        "max-connection-per-server": ARIA2_MAX_CONNECTIONS_PER_SERVER,
        "split": ARIA2_SPLIT,
        "min-split-size": ARIA2_MIN_SPLIT_SIZE,
    }
    if config.directory:
        options["dir"] = config.directory
    if filename:
        options["out"] = filename
    options.update(config.extra_options)
    return options


class Aria2Client:
    """Single-attempt JSON-RPC calls; callers own any retry policy."""

    def __init__(self, httpx_client: httpx.AsyncClient) -> None:
        self.httpx_client = httpx_client

    async def call(
        self,
        config: RemoteDaemonConfig,
        method: str,
        params: list[Any] | None = None,
    ) -> Any:
        """Perform one RPC call and return its `result` field.

        Raises:
            Aria2RpcError: on transport errors, non-2xx responses, malformed
                bodies or RPC error envelopes.

        """
        payload = build_rpc_payload(method, params or [], secret=config.secret)
        try:
            response = await self.httpx_client.post(
                config.endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            reason = str(exc) or exc.__class__.__name__
            raise Aria2RpcError(reason) from exc

        if not response.is_success:
            reason = f"HTTP error: {response.status_code}"
            raise Aria2RpcError(reason)

        try:
            body = response.json()
        except ValueError as exc:
            reason = "Invalid JSON-RPC response"
            raise Aria2RpcError(reason) from exc

        if not isinstance(body, dict):
            reason = "Invalid JSON-RPC response"
            raise Aria2RpcError(reason)

        error = body.get("error")
        if error:
            if isinstance(error, dict):
                raise Aria2RpcError(
                    str(error.get("message") or "Unknown RPC error"),
                    code=error.get("code"),
                )
            raise Aria2RpcError(str(error))

        return body.get("result")

    async def test_connection(self, config: RemoteDaemonConfig) -> ConnectivityResult:
        """Query the daemon version to check endpoint and secret."""
        try:
            result = await self.call(config, METHOD_GET_VERSION)
        except Aria2RpcError as exc:
            logger.warning(
                "aria2 connectivity check failed endpoint=%s: %s",
                config.endpoint,
                exc.reason,
            )
            return ConnectivityResult(ok=False, reason=exc.reason)

        version = result.get("version") if isinstance(result, dict) else None
        return ConnectivityResult(ok=True, version=str(version or "unknown"))

    async def add_download(
        self,
        direct_url: str,
        config: RemoteDaemonConfig,
        filename: str | None = None,
    ) -> DownloadResult:
        """Enqueue `direct_url` on the daemon."""
        options = build_download_options(config, filename)
        logger.info("Adding aria2 download url=%s options=%s", direct_url, options)
        try:
            gid = await self.call(config, METHOD_ADD_URI, [[direct_url], options])
        except Aria2RpcError as exc:
            logger.warning("aria2 addUri failed url=%s: %s", direct_url, exc.reason)
            return DownloadResult(ok=False, reason=exc.reason)

        logger.info("aria2 task added gid=%s", gid)
        return DownloadResult(ok=True, task_id=str(gid))
