"""Guided multi-step dialog that builds a remote daemon configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from linkfetch.core.config import NONE_ANSWERS
from linkfetch.core.models import RemoteDaemonConfig

if TYPE_CHECKING:
    from linkfetch.services.aria2 import Aria2Client
    from linkfetch.services.user_config import UserConfigStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AwaitingEndpoint:
    """Waiting for the RPC endpoint URL."""


@dataclass(frozen=True, slots=True)
class AwaitingSecret:
    """Endpoint accepted; waiting for the optional secret."""

    endpoint: str


@dataclass(frozen=True, slots=True)
class AwaitingDirectory:
    """Endpoint and secret accepted; waiting for the optional directory."""

    endpoint: str
    secret: str | None


SetupStep = AwaitingEndpoint | AwaitingSecret | AwaitingDirectory


class SetupOutcome(StrEnum):
    """What the chat layer should tell the user after a transition."""

    PROMPT_ENDPOINT = "prompt_endpoint"
    PROMPT_SECRET = "prompt_secret"
    PROMPT_DIRECTORY = "prompt_directory"
    INVALID_ENDPOINT = "invalid_endpoint"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    NO_SESSION = "no_session"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class SetupReply:
    """Result of feeding one input into the state machine."""

    outcome: SetupOutcome
    config: RemoteDaemonConfig | None = None
    version: str | None = None
    reason: str | None = None


def is_valid_endpoint(text: str) -> bool:
    """Absolute http(s) URL with a host."""
    try:
        parsed = urlparse(text)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _optional_answer(text: str | None) -> str | None:
    value = (text or "").strip()
    if value.lower() in NONE_ANSWERS:
        return None
    return value


class SetupSessionManager:
    """One session per user; re-entering setup always restarts the flow."""

    def __init__(self, store: UserConfigStore, aria2_client: Aria2Client) -> None:
        self.store = store
        self.aria2_client = aria2_client
        self._sessions: dict[int, SetupStep] = {}

    def begin(self, user_id: int) -> SetupReply:
        self._sessions[user_id] = AwaitingEndpoint()
        return SetupReply(SetupOutcome.PROMPT_ENDPOINT)

    def step_for(self, user_id: int) -> SetupStep | None:
        return self._sessions.get(user_id)

    def is_active(self, user_id: int) -> bool:
        return user_id in self._sessions

    def cancel(self, user_id: int) -> SetupReply:
        """Drop the session without persisting anything."""
        if self._sessions.pop(user_id, None) is None:
            return SetupReply(SetupOutcome.NO_SESSION)
        return SetupReply(SetupOutcome.CANCELLED)

    async def handle_text(
        self,
        user_id: int,
        text: str,
        *,
        username: str | None = None,
    ) -> SetupReply:
        """Feed a free-text answer into the current step."""
        step = self._sessions.get(user_id)
        if step is None:
            return SetupReply(SetupOutcome.NO_SESSION)

        if isinstance(step, AwaitingEndpoint):
            endpoint = text.strip()
            if not is_valid_endpoint(endpoint):
                return SetupReply(SetupOutcome.INVALID_ENDPOINT)
            self._sessions[user_id] = AwaitingSecret(endpoint=endpoint)
            return SetupReply(SetupOutcome.PROMPT_SECRET)

        if isinstance(step, AwaitingSecret):
            self._sessions[user_id] = AwaitingDirectory(
                endpoint=step.endpoint,
                secret=_optional_answer(text),
            )
            return SetupReply(SetupOutcome.PROMPT_DIRECTORY)

        return await self.finish(
            user_id,
            step,
            directory=_optional_answer(text),
            username=username,
        )

    def skip_secret(self, user_id: int) -> SetupReply:
        """Equivalent to answering "none" at the secret step."""
        step = self._sessions.get(user_id)
        if not isinstance(step, AwaitingSecret):
            return SetupReply(SetupOutcome.IGNORED)
        self._sessions[user_id] = AwaitingDirectory(endpoint=step.endpoint, secret=None)
        return SetupReply(SetupOutcome.PROMPT_DIRECTORY)

    async def skip_directory(
        self,
        user_id: int,
        *,
        username: str | None = None,
    ) -> SetupReply:
        """Equivalent to answering "none" at the directory step."""
        step = self._sessions.get(user_id)
        if not isinstance(step, AwaitingDirectory):
            return SetupReply(SetupOutcome.IGNORED)
        return await self.finish(user_id, step, directory=None, username=username)

    async def finish(
        self,
        user_id: int,
        step: AwaitingDirectory,
        *,
        directory: str | None,
        username: str | None = None,
    ) -> SetupReply:
        """Test the draft, persist it on success and always end the session."""
        config = RemoteDaemonConfig(
            endpoint=step.endpoint,
            secret=step.secret,
            directory=directory,
        )
        # The session ends either way; a failed test means starting over.
        if self._sessions.get(user_id) is step:
            del self._sessions[user_id]
        result = await self.aria2_client.test_connection(config)

        if not result.ok:
            logger.info("Setup for user %s failed: %s", user_id, result.reason)
            return SetupReply(SetupOutcome.FAILED, config=config, reason=result.reason)

        await self.store.asave(user_id, config, username=username)
        return SetupReply(SetupOutcome.COMPLETED, config=config, version=result.version)
