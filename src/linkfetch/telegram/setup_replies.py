"""Chat wording for each setup state machine outcome."""

from __future__ import annotations

from typing import TYPE_CHECKING

from linkfetch.state.setup import SetupOutcome, SetupReply
from linkfetch.telegram.context import (
    SKIP_DIR,
    SKIP_SECRET,
    cancel_setup_keyboard,
    skip_keyboard,
)

if TYPE_CHECKING:
    from telegram import InlineKeyboardMarkup

    from linkfetch.core.models import RemoteDaemonConfig

PROMPT_ENDPOINT = (
    "⚙️ Configure your Aria2 download server\n\n"
    "📝 Send the Aria2 RPC address:\n\n"
    "Format: http://host:port/jsonrpc\n\n"
    "Examples:\n"
    "• LAN: http://192.168.1.1:6800/jsonrpc\n"
    "• Tunnel: http://your-domain:6800/jsonrpc\n"
    "• OpenWrt: http://openwrt.lan:6800/jsonrpc"
)
INVALID_ENDPOINT = (
    "❌ Invalid URL\n\n"
    "Please send a valid HTTP/HTTPS URL, for example:\n"
    "http://localhost:6800/jsonrpc"
)
PROMPT_SECRET = (
    "🔑 Send the Aria2 RPC secret:\n\n"
    'If no secret is set, send "none" or tap skip.'
)
PROMPT_DIRECTORY = (
    "📁 Send the download directory (optional):\n\n"
    "Tap skip to use the Aria2 default directory."
)
CANCELLED = "❌ Setup cancelled."
TESTING = "🔄 Testing connection..."


def prompt_endpoint_text(existing: RemoteDaemonConfig | None) -> str:
    if existing is None:
        return PROMPT_ENDPOINT
    return f"Current configuration: {existing.endpoint}\n\n{PROMPT_ENDPOINT}"


def render_setup_reply(reply: SetupReply) -> tuple[str, InlineKeyboardMarkup | None] | None:
    """Text and keyboard for an outcome; None when there is nothing to say."""
    outcome = reply.outcome
    if outcome is SetupOutcome.PROMPT_ENDPOINT:
        return PROMPT_ENDPOINT, cancel_setup_keyboard()
    if outcome is SetupOutcome.INVALID_ENDPOINT:
        return INVALID_ENDPOINT, cancel_setup_keyboard()
    if outcome is SetupOutcome.PROMPT_SECRET:
        return PROMPT_SECRET, skip_keyboard("⏭ Skip (no secret)", SKIP_SECRET)
    if outcome is SetupOutcome.PROMPT_DIRECTORY:
        return PROMPT_DIRECTORY, skip_keyboard("⏭ Skip (default directory)", SKIP_DIR)
    if outcome is SetupOutcome.CANCELLED:
        return CANCELLED, None
    if outcome is SetupOutcome.COMPLETED and reply.config is not None:
        return (
            "✅ Configuration saved!\n\n"
            f"📡 Aria2 version: {reply.version}\n"
            f"🔗 RPC address: {reply.config.endpoint}\n"
            f"📁 Download directory: {reply.config.directory or 'default'}\n\n"
            'Send a link and tap "Send to Aria2" to download it.'
        ), None
    if outcome is SetupOutcome.FAILED:
        return (
            "❌ Connection test failed\n\n"
            f"Error: {reply.reason}\n\n"
            "Please check:\n"
            "1. Aria2 is running\n"
            "2. The RPC address is correct\n"
            "3. The secret is correct\n\n"
            "Use /set_aria2 to configure again."
        ), None
    return None
