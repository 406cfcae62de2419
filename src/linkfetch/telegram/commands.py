"""Slash commands: greeting, help and aria2 configuration management."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram import BotCommand, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.error import TelegramError

from linkfetch.telegram.context import (
    CONFIRM_DELETE_CONFIG,
    TEST_ARIA2,
    cancel_setup_keyboard,
    get_state,
)
from linkfetch.telegram.setup_replies import prompt_endpoint_text

if TYPE_CHECKING:
    from telegram import Bot, Update
    from telegram.ext import ContextTypes

    from linkfetch.core.models import RemoteDaemonConfig

logger = logging.getLogger(__name__)

BOT_COMMANDS = (
    BotCommand("start", "Start using the bot"),
    BotCommand("help", "Show help"),
    BotCommand("set_aria2", "Configure Aria2"),
    BotCommand("aria2_config", "Show Aria2 configuration"),
    BotCommand("test_aria2", "Test Aria2 connection"),
    BotCommand("delete_config", "Delete configuration"),
)

NOT_CONFIGURED = "⚙️ You have not configured Aria2 yet.\n\nUse /set_aria2 to set it up."

HELP_TEXT = """📚 Commands

/start - Welcome message
/help - Show this help
/set_aria2 - Configure your Aria2 download server
/aria2_config - Show the current Aria2 configuration
/delete_config - Delete the Aria2 configuration
/test_aria2 - Test the Aria2 connection

📖 Usage

1️⃣ Send a link
Send a link from a supported platform and the bot resolves it.

2️⃣ Supported platforms
• X (Twitter) - videos and images
• Instagram - reels and posts
• YouTube - shorts and videos
• Facebook - video posts
• TikTok - short videos

You can also send photos, videos or files directly.

3️⃣ Aria2 downloads
Once Aria2 is configured, resolved media can be sent to it with one tap.

⚙️ Aria2 address examples:
• LAN: http://192.168.1.1:6800/jsonrpc
• Tunnel: http://your-domain.com:6800/jsonrpc
• OpenWrt: http://openwrt.lan:6800/jsonrpc

⚠️ Notes:
• Some videos cannot be resolved because of region restrictions
• Aria2 must have RPC enabled and reachable from the bot"""


def render_config(config: RemoteDaemonConfig) -> str:
    """Current configuration with the secret masked."""
    return (
        "⚙️ Current Aria2 configuration\n\n"
        f"🔗 RPC address: {config.endpoint}\n"
        f"🔑 Secret: {config.masked_secret or 'not set'}\n"
        f"📁 Download directory: {config.directory or 'default'}"
    )


def config_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton("🔄 Test connection", callback_data=TEST_ARIA2)],
            [
                InlineKeyboardButton(
                    "🗑 Delete configuration",
                    callback_data=CONFIRM_DELETE_CONFIG,
                ),
            ],
        ],
    )


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start."""
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None:
        return

    configured = await get_state(context).user_store.ahas(user.id)
    name = user.username or user.first_name or "there"
    status = (
        "✅ Aria2 is configured, resolved media can be sent to it directly."
        if configured
        else "⚙️ Configure Aria2 with /set_aria2 to send downloads with one tap."
    )
    await message.reply_text(
        f"👋 Hello, {name}!\n\n"
        "I resolve media links from these platforms:\n\n"
        "X (Twitter)\nTelegram\nYouTube\nFacebook\nInstagram\nTikTok\n\n"
        "📖 Send me a link and I will reply with the media; "
        "you can then send it to your Aria2 server.\n\n"
        f"{status}\n\n"
        "💡 Send /help for more commands.",
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help."""
    if update.effective_message is not None:
        await update.effective_message.reply_text(HELP_TEXT)


async def set_aria2_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /set_aria2: (re)start the setup dialog."""
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None:
        return

    state = get_state(context)
    existing = await state.user_store.aget(user.id)
    state.setup.begin(user.id)
    await message.reply_text(
        prompt_endpoint_text(existing),
        reply_markup=cancel_setup_keyboard(),
    )


async def aria2_config_command(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
) -> None:
    """Handle /aria2_config."""
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None:
        return

    config = await get_state(context).user_store.aget(user.id)
    if config is None:
        await message.reply_text(NOT_CONFIGURED)
        return
    await message.reply_text(render_config(config), reply_markup=config_keyboard())


async def delete_config_command(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
) -> None:
    """Handle /delete_config; deletes without confirmation."""
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None:
        return

    if await get_state(context).user_store.adelete(user.id):
        await message.reply_text("✅ Aria2 configuration deleted.")
    else:
        await message.reply_text("ℹ️ You have no saved configuration.")


async def test_aria2_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /test_aria2."""
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None:
        return

    state = get_state(context)
    config = await state.user_store.aget(user.id)
    if config is None:
        await message.reply_text(NOT_CONFIGURED)
        return

    await message.reply_text("🔄 Testing Aria2 connection...")
    result = await state.aria2.test_connection(config)
    if result.ok:
        await message.reply_text(
            "✅ Connected!\n\n"
            f"📡 Aria2 version: {result.version}\n"
            f"🔗 RPC address: {config.endpoint}",
        )
    else:
        await message.reply_text(
            "❌ Connection failed\n\n"
            f"Error: {result.reason}\n\n"
            "Check that Aria2 is running, or use /set_aria2 to configure again.",
        )


async def register_bot_commands(bot: Bot) -> None:
    """Publish the command menu; failures are logged and ignored."""
    try:
        await bot.set_my_commands(list(BOT_COMMANDS))
    except TelegramError as exc:
        logger.warning("Failed to set commands menu, continuing anyway: %s", exc)
        return
    logger.info("Bot commands registered")
