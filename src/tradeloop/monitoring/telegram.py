"""Telegram alert sink and operator command channel."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Callable, Coroutine

import structlog
from telegram import Bot, Message, Update

logger = structlog.get_logger(__name__)

# Type alias for command callbacks
CommandCallback = Callable[[], Coroutine[Any, Any, str]]

# Telegram rejects messages longer than this
MAX_MESSAGE_LENGTH = 4096


def parse_command(text: str) -> str | None:
    """Return the lower-cased command name of a "/cmd" or "/cmd@bot" message, else None."""
    text = text.strip()
    if not text.startswith("/"):
        return None
    head, _, _ = text[1:].partition(" ")
    return head.split("@", 1)[0].lower()


class TelegramNotifier:
    """Sends critical alerts to one chat and answers operator commands from it."""

    def __init__(self, bot_token: str, chat_id: str):
        self._bot_token = bot_token
        self._chat_id = str(chat_id)
        self._bot: Bot | None = None
        self._commands: dict[str, CommandCallback] = {}
        self._polling_task: asyncio.Task | None = None
        self._polling = False
        self._last_update_id = 0

    @property
    def is_configured(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    def _get_bot(self) -> Bot:
        if self._bot is None:
            self._bot = Bot(token=self._bot_token)
        return self._bot

    # ------------------------------------------------------------------
    # Outgoing
    # ------------------------------------------------------------------

    async def send_message(self, message: str) -> bool:
        """Send a message to the configured chat. Returns False instead of raising."""
        if not self.is_configured:
            logger.debug("telegram_not_configured")
            return False
        if len(message) > MAX_MESSAGE_LENGTH:
            message = message[: MAX_MESSAGE_LENGTH - 3] + "..."
        try:
            await self._get_bot().send_message(chat_id=self._chat_id, text=message)
        except Exception as e:
            logger.error("telegram_send_failed", error=str(e))
            return False
        return True

    async def send(self, subject: str, body: str) -> bool:
        return await self.send_message(f"{subject}\n\n{body}")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def register_command(self, command: str, callback: CommandCallback) -> None:
        """Register ``callback`` for "/command". The callback's return value is the reply."""
        self._commands[command.lower()] = callback

    async def start_command_polling(self, interval: float = 2.0) -> None:
        if self._polling or not self.is_configured:
            return
        self._polling = True
        self._polling_task = asyncio.ensure_future(self._poll_loop(interval))
        logger.info("telegram_command_polling_started", interval=interval)

    async def stop_command_polling(self) -> None:
        self._polling = False
        task, self._polling_task = self._polling_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("telegram_command_polling_stopped")

    async def _poll_loop(self, interval: float) -> None:
        while self._polling:
            try:
                await self._process_updates()
            except Exception:
                logger.warning("telegram_poll_error", exc_info=True)
            await asyncio.sleep(interval)

    async def _process_updates(self) -> None:
        try:
            updates = await self._get_bot().get_updates(
                offset=self._last_update_id + 1, timeout=1
            )
        except Exception:
            logger.debug("telegram_get_updates_error", exc_info=True)
            return

        for update in updates:
            self._last_update_id = update.update_id
            await self._handle_update(update)

    def _from_operator(self, message: Message) -> bool:
        chat_id = str(message.chat_id)
        if chat_id != self._chat_id:
            logger.debug("telegram_ignored_chat", chat_id=chat_id)
            return False
        return True

    async def _handle_update(self, update: Update) -> None:
        message = update.message
        if not message or not message.text or not self._from_operator(message):
            return
        command = parse_command(message.text)
        if command is None:
            return
        await self.send_message(await self._run_command(command))

    async def _run_command(self, command: str) -> str:
        callback = self._commands.get(command)
        if callback is None:
            available = ", ".join(f"/{name}" for name in sorted(self._commands))
            return f"Unknown command: /{command}\nAvailable: {available}"

        logger.info("telegram_command_received", command=command)
        try:
            return await callback()
        except Exception:
            logger.error("telegram_command_error", command=command, exc_info=True)
            return f"Error executing /{command}"
