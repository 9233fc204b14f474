"""Main application class that wires and runs the bot."""

from typing import Optional

from aiogram import Bot, Dispatcher
from loguru import logger

from config.settings import Settings
from groupguard.database.manager import DatabaseManager
from groupguard.dispatcher_setup import setup_dispatcher
from groupguard.services.event_router import EventRouter
from groupguard.services.gateway import TelegramGateway
from groupguard.services.pending_verifications import PendingVerificationRegistry
from groupguard.webhook import run_webhook


class BotApp:
    """
    Builds every component of the bot (settings, database, gateway,
    verification registry, dispatcher) and runs polling or the webhook server.
    """

    ALLOWED_UPDATES = ["message", "chat_member", "my_chat_member"]

    def __init__(self, settings: Settings):
        self.settings = settings
        self.bot: Optional[Bot] = None
        self.dp: Optional[Dispatcher] = None
        self.db_manager: Optional[DatabaseManager] = None
        self.registry = PendingVerificationRegistry()
        self.event_router: Optional[EventRouter] = None

    async def _setup_bot_and_dispatcher(self):
        self.bot = Bot(token=self.settings.get_bot_token())
        self.dp = Dispatcher()
        logger.info("Bot and dispatcher created.")

    async def _setup_database(self):
        """Prepare the schema. The bot cannot run without it, so errors propagate."""
        self.db_manager = DatabaseManager(self.settings.database_path)
        await self.db_manager.init_database()

    async def _setup_dispatcher(self):
        self.event_router = EventRouter(
            group_settings=self.db_manager.group_settings,
            gateway=TelegramGateway(self.bot),
            registry=self.registry,
            settings=self.settings,
        )
        setup_dispatcher(
            dp=self.dp,
            db_manager=self.db_manager,
            event_router=self.event_router,
            settings=self.settings,
        )

    async def on_startup(self):
        me = await self.bot.get_me()
        logger.info(f"🚀 Bot @{me.username} started. Command prefix: '{self.settings.COMMAND_PREFIX}'")

    async def on_shutdown(self):
        """Release every resource. In-flight password verifications are dropped."""
        logger.info("Stopping the bot...")
        if len(self.registry):
            logger.warning(f"⚠️ Dropping {len(self.registry)} pending password verification(s)")
        self.registry.clear()
        if self.db_manager:
            await self.db_manager.close()
        if self.bot:
            await self.bot.session.close()
        logger.info("All resources released. Bot stopped.")

    async def run(self):
        """Main entry point."""
        await self._setup_bot_and_dispatcher()
        try:
            await self._setup_database()
        except Exception:
            logger.critical("Could not prepare the settings database, exiting.")
            await self.bot.session.close()
            raise

        try:
            await self._setup_dispatcher()
            self.dp.startup.register(self.on_startup)

            logger.debug(f"Update types: {self.ALLOWED_UPDATES}")
            if self.settings.USE_WEBHOOK:
                await run_webhook(self.bot, self.dp, self.settings, self.ALLOWED_UPDATES)
            else:
                await self.bot.delete_webhook(drop_pending_updates=False)
                await self.dp.start_polling(self.bot, allowed_updates=self.ALLOWED_UPDATES)
        finally:
            await self.on_shutdown()
