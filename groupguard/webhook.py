"""
Webhook transport: an aiohttp server feeding Telegram updates to the dispatcher.
"""
import asyncio

from aiohttp import web
from aiogram import Bot, Dispatcher
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application
from loguru import logger

from config.settings import Settings


async def health_check(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "service": "groupguard"})


def create_app(bot: Bot, dp: Dispatcher, settings: Settings) -> web.Application:
    """Build the web application with the webhook route and a health check."""
    app = web.Application()

    SimpleRequestHandler(
        dispatcher=dp,
        bot=bot,
        secret_token=settings.get_webhook_secret(),
    ).register(app, path=settings.WEBHOOK_PATH)
    setup_application(app, dp, bot=bot)

    app.router.add_get("/health", health_check)
    return app


async def setup_webhook(bot: Bot, settings: Settings, allowed_updates: list[str]) -> None:
    """Register the public URL with Telegram."""
    if not settings.WEBHOOK_URL:
        logger.error("❌ WEBHOOK_URL is not set. Check the .env file.")
        raise ValueError("WEBHOOK_URL is not set")

    await bot.set_webhook(
        url=settings.WEBHOOK_URL,
        secret_token=settings.get_webhook_secret(),
        allowed_updates=allowed_updates,
        drop_pending_updates=False,
    )
    webhook_info = await bot.get_webhook_info()
    logger.info(f"✅ Webhook set: {webhook_info.url} (pending updates: {webhook_info.pending_update_count})")
    if webhook_info.last_error_message:
        logger.warning(f"⚠️ Last webhook error: {webhook_info.last_error_message}")


async def run_webhook(bot: Bot, dp: Dispatcher, settings: Settings, allowed_updates: list[str]) -> None:
    """Serve the webhook until cancelled."""
    app = create_app(bot, dp, settings)
    await setup_webhook(bot, settings, allowed_updates)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=settings.WEBHOOK_HOST, port=settings.WEBHOOK_PORT)
    await site.start()
    logger.info(f"🚀 Webhook server listening on {settings.WEBHOOK_HOST}:{settings.WEBHOOK_PORT}")

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
