#!/usr/bin/env python3
"""
Start the group guard bot.

Usage:
    python start.py
"""

import sys
from pathlib import Path
import asyncio

from loguru import logger
from pydantic import ValidationError

from config.settings import Settings
from groupguard.app import BotApp

project_root = Path(__file__).parent


def setup_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)
    logger.add(settings.LOG_FILE, level="DEBUG", rotation="10 MB", retention=1)


def main():
    """Load settings, configure logging and run the bot."""
    try:
        settings = Settings()
    except ValidationError as e:
        logger.critical(f"❌ Invalid configuration:\n{e}")
        logger.info("💡 Create a .env file based on env.example or set the variables in the environment")
        sys.exit(1)

    setup_logging(settings)
    logger.info("🚀 Starting the group guard bot...")
    logger.info("📋 Press Ctrl+C to stop")

    try:
        asyncio.run(BotApp(settings).run())
    except (KeyboardInterrupt, SystemExit):
        logger.info("✅ Bot stopped.")
    except Exception as e:
        logger.opt(exception=e).critical(f"💥 Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    logger.info(f"Running on Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    if sys.version_info < (3, 10):
        logger.critical("Python 3.10 or newer is required.")
        sys.exit(1)
    main()
