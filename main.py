from __future__ import annotations

import uvloop
from aiogram import Bot, Dispatcher
from aiogram.types import BotCommand, BotCommandScopeDefault
from loguru import logger

from secret_friend.bot import create_bot, create_dispatcher
from secret_friend.core.config import Settings, load_settings
from secret_friend.core.logging import setup_logging
from secret_friend.db import init_engine


USERS_COMMANDS: dict[str, str] = {
    "start": "start",
    "help": "show commands",
    "reveal": "reveal your secret friend",
}


async def set_default_commands(bot: Bot) -> None:
    await bot.set_my_commands(
        [
            BotCommand(command=command, description=description)
            for command, description in USERS_COMMANDS.items()
        ],
        scope=BotCommandScopeDefault(),
    )


async def on_startup(bot: Bot, settings: Settings) -> None:
    logger.info("bot starting...")

    await set_default_commands(bot)

    bot_info = await bot.get_me()

    logger.info("Name       - {name}", name=bot_info.full_name)
    logger.info("Username   - @{username}", username=bot_info.username)
    logger.info("Organizers - {count}", count=len(settings.admin_ids))

    logger.info("bot started")


async def on_shutdown(bot: Bot, dispatcher: Dispatcher) -> None:
    logger.info("bot stopping...")

    await dispatcher.storage.close()
    await bot.session.close()

    logger.info("bot stopped")


async def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_path)
    engine = init_engine(settings.database_url)

    bot = create_bot(settings)
    dp = create_dispatcher(settings)
    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await engine.dispose()


if __name__ == "__main__":
    uvloop.run(main())
