from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from secret_friend.bot.handlers import router as handlers_router
from secret_friend.core.config import Settings
from secret_friend.services.codec import TokenCodec


def create_bot(settings: Settings) -> Bot:
    return Bot(token=settings.bot_token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))


def create_dispatcher(settings: Settings) -> Dispatcher:
    # settings and codec reach handlers as keyword arguments
    dp = Dispatcher(settings=settings, codec=TokenCodec(settings.match_secret))
    dp.include_router(handlers_router)
    return dp
