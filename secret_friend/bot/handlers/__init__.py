from aiogram import Router

from secret_friend.bot.handlers import admin, reveal, start

router = Router()
router.include_router(start.router)
router.include_router(admin.router)
router.include_router(reveal.router)
