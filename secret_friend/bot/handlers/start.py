from aiogram import Router, types
from aiogram.filters import Command, CommandStart

from secret_friend.bot.utils import SLOW_DOWN, check_rate_limit, is_admin
from secret_friend.core.config import Settings

router = Router()

PARTICIPANT_HELP = (
    "Hello! I run secret friend draws.\n\n"
    "Once your organizer has run the draw, send me\n"
    "<code>/reveal EVENT_ID YOUR_CPF</code>\n"
    "in this private chat to find out who you are giving a gift to."
)

ORGANIZER_HELP = (
    "\n\nOrganizer commands:\n"
    "/newevent title | description | grouped (yes/no)\n"
    "/events\n"
    "/editevent EVENT_ID title | description | grouped\n"
    "/removeevent EVENT_ID\n"
    "/addgroup EVENT_ID name\n"
    "/groups EVENT_ID\n"
    "/renamegroup EVENT_ID GROUP_ID name\n"
    "/removegroup EVENT_ID GROUP_ID\n"
    "/addperson EVENT_ID GROUP_ID CPF name\n"
    "/editperson EVENT_ID PERSON_ID CPF [name]\n"
    "/removeperson EVENT_ID PERSON_ID\n"
    "/people EVENT_ID\n"
    "/draw EVENT_ID\n"
    "/undraw EVENT_ID"
)


@router.message(CommandStart())
@router.message(Command("help"))
async def command_start_handler(message: types.Message, settings: Settings) -> None:
    if not check_rate_limit(message.from_user.id, "start"):
        await message.answer(SLOW_DOWN)
        return

    text = PARTICIPANT_HELP
    if is_admin(settings, message.from_user.id):
        text += ORGANIZER_HELP
    await message.answer(text)
