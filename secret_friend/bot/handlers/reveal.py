from __future__ import annotations

import html

from aiogram import F, Router, types
from aiogram.filters import Command, CommandObject
from loguru import logger

from secret_friend.bot.utils import GENERIC_ERROR, SLOW_DOWN, check_rate_limit, log_handler_exception, parse_ids
from secret_friend.db import get_session
from secret_friend.services import events
from secret_friend.services.codec import DecodeError, TokenCodec

router = Router()


@router.message(Command("reveal"), F.chat.type == "private")
async def reveal_handler(message: types.Message, command: CommandObject, codec: TokenCodec) -> None:
    if not check_rate_limit(message.from_user.id, "reveal"):
        await message.answer(SLOW_DOWN)
        return

    ids = parse_ids(command.args, 1)
    parts = (command.args or "").split()
    if not ids or len(parts) != 2:
        await message.answer("Usage: /reveal EVENT_ID YOUR_CPF")
        return
    event_id, cpf = ids[0], parts[1]

    try:
        async with get_session() as session:
            result = await events.reveal_recipient(session, event_id, cpf, codec)
    except events.EventError as exc:
        await message.answer(str(exc))
        return
    except (DecodeError, events.RecipientNotFoundError) as exc:
        logger.bind(event_id=event_id, user_id=message.from_user.id).error(
            "Stored match is unusable: {error}", error=str(exc)
        )
        await message.answer("Your match could not be read. Please contact the organizer.")
        return
    except Exception as exc:
        log_handler_exception("reveal", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)
        return

    if result is None:
        await message.answer("No match found for this CPF. Has the draw happened yet?")
        return

    await message.answer(
        f"Hi {html.escape(result.person_name)}! "
        f"Your secret friend is <b>{html.escape(result.recipient_name)}</b>."
    )


@router.message(Command("reveal"))
async def reveal_in_group_handler(message: types.Message) -> None:
    await message.answer("Please send /reveal to me in a private chat.")
