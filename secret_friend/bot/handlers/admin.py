from __future__ import annotations

import html

from aiogram import Router, types
from aiogram.filters import Command, CommandObject

from secret_friend.bot.utils import (
    ADMIN_ONLY,
    GENERIC_ERROR,
    SLOW_DOWN,
    check_rate_limit,
    is_admin,
    log_handler_exception,
    parse_flag,
    parse_ids,
)
from secret_friend.core.config import Settings
from secret_friend.db import get_session, repo
from secret_friend.services import events
from secret_friend.services.codec import TokenCodec
from secret_friend.services.draw_flow import draw_lock

router = Router()


async def _guard(message: types.Message, settings: Settings, action: str) -> bool:
    if not check_rate_limit(message.from_user.id, action):
        await message.answer(SLOW_DOWN)
        return False
    if not is_admin(settings, message.from_user.id):
        await message.answer(ADMIN_ONLY)
        return False
    return True


@router.message(Command("newevent"))
async def new_event_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "newevent"):
        return

    parts = [part.strip() for part in (command.args or "").split("|")]
    grouped = parse_flag(parts[2]) if len(parts) == 3 else None
    if grouped is None:
        await message.answer("Usage: /newevent Christmas 2026 | Office party | yes")
        return
    title, description = parts[0], parts[1]

    try:
        async with get_session() as session:
            event = await events.create_event(session, title, description, grouped)
            event_id = event.id
        await message.answer(f"Event {event_id} created. Add groups with /addgroup {event_id} NAME")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("newevent", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("events"))
async def list_events_handler(message: types.Message, settings: Settings) -> None:
    if not await _guard(message, settings, "events"):
        return

    try:
        async with get_session() as session:
            items = await repo.list_events(session)
            lines = [
                "{0}. {1}{2}{3}".format(
                    event.id,
                    html.escape(event.title),
                    " (grouped)" if event.grouped else "",
                    " ✓ drawn" if event.status else "",
                )
                for event in items
            ]
        await message.answer("Events:\n" + "\n".join(lines) if lines else "No events yet.")
    except Exception as exc:
        log_handler_exception("events", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("editevent"))
async def edit_event_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "editevent"):
        return

    ids = parse_ids(command.args, 1)
    rest = (command.args or "").split(maxsplit=1)
    parts = [part.strip() for part in rest[1].split("|")] if len(rest) == 2 else []
    if not ids or len(parts) != 3:
        await message.answer(
            "Usage: /editevent EVENT_ID title | description | grouped (yes/no)\n"
            "Leave a field empty to keep it."
        )
        return

    grouped = parse_flag(parts[2]) if parts[2] else None
    if parts[2] and grouped is None:
        await message.answer("Grouped must be yes or no.")
        return

    try:
        async with draw_lock(ids[0]):
            async with get_session() as session:
                await events.update_event(
                    session,
                    ids[0],
                    title=parts[0] or None,
                    description=parts[1] or None,
                    grouped=grouped,
                )
        await message.answer(f"Event {ids[0]} updated.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("editevent", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("removeevent"))
async def remove_event_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "removeevent"):
        return

    ids = parse_ids(command.args, 1)
    if not ids:
        await message.answer("Usage: /removeevent EVENT_ID")
        return

    try:
        async with draw_lock(ids[0]):
            async with get_session() as session:
                removed = await events.remove_event(session, ids[0])
        await message.answer("Event removed." if removed else "No such event.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("removeevent", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("groups"))
async def list_groups_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "groups"):
        return

    ids = parse_ids(command.args, 1)
    if not ids:
        await message.answer("Usage: /groups EVENT_ID")
        return

    try:
        async with get_session() as session:
            groups = await events.list_groups(session, ids[0])
            lines = [f"{group.id}. {html.escape(group.name)}" for group in groups]
        await message.answer("Groups:\n" + "\n".join(lines) if lines else "This event has no groups yet.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("groups", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("addgroup"))
async def add_group_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "addgroup"):
        return

    ids = parse_ids(command.args, 1)
    parts = (command.args or "").split(maxsplit=1)
    if not ids or len(parts) < 2:
        await message.answer("Usage: /addgroup EVENT_ID name")
        return

    try:
        async with draw_lock(ids[0]):
            async with get_session() as session:
                group = await events.add_group(session, ids[0], parts[1])
                group_id = group.id
        await message.answer(f"Group {group_id} added to event {ids[0]}.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("addgroup", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("renamegroup"))
async def rename_group_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "renamegroup"):
        return

    ids = parse_ids(command.args, 2)
    parts = (command.args or "").split(maxsplit=2)
    if not ids or len(parts) < 3:
        await message.answer("Usage: /renamegroup EVENT_ID GROUP_ID name")
        return

    try:
        async with draw_lock(ids[0]):
            async with get_session() as session:
                renamed = await events.rename_group(session, ids[0], ids[1], parts[2])
        await message.answer("Group renamed." if renamed else "No such group in this event.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("renamegroup", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("removegroup"))
async def remove_group_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "removegroup"):
        return

    ids = parse_ids(command.args, 2)
    if not ids:
        await message.answer("Usage: /removegroup EVENT_ID GROUP_ID")
        return

    try:
        async with draw_lock(ids[0]):
            async with get_session() as session:
                removed = await events.remove_group(session, ids[0], ids[1])
        await message.answer("Group removed." if removed else "No such group in this event.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("removegroup", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("addperson"))
async def add_person_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "addperson"):
        return

    ids = parse_ids(command.args, 2)
    parts = (command.args or "").split(maxsplit=3)
    if not ids or len(parts) < 4:
        await message.answer("Usage: /addperson EVENT_ID GROUP_ID CPF name")
        return
    event_id, group_id = ids
    cpf, name = parts[2], parts[3]

    try:
        async with draw_lock(event_id):
            async with get_session() as session:
                person = await events.add_person(session, event_id, group_id, name, cpf)
                person_id = person.id
        await message.answer(f"{html.escape(name)} added as person {person_id}.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("addperson", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("editperson"))
async def edit_person_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "editperson"):
        return

    ids = parse_ids(command.args, 2)
    parts = (command.args or "").split(maxsplit=3)
    if not ids or len(parts) < 3:
        await message.answer(
            "Usage: /editperson EVENT_ID PERSON_ID CPF [name]\n"
            "Use - as CPF to keep the current one."
        )
        return
    cpf = None if parts[2] == "-" else parts[2]
    name = parts[3] if len(parts) == 4 else None

    try:
        async with draw_lock(ids[0]):
            async with get_session() as session:
                updated = await events.update_person(session, ids[0], ids[1], name=name, cpf=cpf)
        await message.answer("Person updated." if updated else "No such person in this event.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("editperson", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("removeperson"))
async def remove_person_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "removeperson"):
        return

    ids = parse_ids(command.args, 2)
    if not ids:
        await message.answer("Usage: /removeperson EVENT_ID PERSON_ID")
        return

    try:
        async with draw_lock(ids[0]):
            async with get_session() as session:
                removed = await events.remove_person(session, ids[0], ids[1])
        await message.answer("Person removed." if removed else "No such person in this event.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("removeperson", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("people"))
async def list_people_handler(message: types.Message, command: CommandObject, settings: Settings) -> None:
    if not await _guard(message, settings, "people"):
        return

    ids = parse_ids(command.args, 1)
    if not ids:
        await message.answer("Usage: /people EVENT_ID")
        return

    try:
        async with get_session() as session:
            entries = await events.list_people(session, ids[0])
        if not entries:
            await message.answer("Nobody has been added to this event yet.")
            return
        lines = [
            f"{entry.id}. {html.escape(entry.name)} ({html.escape(entry.group_name)})"
            for entry in entries
        ]
        await message.answer("People:\n" + "\n".join(lines))
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("people", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


async def _toggle(
    message: types.Message,
    command: CommandObject,
    settings: Settings,
    codec: TokenCodec,
    status: bool,
) -> None:
    action = "draw" if status else "undraw"
    if not await _guard(message, settings, action):
        return

    ids = parse_ids(command.args, 1)
    if not ids:
        await message.answer(f"Usage: /{action} EVENT_ID")
        return
    event_id = ids[0]

    try:
        async with draw_lock(event_id):
            async with get_session() as session:
                done = await events.set_event_status(session, event_id, status, codec)
        if not status:
            await message.answer("Draw cleared. The event can be edited again.")
        elif done:
            await message.answer("Draw completed! Participants can now use /reveal.")
        else:
            await message.answer("The draw could not be completed. Check the groups and try again.")
    except events.EventError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception(action, message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("draw"))
async def draw_handler(
    message: types.Message, command: CommandObject, settings: Settings, codec: TokenCodec
) -> None:
    await _toggle(message, command, settings, codec, True)


@router.message(Command("undraw"))
async def undraw_handler(
    message: types.Message, command: CommandObject, settings: Settings, codec: TokenCodec
) -> None:
    await _toggle(message, command, settings, codec, False)
