from __future__ import annotations

import datetime
import re
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError

from secret_friend.db import Event, EventGroup, EventPerson, repo
from secret_friend.db.repo import EventUpdate, GroupFilter, PersonFilter, PersonUpdate
from secret_friend.services.codec import TokenCodec
from secret_friend.services.draw_flow import clear_draw, run_draw

_CPF_PUNCTUATION = re.compile(r"[.\-\s]")


class EventError(RuntimeError):
    pass


class RecipientNotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class PersonEntry:
    id: int
    name: str
    group_name: str


@dataclass(frozen=True)
class Reveal:
    person_name: str
    recipient_name: str


def normalize_cpf(cpf: str) -> str:
    return _CPF_PUNCTUATION.sub("", cpf or "")


def _require_text(value: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise EventError(f"{label} is required.")
    return value


async def _require_event(session, event_id: int) -> Event:
    event = await repo.get_event(session, event_id)
    if not event:
        raise EventError(f"Event {event_id} does not exist.")
    return event


def _require_editable(event: Event) -> None:
    if event.status:
        raise EventError("This event has already been drawn. Undo the draw before editing it.")


async def create_event(session, title: str, description: str, grouped: bool) -> Event:
    event = await repo.create_event(
        session,
        _require_text(title, "Title"),
        _require_text(description, "Description"),
        grouped,
    )
    logger.bind(event_id=event.id, grouped=grouped).info("Event created")
    return event


async def update_event(
    session,
    event_id: int,
    title: Optional[str] = None,
    description: Optional[str] = None,
    grouped: Optional[bool] = None,
) -> Event:
    event = await _require_event(session, event_id)
    _require_editable(event)
    data = EventUpdate(
        title=_require_text(title, "Title") if title is not None else None,
        description=_require_text(description, "Description") if description is not None else None,
        grouped=grouped,
    )
    if not data.values():
        raise EventError("Nothing to change.")
    await repo.update_events(session, event_id, data)
    logger.bind(event_id=event_id, fields=sorted(data.values())).info("Event updated")
    return event


async def remove_event(session, event_id: int) -> bool:
    event = await repo.get_event(session, event_id)
    if not event:
        return False
    _require_editable(event)
    removed = await repo.delete_event(session, event_id)
    logger.bind(event_id=event_id).info("Event removed")
    return removed


async def add_group(session, event_id: int, name: str) -> EventGroup:
    event = await _require_event(session, event_id)
    _require_editable(event)
    return await repo.create_group(session, event.id, _require_text(name, "Group name"))


async def list_groups(session, event_id: int) -> List[EventGroup]:
    await _require_event(session, event_id)
    return await repo.list_groups(session, event_id)


async def rename_group(session, event_id: int, group_id: int, name: str) -> bool:
    event = await _require_event(session, event_id)
    _require_editable(event)
    name = _require_text(name, "Group name")
    return await repo.rename_group(session, GroupFilter(id=group_id, event_id=event_id), name)


async def remove_group(session, event_id: int, group_id: int) -> bool:
    event = await _require_event(session, event_id)
    _require_editable(event)
    filters = GroupFilter(id=group_id, event_id=event_id)
    if not await repo.get_group(session, filters):
        return False
    if await repo.count_group_people(session, event_id, group_id):
        raise EventError("Remove the people of this group first.")
    return await repo.delete_group(session, filters)


async def add_person(session, event_id: int, group_id: int, name: str, cpf: str) -> EventPerson:
    event = await _require_event(session, event_id)
    _require_editable(event)

    group = await repo.get_group(session, GroupFilter(id=group_id, event_id=event_id))
    if not group:
        raise EventError(f"Group {group_id} does not belong to event {event_id}.")

    cpf = _require_text(normalize_cpf(cpf), "CPF")
    if await repo.find_person(session, PersonFilter(event_id=event_id, cpf=cpf)):
        raise EventError("Someone with this CPF is already in the event.")

    try:
        return await repo.create_person(session, event_id, group.id, _require_text(name, "Name"), cpf)
    except IntegrityError as exc:
        raise EventError("Someone with this CPF is already in the event.") from exc


async def update_person(
    session,
    event_id: int,
    person_id: int,
    name: Optional[str] = None,
    cpf: Optional[str] = None,
) -> bool:
    event = await _require_event(session, event_id)
    _require_editable(event)
    data = PersonUpdate(
        name=_require_text(name, "Name") if name is not None else None,
        cpf=_require_text(normalize_cpf(cpf), "CPF") if cpf is not None else None,
    )
    if not data.values():
        raise EventError("Nothing to change.")
    try:
        updated = await repo.update_people(session, PersonFilter(event_id=event_id, id=person_id), data)
    except IntegrityError as exc:
        raise EventError("Someone with this CPF is already in the event.") from exc
    return updated > 0


async def remove_person(session, event_id: int, person_id: int) -> bool:
    event = await _require_event(session, event_id)
    _require_editable(event)
    return await repo.delete_people(session, PersonFilter(event_id=event_id, id=person_id)) > 0


async def list_people(session, event_id: int) -> List[PersonEntry]:
    await _require_event(session, event_id)
    groups = {group.id: group.name for group in await repo.list_groups(session, event_id)}
    return [
        PersonEntry(id=person.id, name=person.name, group_name=groups.get(person.group_id, "?"))
        for person in await repo.list_people(session, PersonFilter(event_id=event_id))
    ]


async def set_event_status(
    session,
    event_id: int,
    status: bool,
    codec: TokenCodec,
    seed: Optional[int] = None,
) -> bool:
    # callers hold draw_lock(event_id) around the whole session
    event = await _require_event(session, event_id)

    if status:
        if event.status:
            return True
        if not await run_draw(session, event_id, codec, seed=seed):
            return False
        repo.update_event_status(session, event, True, drawn_at=datetime.datetime.now(datetime.timezone.utc))
        return True

    await clear_draw(session, event_id)
    repo.update_event_status(session, event, False, drawn_at=None)
    return True


async def reveal_recipient(session, event_id: int, cpf: str, codec: TokenCodec) -> Optional[Reveal]:
    cpf = normalize_cpf(cpf)
    if not cpf:
        raise EventError("CPF is required.")

    person = await repo.find_person(session, PersonFilter(event_id=event_id, cpf=cpf))
    if not person or not person.recipient_token:
        return None

    recipient_id = codec.decode(person.recipient_token)
    recipient = await repo.find_person(session, PersonFilter(event_id=event_id, id=recipient_id))
    if not recipient:
        raise RecipientNotFoundError(
            f"Recipient of person {person.id} is no longer part of event {event_id}."
        )
    return Reveal(person_name=person.name, recipient_name=recipient.name)
