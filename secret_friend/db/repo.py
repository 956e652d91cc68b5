from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, delete, func, select, update

from secret_friend.db.models import Event, EventGroup, EventPerson


@dataclass(frozen=True)
class EventFlags:
    status: bool
    grouped: bool


@dataclass(frozen=True)
class EventUpdate:
    title: Optional[str] = None
    description: Optional[str] = None
    grouped: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.title is not None and not self.title.strip():
            raise ValueError("Event title must not be empty.")
        if self.description is not None and not self.description.strip():
            raise ValueError("Event description must not be empty.")

    def values(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        if self.title is not None:
            values["title"] = self.title.strip()
        if self.description is not None:
            values["description"] = self.description.strip()
        if self.grouped is not None:
            values["grouped"] = self.grouped
        return values


@dataclass(frozen=True)
class GroupFilter:
    id: int
    event_id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.id <= 0:
            raise ValueError("Group filter needs a positive id.")


@dataclass(frozen=True)
class PersonFilter:
    event_id: int
    id: Optional[int] = None
    group_id: Optional[int] = None
    cpf: Optional[str] = None

    def __post_init__(self) -> None:
        if self.event_id <= 0:
            raise ValueError("Person filter needs a positive event_id.")
        if self.cpf is not None and not self.cpf:
            raise ValueError("Person filter cpf must not be empty.")

    def clauses(self) -> List[Any]:
        clauses = [EventPerson.event_id == self.event_id]
        if self.id is not None:
            clauses.append(EventPerson.id == self.id)
        if self.group_id is not None:
            clauses.append(EventPerson.group_id == self.group_id)
        if self.cpf is not None:
            clauses.append(EventPerson.cpf == self.cpf)
        return clauses


@dataclass(frozen=True)
class PersonUpdate:
    name: Optional[str] = None
    cpf: Optional[str] = None

    def __post_init__(self) -> None:
        if self.name is not None and not self.name.strip():
            raise ValueError("Person name must not be empty.")
        if self.cpf is not None and not self.cpf:
            raise ValueError("Person cpf must not be empty.")

    def values(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        if self.name is not None:
            values["name"] = self.name.strip()
        if self.cpf is not None:
            values["cpf"] = self.cpf
        return values


async def get_event(session, event_id: int) -> Optional[Event]:
    return await session.get(Event, event_id)


async def list_events(session) -> List[Event]:
    return list((await session.scalars(select(Event).order_by(Event.id))).all())


async def create_event(session, title: str, description: str, grouped: bool) -> Event:
    event = Event(title=title, description=description, grouped=grouped, status=False)
    session.add(event)
    await session.flush()
    return event


def update_event_status(
    session,
    event: Event,
    status: bool,
    drawn_at: Optional[datetime.datetime] = None,
) -> None:
    event.status = status
    event.drawn_at = drawn_at


async def update_events(session, event_id: int, data: EventUpdate) -> int:
    values = data.values()
    if not values:
        return 0
    result = await session.execute(update(Event).where(Event.id == event_id).values(**values))
    return result.rowcount or 0


async def delete_event(session, event_id: int) -> bool:
    await session.execute(delete(EventPerson).where(EventPerson.event_id == event_id))
    await session.execute(delete(EventGroup).where(EventGroup.event_id == event_id))
    result = await session.execute(delete(Event).where(Event.id == event_id))
    return (result.rowcount or 0) > 0


async def fetch_event_flags(session, event_id: int) -> Optional[EventFlags]:
    row = (
        await session.execute(select(Event.status, Event.grouped).where(Event.id == event_id))
    ).first()
    if row is None:
        return None
    return EventFlags(status=bool(row.status), grouped=bool(row.grouped))


async def create_group(session, event_id: int, name: str) -> EventGroup:
    group = EventGroup(event_id=event_id, name=name)
    session.add(group)
    await session.flush()
    return group


async def get_group(session, filters: GroupFilter) -> Optional[EventGroup]:
    clauses = [EventGroup.id == filters.id]
    if filters.event_id is not None:
        clauses.append(EventGroup.event_id == filters.event_id)
    return await session.scalar(select(EventGroup).where(and_(*clauses)))


async def list_groups(session, event_id: int) -> List[EventGroup]:
    return list(
        (
            await session.scalars(
                select(EventGroup).where(EventGroup.event_id == event_id).order_by(EventGroup.id)
            )
        ).all()
    )


async def rename_group(session, filters: GroupFilter, name: str) -> bool:
    clauses = [EventGroup.id == filters.id]
    if filters.event_id is not None:
        clauses.append(EventGroup.event_id == filters.event_id)
    result = await session.execute(update(EventGroup).where(and_(*clauses)).values(name=name))
    return (result.rowcount or 0) > 0


async def delete_group(session, filters: GroupFilter) -> bool:
    clauses = [EventGroup.id == filters.id]
    if filters.event_id is not None:
        clauses.append(EventGroup.event_id == filters.event_id)
    result = await session.execute(delete(EventGroup).where(and_(*clauses)))
    return (result.rowcount or 0) > 0


async def count_group_people(session, event_id: int, group_id: int) -> int:
    return await session.scalar(
        select(func.count())
        .select_from(EventPerson)
        .where(and_(EventPerson.event_id == event_id, EventPerson.group_id == group_id))
    )


async def create_person(
    session,
    event_id: int,
    group_id: int,
    name: str,
    cpf: str,
) -> EventPerson:
    person = EventPerson(event_id=event_id, group_id=group_id, name=name, cpf=cpf)
    session.add(person)
    await session.flush()
    return person


async def find_person(session, filters: PersonFilter) -> Optional[EventPerson]:
    return await session.scalar(
        select(EventPerson).where(and_(*filters.clauses())).order_by(EventPerson.id).limit(1)
    )


async def list_people(session, filters: PersonFilter) -> List[EventPerson]:
    return list(
        (
            await session.scalars(
                select(EventPerson).where(and_(*filters.clauses())).order_by(EventPerson.id)
            )
        ).all()
    )


async def update_people(session, filters: PersonFilter, data: PersonUpdate) -> int:
    values = data.values()
    if not values:
        return 0
    result = await session.execute(update(EventPerson).where(and_(*filters.clauses())).values(**values))
    return result.rowcount or 0


async def delete_people(session, filters: PersonFilter) -> int:
    result = await session.execute(delete(EventPerson).where(and_(*filters.clauses())))
    return result.rowcount or 0


async def fetch_roster(session, event_id: int) -> Optional[List[Tuple[int, int]]]:
    if await session.scalar(select(Event.id).where(Event.id == event_id)) is None:
        return None
    rows = await session.execute(
        select(EventPerson.id, EventPerson.group_id)
        .where(EventPerson.event_id == event_id)
        .order_by(EventPerson.id)
    )
    return [(row.id, row.group_id) for row in rows]


async def write_recipient_token(
    session,
    person_id: int,
    event_id: int,
    token: str,
) -> bool:
    result = await session.execute(
        update(EventPerson)
        .where(and_(EventPerson.id == person_id, EventPerson.event_id == event_id))
        .values(recipient_token=token)
    )
    return (result.rowcount or 0) == 1


async def clear_recipient_tokens(session, event_id: int) -> int:
    result = await session.execute(
        update(EventPerson).where(EventPerson.event_id == event_id).values(recipient_token=None)
    )
    return result.rowcount or 0
