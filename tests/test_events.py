import pytest

from secret_friend.db import repo
from secret_friend.db.repo import PersonFilter
from secret_friend.services import events
from secret_friend.services.codec import DecodeError


async def build_event(session, grouped=True):
    event = await events.create_event(session, "Christmas", "Family draw", grouped)
    kids = await events.add_group(session, event.id, "Kids")
    adults = await events.add_group(session, event.id, "Adults")
    await events.add_person(session, event.id, kids.id, "Ana", "111.222.333-44")
    await events.add_person(session, event.id, kids.id, "Bruno", "22222222222")
    await events.add_person(session, event.id, adults.id, "Carla", "33333333333")
    await events.add_person(session, event.id, adults.id, "Davi", "44444444444")
    await session.commit()
    return event.id, kids.id, adults.id


def test_normalize_cpf():
    assert events.normalize_cpf("123.456.789-09") == "12345678909"
    assert events.normalize_cpf(" 123 456 ") == "123456"


@pytest.mark.asyncio
async def test_create_event_requires_title(session):
    with pytest.raises(events.EventError):
        await events.create_event(session, "  ", "Description", False)


@pytest.mark.asyncio
async def test_add_person_normalizes_cpf(session):
    event_id, _, _ = await build_event(session)
    person = await repo.find_person(session, PersonFilter(event_id=event_id, cpf="11122233344"))
    assert person is not None
    assert person.name == "Ana"
    assert person.recipient_token is None


@pytest.mark.asyncio
async def test_add_person_rejects_duplicate_cpf(session):
    event_id, kids_id, _ = await build_event(session)
    with pytest.raises(events.EventError):
        await events.add_person(session, event_id, kids_id, "Ana again", "11122233344")


@pytest.mark.asyncio
async def test_add_person_rejects_foreign_group(session):
    event_id, kids_id, _ = await build_event(session)
    other = await events.create_event(session, "Other", "Another draw", False)
    with pytest.raises(events.EventError):
        await events.add_person(session, other.id, kids_id, "Eva", "55555555555")


@pytest.mark.asyncio
async def test_add_group_unknown_event(session):
    with pytest.raises(events.EventError):
        await events.add_group(session, 999, "Nobody")


@pytest.mark.asyncio
async def test_list_people_shows_names_and_groups(session):
    event_id, _, _ = await build_event(session)
    entries = await events.list_people(session, event_id)
    assert [(entry.name, entry.group_name) for entry in entries] == [
        ("Ana", "Kids"),
        ("Bruno", "Kids"),
        ("Carla", "Adults"),
        ("Davi", "Adults"),
    ]


@pytest.mark.asyncio
async def test_activate_runs_draw_and_reveal(session, codec):
    event_id, _, _ = await build_event(session)

    assert await events.set_event_status(session, event_id, True, codec, seed=8)
    await session.commit()

    event = await repo.get_event(session, event_id)
    assert event.status is True
    assert event.drawn_at is not None

    reveal = await events.reveal_recipient(session, event_id, "111.222.333-44", codec)
    assert reveal.person_name == "Ana"
    assert reveal.recipient_name in {"Carla", "Davi"}


@pytest.mark.asyncio
async def test_activate_twice_keeps_first_draw(session, codec):
    event_id, _, _ = await build_event(session)
    assert await events.set_event_status(session, event_id, True, codec, seed=1)
    await session.commit()
    person = await repo.find_person(session, PersonFilter(event_id=event_id, cpf="22222222222"))
    token = person.recipient_token

    assert await events.set_event_status(session, event_id, True, codec, seed=2)
    await session.commit()
    person = await repo.find_person(session, PersonFilter(event_id=event_id, cpf="22222222222"))
    assert person.recipient_token == token


@pytest.mark.asyncio
async def test_failed_draw_leaves_event_inactive(session, codec):
    event = await events.create_event(session, "Solo", "Only one group", True)
    group = await events.add_group(session, event.id, "Everyone")
    await events.add_person(session, event.id, group.id, "Ana", "1")
    await events.add_person(session, event.id, group.id, "Bruno", "2")
    await session.commit()

    assert not await events.set_event_status(session, event.id, True, codec)
    await session.commit()

    stored = await repo.get_event(session, event.id)
    assert stored.status is False
    assert await events.reveal_recipient(session, event.id, "1", codec) is None


@pytest.mark.asyncio
async def test_active_event_cannot_be_edited(session, codec):
    event_id, kids_id, _ = await build_event(session)
    assert await events.set_event_status(session, event_id, True, codec)
    await session.commit()

    with pytest.raises(events.EventError):
        await events.add_person(session, event_id, kids_id, "Eva", "55555555555")
    with pytest.raises(events.EventError):
        await events.add_group(session, event_id, "Late")


@pytest.mark.asyncio
async def test_deactivate_clears_draw(session, codec):
    event_id, _, _ = await build_event(session)
    assert await events.set_event_status(session, event_id, True, codec)
    await session.commit()

    assert await events.set_event_status(session, event_id, False, codec)
    await session.commit()

    event = await repo.get_event(session, event_id)
    assert event.status is False
    assert event.drawn_at is None
    assert await events.reveal_recipient(session, event_id, "33333333333", codec) is None


@pytest.mark.asyncio
async def test_reveal_unknown_cpf(session, codec):
    event_id, _, _ = await build_event(session)
    assert await events.reveal_recipient(session, event_id, "00000000000", codec) is None


@pytest.mark.asyncio
async def test_reveal_requires_cpf(session, codec):
    event_id, _, _ = await build_event(session)
    with pytest.raises(events.EventError):
        await events.reveal_recipient(session, event_id, " .- ", codec)


@pytest.mark.asyncio
async def test_reveal_corrupt_token(session, codec):
    event_id, _, _ = await build_event(session)
    person = await repo.find_person(session, PersonFilter(event_id=event_id, cpf="22222222222"))
    await repo.write_recipient_token(session, person.id, event_id, "not-a-real-token")
    await session.commit()

    with pytest.raises(DecodeError):
        await events.reveal_recipient(session, event_id, "22222222222", codec)


@pytest.mark.asyncio
async def test_reveal_recipient_missing(session, codec):
    event_id, _, _ = await build_event(session)
    person = await repo.find_person(session, PersonFilter(event_id=event_id, cpf="22222222222"))
    await repo.write_recipient_token(session, person.id, event_id, codec.encode(9999))
    await session.commit()

    with pytest.raises(events.RecipientNotFoundError):
        await events.reveal_recipient(session, event_id, "22222222222", codec)


@pytest.mark.asyncio
async def test_update_and_remove_person(session):
    event_id, kids_id, _ = await build_event(session)
    person = await repo.find_person(session, PersonFilter(event_id=event_id, cpf="22222222222"))

    assert await events.update_person(session, event_id, person.id, name="Bruna", cpf="222.222.222-20")
    await session.commit()
    updated = await repo.find_person(session, PersonFilter(event_id=event_id, id=person.id))
    assert updated.name == "Bruna"
    assert updated.cpf == "22222222220"

    assert await events.remove_person(session, event_id, person.id)
    assert not await events.remove_person(session, event_id, person.id)


@pytest.mark.asyncio
async def test_remove_group_requires_empty_group(session):
    event_id, kids_id, _ = await build_event(session)
    with pytest.raises(events.EventError):
        await events.remove_group(session, event_id, kids_id)

    empty = await events.add_group(session, event_id, "Empty")
    assert await events.remove_group(session, event_id, empty.id)


@pytest.mark.asyncio
async def test_remove_event(session):
    event_id, _, _ = await build_event(session)
    assert await events.remove_event(session, event_id)
    await session.commit()
    assert await repo.get_event(session, event_id) is None
    assert await repo.list_groups(session, event_id) == []


@pytest.mark.asyncio
async def test_remove_group_of_other_event(session):
    event_id, kids_id, _ = await build_event(session)
    other = await events.create_event(session, "Other", "Another draw", False)
    await session.commit()

    assert not await events.remove_group(session, other.id, kids_id)
    groups = await events.list_groups(session, event_id)
    assert kids_id in [group.id for group in groups]


@pytest.mark.asyncio
async def test_update_event(session):
    event_id, _, _ = await build_event(session)

    await events.update_event(session, event_id, title="New Year", grouped=False)
    await session.commit()
    session.expire_all()

    event = await repo.get_event(session, event_id)
    assert event.title == "New Year"
    assert event.description == "Family draw"
    assert event.grouped is False


@pytest.mark.asyncio
async def test_update_event_needs_changes(session):
    event_id, _, _ = await build_event(session)
    with pytest.raises(events.EventError):
        await events.update_event(session, event_id)
    with pytest.raises(events.EventError):
        await events.update_event(session, event_id, title="   ")


@pytest.mark.asyncio
async def test_list_and_rename_groups(session):
    event_id, kids_id, adults_id = await build_event(session)

    assert await events.rename_group(session, event_id, kids_id, "Children")
    await session.commit()
    session.expire_all()

    groups = await events.list_groups(session, event_id)
    assert [(group.id, group.name) for group in groups] == [(kids_id, "Children"), (adults_id, "Adults")]

    other = await events.create_event(session, "Other", "Another draw", False)
    assert not await events.rename_group(session, other.id, kids_id, "Stolen")


@pytest.mark.asyncio
async def test_list_groups_unknown_event(session):
    with pytest.raises(events.EventError):
        await events.list_groups(session, 999)


@pytest.mark.asyncio
async def test_update_person_needs_changes(session):
    event_id, _, _ = await build_event(session)
    person = await repo.find_person(session, PersonFilter(event_id=event_id, cpf="22222222222"))
    with pytest.raises(events.EventError):
        await events.update_person(session, event_id, person.id)
    with pytest.raises(events.EventError):
        await events.update_person(session, event_id, person.id, name=" ")


@pytest.mark.asyncio
async def test_drawn_event_blocks_every_edit(session, codec):
    event_id, kids_id, adults_id = await build_event(session)
    person = await repo.find_person(session, PersonFilter(event_id=event_id, cpf="22222222222"))
    assert await events.set_event_status(session, event_id, True, codec)
    await session.commit()

    with pytest.raises(events.EventError):
        await events.update_event(session, event_id, title="Late change")
    with pytest.raises(events.EventError):
        await events.rename_group(session, event_id, kids_id, "Children")
    with pytest.raises(events.EventError):
        await events.remove_group(session, event_id, adults_id)
    with pytest.raises(events.EventError):
        await events.update_person(session, event_id, person.id, name="Bruna")
    with pytest.raises(events.EventError):
        await events.remove_person(session, event_id, person.id)
    with pytest.raises(events.EventError):
        await events.remove_event(session, event_id)


@pytest.mark.asyncio
async def test_remove_unknown_event(session):
    assert not await events.remove_event(session, 999)
