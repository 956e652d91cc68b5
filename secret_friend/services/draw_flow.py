from __future__ import annotations

import asyncio
import random
import weakref
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from secret_friend.db import repo
from secret_friend.services.codec import TokenCodec
from secret_friend.services.draw import DrawFailure, Participant, draw

# entries vanish once no coroutine holds or waits on the lock
_draw_locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()


def draw_lock(event_id: int) -> asyncio.Lock:
    lock = _draw_locks.get(event_id)
    if lock is None:
        lock = _draw_locks[event_id] = asyncio.Lock()
    return lock


async def run_draw(
    session,
    event_id: int,
    codec: TokenCodec,
    seed: Optional[int] = None,
) -> bool:
    log = logger.bind(event_id=event_id)

    try:
        flags = await repo.fetch_event_flags(session, event_id)
        if flags is None:
            log.warning("Draw requested for an unknown event")
            return False
        rows = await repo.fetch_roster(session, event_id)
    except SQLAlchemyError:
        log.exception("Failed to load the roster")
        return False
    if rows is None:
        log.warning("Event disappeared before its roster was loaded")
        return False

    roster = tuple(Participant(id=person_id, group_id=group_id) for person_id, group_id in rows)

    if seed is None:
        seed = random.randint(1, 2**31 - 1)

    result = draw(roster, flags.grouped, seed=seed)
    if isinstance(result, DrawFailure):
        log.bind(seed=seed, attempts=result.attempts, participants=len(roster)).warning(
            "Draw failed: {reason}", reason=result.reason
        )
        return False

    try:
        for pairing in result:
            token = codec.encode(pairing.receiver_id)
            written = await repo.write_recipient_token(session, pairing.giver_id, event_id, token)
            if not written:
                log.bind(person_id=pairing.giver_id).error("Participant vanished while applying the draw")
                await session.rollback()
                return False
    except SQLAlchemyError:
        log.exception("Failed to store the draw")
        await session.rollback()
        return False

    log.bind(seed=seed, participants=len(roster)).info("Draw applied")
    return True


async def clear_draw(session, event_id: int) -> int:
    cleared = await repo.clear_recipient_tokens(session, event_id)
    logger.bind(event_id=event_id, cleared=cleared).info("Draw cleared")
    return cleared
