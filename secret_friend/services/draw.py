from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union


@dataclass(frozen=True)
class Participant:
    id: int
    group_id: int


@dataclass(frozen=True)
class Pairing:
    giver_id: int
    receiver_id: int


@dataclass(frozen=True)
class DrawFailure:
    reason: str
    attempts: int


DrawResult = Union[List[Pairing], DrawFailure]


def _attempt(
    roster: Sequence[Participant],
    group_exclusion: bool,
    rng: random.Random,
) -> Optional[List[Pairing]]:
    pool = [participant.id for participant in roster]
    group_of = {participant.id: participant.group_id for participant in roster}
    pairings: List[Pairing] = []

    for participant in roster:
        if group_exclusion:
            eligible = [pid for pid in pool if group_of[pid] != participant.group_id]
        else:
            eligible = pool
        candidates = [pid for pid in eligible if pid != participant.id]
        if not candidates:
            return None

        receiver_id = rng.choice(candidates)
        pairings.append(Pairing(giver_id=participant.id, receiver_id=receiver_id))
        pool.remove(receiver_id)

    return pairings


def draw(
    roster: Sequence[Participant],
    group_exclusion: bool,
    seed: Optional[int] = None,
) -> DrawResult:
    participants = list(roster)
    size = len(participants)

    if len({participant.id for participant in participants}) != size:
        raise ValueError("Roster contains duplicate participant ids.")

    if size < 2:
        return DrawFailure(reason="At least 2 participants are required.", attempts=0)

    if group_exclusion and len({participant.group_id for participant in participants}) < 2:
        return DrawFailure(reason="Every participant is in the same group.", attempts=0)

    rng = random.Random(seed)
    # a dead end restarts the whole attempt, no backtracking
    for _ in range(size):
        pairings = _attempt(participants, group_exclusion, rng)
        if pairings is not None:
            return pairings

    return DrawFailure(reason="No valid matching found within the attempt budget.", attempts=size)
