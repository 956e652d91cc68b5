from __future__ import annotations

from typing import List, Optional

from loguru import logger

from secret_friend.core.config import Settings
from secret_friend.services.rate_limit import rate_limiter

SLOW_DOWN = "You're doing that too often. Please slow down."
GENERIC_ERROR = "Something went wrong. Please try again later."
ADMIN_ONLY = "Only organizers can do that."

YES_WORDS = {"yes", "y", "true", "1", "sim"}
NO_WORDS = {"no", "n", "false", "0", "nao", "não"}


def is_admin(settings: Settings, user_id: int) -> bool:
    return user_id in settings.admin_ids


def check_rate_limit(user_id: int, action: str) -> bool:
    return rate_limiter.allow(user_id, action).allowed


def parse_ids(args: Optional[str], count: int) -> Optional[List[int]]:
    parts = (args or "").split()
    if len(parts) < count:
        return None
    try:
        return [int(part) for part in parts[:count]]
    except ValueError:
        return None


def parse_flag(word: Optional[str]) -> Optional[bool]:
    word = (word or "").strip().lower()
    if word in YES_WORDS:
        return True
    if word in NO_WORDS:
        return False
    return None


def log_handler_exception(action: str, user_id: int | None, chat_id: int | None, error: Exception) -> None:
    logger.bind(action=action, user_id=user_id, chat_id=chat_id).exception(
        "Handler error: {error}", error=str(error)
    )
