import os
from dataclasses import dataclass, field
from typing import FrozenSet

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    bot_token: str
    database_url: str
    match_secret: str
    log_level: str
    log_path: str
    admin_ids: FrozenSet[int] = field(default_factory=frozenset)


def _parse_admin_ids(raw: str) -> FrozenSet[int]:
    ids = set()
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            ids.add(int(chunk))
        except ValueError as exc:
            raise ValueError(f"ADMIN_IDS contains a non-numeric id: {chunk!r}") from exc
    return frozenset(ids)


def load_settings() -> Settings:
    bot_token = os.getenv("BOT_TOKEN")
    database_url = os.getenv("DATABASE_URL")
    match_secret = os.getenv("MATCH_SECRET")
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_path = os.getenv("LOG_PATH", "logs/secret_friend.log")
    admin_ids = _parse_admin_ids(os.getenv("ADMIN_IDS", ""))

    if not bot_token:
        raise ValueError("BOT_TOKEN is required. Set it in the environment or .env file.")
    if not database_url:
        raise ValueError("DATABASE_URL is required. Set it in the environment or .env file.")
    if not match_secret:
        raise ValueError("MATCH_SECRET is required. Set it in the environment or .env file.")

    return Settings(
        bot_token=bot_token,
        database_url=database_url,
        match_secret=match_secret,
        log_level=log_level,
        log_path=log_path,
        admin_ids=admin_ids,
    )
