from secret_friend.db.models import Base, Event, EventGroup, EventPerson
from secret_friend.db.session import SessionLocal, create_schema, get_session, init_engine

__all__ = [
    "Base",
    "Event",
    "EventGroup",
    "EventPerson",
    "SessionLocal",
    "create_schema",
    "get_session",
    "init_engine",
]
