from secret_friend.services.codec import DecodeError, TokenCodec
from secret_friend.services.draw import DrawFailure, Pairing, Participant, draw
from secret_friend.services.events import EventError, RecipientNotFoundError

__all__ = [
    "DecodeError",
    "TokenCodec",
    "DrawFailure",
    "Pairing",
    "Participant",
    "draw",
    "EventError",
    "RecipientNotFoundError",
]
