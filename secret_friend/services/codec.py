from __future__ import annotations

import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

ID_LIMIT = 2**63
KEY_INFO = b"secret-friend recipient token"


class DecodeError(ValueError):
    pass


def derive_key(secret: str) -> bytes:
    hkdf = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=KEY_INFO)
    return base64.urlsafe_b64encode(hkdf.derive(secret.encode("utf-8")))


class TokenCodec:
    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("Codec secret must not be empty.")
        self._fernet = Fernet(derive_key(secret))

    def encode(self, recipient_id: int) -> str:
        if isinstance(recipient_id, bool) or not isinstance(recipient_id, int):
            raise ValueError(f"Recipient id must be an integer, got {recipient_id!r}.")
        if recipient_id <= 0 or recipient_id >= ID_LIMIT:
            raise ValueError(f"Recipient id out of range: {recipient_id}.")

        return self._fernet.encrypt(str(recipient_id).encode("ascii")).decode("ascii")

    def decode(self, token: str) -> int:
        if not isinstance(token, str) or not token:
            raise DecodeError("Token must be a non-empty string.")

        try:
            payload = self._fernet.decrypt(token)
        except (InvalidToken, ValueError) as exc:
            # non-ascii input fails inside base64 with a plain ValueError
            raise DecodeError("Token check failed.") from exc

        try:
            recipient_id = int(payload.decode("ascii"))
        except ValueError as exc:
            raise DecodeError("Token does not hold a valid id.") from exc
        if recipient_id <= 0:
            raise DecodeError("Token does not hold a valid id.")
        return recipient_id
