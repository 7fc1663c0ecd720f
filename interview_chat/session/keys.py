"""
Session identity - composite key of account and contact.

The key is ``<account_id><delimiter><contact_identity>``. Contact identities
(email addresses, locally generated chat ids) never contain the delimiter,
while account ids are treated as arbitrary prefixes. Splitting therefore
happens at the LAST delimiter, which keeps compose/split injective even when
the account id itself contains the delimiter.
"""

import time
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import unquote

from interview_chat.config.constants import AGENT_CHAT_PREFIX, SESSION_KEY_DELIMITER
from interview_chat.utils.errors import InvalidSessionKeyError


def compose(account_id: str, contact_identity: str, delimiter: str = SESSION_KEY_DELIMITER) -> str:
    """
    Join an account id and a contact identity into a session key.

    Raises:
        InvalidSessionKeyError: if a part is empty or the contact identity
            contains the delimiter (the key would not split back)
    """
    if not account_id:
        raise InvalidSessionKeyError("account_id must not be empty")
    if not contact_identity:
        raise InvalidSessionKeyError("contact_identity must not be empty")
    if delimiter in contact_identity:
        raise InvalidSessionKeyError(
            f"contact_identity must not contain the session key delimiter {delimiter!r}: {contact_identity!r}"
        )
    return f"{account_id}{delimiter}{contact_identity}"


def split(session_key: str, delimiter: str = SESSION_KEY_DELIMITER) -> "SessionKey":
    """
    Recover the (account_id, contact_identity) pair from a session key.

    Raises:
        InvalidSessionKeyError: if the delimiter is missing or a side is empty
    """
    index = session_key.rfind(delimiter)
    if index == -1:
        raise InvalidSessionKeyError(
            f"Invalid session_id format. Expected format: user_id{delimiter}email, got {session_key!r}"
        )

    account_id = session_key[:index]
    contact_identity = session_key[index + len(delimiter):]
    if not account_id or not contact_identity:
        raise InvalidSessionKeyError(
            f"Invalid session_id format. Could not extract user_id and email from {session_key!r}"
        )
    return SessionKey(account_id=account_id, contact_identity=contact_identity, delimiter=delimiter)


@dataclass(frozen=True)
class SessionKey:
    """Immutable session identity"""

    account_id: str
    contact_identity: str
    delimiter: str = SESSION_KEY_DELIMITER

    def __post_init__(self):
        # Validates both parts and the delimiter rule
        compose(self.account_id, self.contact_identity, self.delimiter)

    @property
    def value(self) -> str:
        """Composed, opaque key string"""
        return compose(self.account_id, self.contact_identity, self.delimiter)

    @classmethod
    def parse(cls, session_key: str, delimiter: str = SESSION_KEY_DELIMITER) -> "SessionKey":
        return split(session_key, delimiter)

    @classmethod
    def new_chat(cls, account_id: str, delimiter: str = SESSION_KEY_DELIMITER) -> "SessionKey":
        """Key for a knowledge-base chat started locally (no contact involved)"""
        return cls(
            account_id=account_id,
            contact_identity=f"{AGENT_CHAT_PREFIX}{int(time.time() * 1000)}",
            delimiter=delimiter,
        )

    def __str__(self) -> str:
        return self.value


def parse_route_param(raw: str, delimiter: str = SESSION_KEY_DELIMITER) -> Tuple[SessionKey, Optional[str]]:
    """
    Parse a session route parameter as it arrives from a chat link.

    Links are sometimes generated with the query string folded into the path
    (``user+jane@example.com&agent_id=abc``), so anything after ``?`` or ``&``
    is stripped from the key and a misplaced ``agent_id`` is recovered.

    Returns:
        Tuple of (SessionKey, agent_id or None)
    """
    decoded = unquote(raw)

    agent_id = None
    for separator in ("&", "?"):
        marker = f"{separator}agent_id="
        if marker in decoded:
            agent_id = decoded.split(marker, 1)[1].split("&", 1)[0] or None
            break

    session_value = decoded.split("&", 1)[0].split("?", 1)[0]
    return split(session_value, delimiter), agent_id
