"""
Session data model

Messages and history payloads are pydantic models (they cross the wire);
session-local state uses enums and dataclasses.
"""

import itertools
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from interview_chat.session.keys import SessionKey


_id_sequence = itertools.count()


def new_message_id() -> str:
    """Creation-time-derived id; the sequence suffix breaks same-millisecond ties."""
    return f"{int(time.time() * 1000)}-{next(_id_sequence)}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SessionStatus(str, Enum):
    """
    Session lifecycle status.

    active -> completed (explicit completion succeeded)
    completed -> processed (downstream document pipeline finished)
    """
    ACTIVE = "active"
    COMPLETED = "completed"
    PROCESSED = "processed"


class SessionMode(str, Enum):
    """Interview sessions can be completed; knowledge-base chats cannot."""
    INTERVIEW = "interview"
    AGENT_CHAT = "agent_chat"


class Message(BaseModel):
    """A single transcript entry"""

    id: str = Field(default_factory=new_message_id)
    role: Role
    content: str = ""
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role=Role.USER, content=text)

    @classmethod
    def placeholder(cls) -> "Message":
        """Empty assistant entry awaiting stream content"""
        return cls(role=Role.ASSISTANT, content="")

    def with_content(self, content: str) -> "Message":
        return self.model_copy(update={"content": content})


class AccountConfig(BaseModel):
    """Account record as returned by the backend; only agent wiring matters here."""

    user_id: str
    agent_id: Optional[str] = None
    chat_agent_id: Optional[str] = None
    rag_id: Optional[str] = None

    model_config = {"extra": "ignore"}

    def agent_for(self, mode: SessionMode) -> Optional[str]:
        if mode == SessionMode.AGENT_CHAT:
            return self.chat_agent_id or None
        return self.agent_id or None


class HistoryPayload(BaseModel):
    """
    Chat history response.

    The backend returns either flat ``message_count``/``session_status`` or a
    nested ``session`` object carrying them; both shapes are accepted.
    """

    messages: List[Dict[str, Any]] = Field(default_factory=list)
    message_count: Optional[int] = None
    session_status: Optional[str] = None
    session: Optional[Dict[str, Any]] = None

    model_config = {"extra": "ignore"}

    @property
    def resolved_count(self) -> int:
        if self.session and self.session.get("message_count") is not None:
            return int(self.session["message_count"])
        return int(self.message_count or 0)

    @property
    def resolved_status(self) -> SessionStatus:
        raw = (self.session or {}).get("session_status") or self.session_status or SessionStatus.ACTIVE.value
        try:
            return SessionStatus(raw)
        except ValueError:
            logger.warning(f"Unknown session status {raw!r}, treating as active")
            return SessionStatus.ACTIVE

    def to_transcript(self) -> List[Message]:
        transcript = []
        for raw in self.messages:
            role = raw.get("role")
            if role not in (Role.USER.value, Role.ASSISTANT.value):
                logger.debug(f"Skipping history entry with role {role!r}")
                continue
            fields = {"role": role, "content": raw.get("content") or ""}
            if raw.get("id"):
                fields["id"] = str(raw["id"])
            timestamp = raw.get("timestamp") or raw.get("created_at")
            if timestamp:
                fields["timestamp"] = timestamp
            transcript.append(Message(**fields))
        return transcript


@dataclass
class SessionContext:
    """Explicit context handed to the lifecycle controller and send orchestrator"""

    session_key: Optional[SessionKey]
    mode: SessionMode = SessionMode.INTERVIEW
    agent_id: Optional[str] = None
    account: Optional[AccountConfig] = None

    @classmethod
    def resolve(
        cls,
        session_key: Optional[SessionKey],
        account: Optional[AccountConfig],
        mode: SessionMode = SessionMode.INTERVIEW,
        agent_id: Optional[str] = None,
    ) -> "SessionContext":
        """Pick the agent from an explicit override or the account config."""
        if not agent_id and account is not None:
            agent_id = account.agent_for(mode)
        return cls(session_key=session_key, mode=mode, agent_id=agent_id, account=account)

    @property
    def account_id(self) -> Optional[str]:
        return self.session_key.account_id if self.session_key else None

    @property
    def contact_identity(self) -> Optional[str]:
        return self.session_key.contact_identity if self.session_key else None

    @property
    def ready(self) -> bool:
        """Both a session and an agent are configured"""
        return self.session_key is not None and bool(self.agent_id)
