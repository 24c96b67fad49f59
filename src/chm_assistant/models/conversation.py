"""Conversation turn model."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class Role(StrEnum):
    """Who produced a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    """One prior message in a conversation, read-only to the core."""

    role: Role
    content: str
    timestamp: datetime | None = None

    def as_message(self) -> dict[str, str]:
        """Chat-completions style message dict."""
        return {"role": self.role.value, "content": self.content}
