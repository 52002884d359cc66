"""Query assistant session state and replies."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from dynamics_assistant.schemas.query_schema import FilterEntry


@dataclass
class QuerySession:
    """Server-held state of one interactive query conversation.

    Accumulated fields are filled strictly in step order; the current step
    lives in the session's state machine.
    """
    id: str
    started_at: datetime
    last_activity: datetime
    entity: Optional[str] = None
    action: Optional[str] = None
    filters: Optional[dict[str, FilterEntry]] = None
    fields: Optional[list[str]] = None
    order_by: Optional[str] = None
    limit: Optional[int] = None
    completed: bool = False

    def reset(self) -> None:
        """Forget everything collected so far."""
        self.entity = None
        self.action = None
        self.filters = None
        self.fields = None
        self.order_by = None
        self.limit = None
        self.completed = False


class SessionStart(BaseModel):
    session_id: str
    message: str


class AssistantReply(BaseModel):
    message: str
    completed: bool = False
    result: Optional[Any] = None
    step: Optional[str] = None
