from dynamics_assistant.conversation.phrase_matcher import (
    FILTER_RULES,
    ORDER_RULES,
    PhraseMatcher,
    PhraseRule,
)
from dynamics_assistant.conversation.query_assistant import QueryAssistant
from dynamics_assistant.conversation.session_store import SessionStore, SessionSweeper
from dynamics_assistant.conversation.state_machine import (
    AssistantStateMachine,
    AssistantStep,
    AssistantTrigger,
)

__all__ = [
    "QueryAssistant",
    "AssistantStateMachine",
    "AssistantStep",
    "AssistantTrigger",
    "PhraseMatcher",
    "PhraseRule",
    "FILTER_RULES",
    "ORDER_RULES",
    "SessionStore",
    "SessionSweeper",
]
