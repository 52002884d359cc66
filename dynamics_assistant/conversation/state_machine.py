"""
Finite state machine for the interactive query assistant.

Each session walks a fixed path: entity, action, filter, fields, then
order and limit for listings, then confirmation. Every transition is
declared in TRANSITIONS; anything else is rejected.

Usage:
    sm = AssistantStateMachine()
    sm.transition(AssistantTrigger.ENTITY_SELECTED)
    assert sm.current_step == AssistantStep.ACTION
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from dynamics_assistant.errors import InvalidTransitionError

logger = logging.getLogger(__name__)


class AssistantStep(str, Enum):
    """Steps of a query-building conversation."""
    ENTITY = "entity"
    ACTION = "action"
    FILTER = "filter"
    FIELDS = "fields"
    ORDER_BY = "orderBy"
    LIMIT = "limit"
    CONFIRM = "confirm"
    COMPLETED = "completed"


class AssistantTrigger(str, Enum):
    """Events that move a session to its next step."""
    ENTITY_SELECTED = "entity_selected"
    ACTION_SELECTED = "action_selected"
    FILTER_SET = "filter_set"
    FIELDS_SET = "fields_set"
    FIELDS_SET_NO_ORDERING = "fields_set_no_ordering"
    ORDER_SET = "order_set"
    LIMIT_SET = "limit_set"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass
class Transition:
    """A single valid step transition."""
    from_step: AssistantStep
    to_step: AssistantStep
    trigger: AssistantTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a step visit."""
    step: AssistantStep
    entered_at: datetime
    trigger: Optional[AssistantTrigger] = None


class AssistantStateMachine:
    """Deterministic step controller for one assistant session."""

    TRANSITIONS: list[Transition] = [
        Transition(AssistantStep.ENTITY, AssistantStep.ACTION,
                   AssistantTrigger.ENTITY_SELECTED),
        Transition(AssistantStep.ACTION, AssistantStep.FILTER,
                   AssistantTrigger.ACTION_SELECTED),
        Transition(AssistantStep.FILTER, AssistantStep.FIELDS,
                   AssistantTrigger.FILTER_SET),

        # --- Listings ask for ordering and limit ---
        Transition(AssistantStep.FIELDS, AssistantStep.ORDER_BY,
                   AssistantTrigger.FIELDS_SET),
        Transition(AssistantStep.ORDER_BY, AssistantStep.LIMIT,
                   AssistantTrigger.ORDER_SET),
        Transition(AssistantStep.LIMIT, AssistantStep.CONFIRM,
                   AssistantTrigger.LIMIT_SET),

        # --- get and count go straight to confirmation ---
        Transition(AssistantStep.FIELDS, AssistantStep.CONFIRM,
                   AssistantTrigger.FIELDS_SET_NO_ORDERING),

        # --- Confirmation gate ---
        Transition(AssistantStep.CONFIRM, AssistantStep.COMPLETED,
                   AssistantTrigger.CONFIRMED),
        Transition(AssistantStep.CONFIRM, AssistantStep.ENTITY,
                   AssistantTrigger.CANCELLED),
    ]

    def __init__(self) -> None:
        self._current_step = AssistantStep.ENTITY
        self._history: list[StateEntry] = [
            StateEntry(step=AssistantStep.ENTITY, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_step(self) -> AssistantStep:
        return self._current_step

    def transition(self, trigger: AssistantTrigger) -> AssistantStep:
        """
        Execute a step transition.

        Raises:
            InvalidTransitionError: If no transition exists for ``trigger``.
        """
        for t in self.TRANSITIONS:
            if t.from_step == self._current_step and t.trigger == trigger:
                old_step = self._current_step
                self._current_step = t.to_step
                self._history.append(StateEntry(
                    step=self._current_step,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "Step transition: %s -> %s (trigger: %s)",
                    old_step.value, self._current_step.value, trigger.value,
                )
                return self._current_step

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_step.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[AssistantTrigger]:
        return [t.trigger for t in self.TRANSITIONS if t.from_step == self._current_step]

    def get_history(self) -> list[StateEntry]:
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of step names visited."""
        return [entry.step.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_step == AssistantStep.COMPLETED
