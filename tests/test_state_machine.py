"""Tests for the query assistant state machine."""

import pytest

from dynamics_assistant.conversation.state_machine import (
    AssistantStateMachine,
    AssistantStep,
    AssistantTrigger,
)
from dynamics_assistant.errors import InvalidTransitionError


@pytest.fixture
def state_machine():
    return AssistantStateMachine()


def _advance_to_fields(sm: AssistantStateMachine) -> None:
    sm.transition(AssistantTrigger.ENTITY_SELECTED)
    sm.transition(AssistantTrigger.ACTION_SELECTED)
    sm.transition(AssistantTrigger.FILTER_SET)


class TestInitialState:
    def test_starts_in_entity(self, state_machine):
        assert state_machine.current_step == AssistantStep.ENTITY

    def test_initial_history_has_one_entry(self, state_machine):
        assert len(state_machine.get_history()) == 1

    def test_not_terminal_at_start(self, state_machine):
        assert not state_machine.is_terminal()

    def test_only_entity_selection_is_valid(self, state_machine):
        assert state_machine.get_valid_triggers() == [AssistantTrigger.ENTITY_SELECTED]


class TestListingPath:
    def test_full_listing_walk(self, state_machine):
        _advance_to_fields(state_machine)
        assert state_machine.transition(AssistantTrigger.FIELDS_SET) == AssistantStep.ORDER_BY
        assert state_machine.transition(AssistantTrigger.ORDER_SET) == AssistantStep.LIMIT
        assert state_machine.transition(AssistantTrigger.LIMIT_SET) == AssistantStep.CONFIRM
        assert state_machine.transition(AssistantTrigger.CONFIRMED) == AssistantStep.COMPLETED
        assert state_machine.is_terminal()

    def test_state_trace(self, state_machine):
        _advance_to_fields(state_machine)
        state_machine.transition(AssistantTrigger.FIELDS_SET)
        assert state_machine.get_state_trace() == [
            "entity", "action", "filter", "fields", "orderBy",
        ]

    def test_history_records_triggers(self, state_machine):
        state_machine.transition(AssistantTrigger.ENTITY_SELECTED)
        history = state_machine.get_history()
        assert history[0].trigger is None
        assert history[1].trigger == AssistantTrigger.ENTITY_SELECTED
        assert history[1].entered_at >= history[0].entered_at


class TestShortPath:
    def test_fields_straight_to_confirm(self, state_machine):
        _advance_to_fields(state_machine)
        new = state_machine.transition(AssistantTrigger.FIELDS_SET_NO_ORDERING)
        assert new == AssistantStep.CONFIRM

    def test_fields_offers_both_branches(self, state_machine):
        _advance_to_fields(state_machine)
        assert set(state_machine.get_valid_triggers()) == {
            AssistantTrigger.FIELDS_SET, AssistantTrigger.FIELDS_SET_NO_ORDERING,
        }


class TestConfirmation:
    def test_cancel_returns_to_entity(self, state_machine):
        _advance_to_fields(state_machine)
        state_machine.transition(AssistantTrigger.FIELDS_SET_NO_ORDERING)
        assert state_machine.transition(AssistantTrigger.CANCELLED) == AssistantStep.ENTITY
        assert not state_machine.is_terminal()


class TestInvalidTransitions:
    def test_skipping_a_step(self, state_machine):
        with pytest.raises(InvalidTransitionError, match="entity"):
            state_machine.transition(AssistantTrigger.FILTER_SET)

    def test_state_unchanged_after_rejection(self, state_machine):
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(AssistantTrigger.CONFIRMED)
        assert state_machine.current_step == AssistantStep.ENTITY
        assert len(state_machine.get_history()) == 1

    def test_completed_is_terminal(self, state_machine):
        _advance_to_fields(state_machine)
        state_machine.transition(AssistantTrigger.FIELDS_SET_NO_ORDERING)
        state_machine.transition(AssistantTrigger.CONFIRMED)
        assert state_machine.get_valid_triggers() == []
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(AssistantTrigger.CANCELLED)

    def test_cancel_only_from_confirm(self, state_machine):
        state_machine.transition(AssistantTrigger.ENTITY_SELECTED)
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(AssistantTrigger.CANCELLED)
