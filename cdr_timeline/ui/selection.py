"""Event selection state machine.

States:
    NOTHING_SELECTED: No event selected (map shows the project overview)
    EVENT_SELECTED: One event selected by index

Transitions:
    NOTHING_SELECTED -> EVENT_SELECTED: select(index)
    EVENT_SELECTED -> EVENT_SELECTED: select(other index)
    EVENT_SELECTED -> NOTHING_SELECTED: select(same index) or clear
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

logger = logging.getLogger(__name__)


@dataclass
class SelectionContext:
    """Selected event index (model for SelectionStateMachine)."""

    state: str | None = None
    index: int | None = None


class SelectionStateMachine(StateMachine):
    """Toggle-style single selection."""

    nothing_selected = State("NothingSelected", initial=True)
    event_selected = State("EventSelected")

    select = (
        nothing_selected.to(event_selected, on="set_index")
        | event_selected.to(nothing_selected, cond="is_selected_index")
        | event_selected.to(event_selected, unless="is_selected_index", on="set_index")
    )

    clear = event_selected.to(nothing_selected) | nothing_selected.to(nothing_selected)

    def __init__(self, context: SelectionContext | None = None, start_value: str | None = None) -> None:
        model = context or SelectionContext()
        super().__init__(model=model, start_value=start_value)

    @property
    def context(self) -> SelectionContext:
        return self.model

    def is_selected_index(self, index: int) -> bool:
        return self.context.index == index

    def set_index(self, index: int) -> None:
        self.context.index = index

    def on_enter_nothing_selected(self) -> None:
        self.context.index = None

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[STATE] {source.name} --({event})--> {target.name} (index={self.context.index})")

    @property
    def selected_index(self) -> int | None:
        return self.context.index

    @property
    def has_selection(self) -> bool:
        return self.event_selected.is_active

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure."""
        try:
            self.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"Transition '{event}' not allowed from {self.current_state.name}")
            return False
