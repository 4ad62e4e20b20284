"""Playback of a project's events as a timed tour.

Uses python-statemachine for the playback states:

States:
    IDLE: No playback open
    PLAYING: Auto-advancing; one timer armed while events exist
    PAUSED: Index frozen, no timer
    FINISHED: The last event was shown for a full interval

Transitions:
    IDLE -> PLAYING: start (index reset to 0)
    PLAYING -> PLAYING: advance (timer fired, more events follow)
    PLAYING -> FINISHED: advance (timer fired on the last event)
    PLAYING/PAUSED/FINISHED -> PAUSED: pause
    PAUSED -> PLAYING: resume
    PLAYING/PAUSED/FINISHED -> same: step (manual seek, clamped)
    PLAYING/PAUSED/FINISHED -> IDLE: stop

Timer Ownership
---------------------
The state machine never touches the scheduler. PlaybackController sends
every event through _transition(), which after a successful transition
cancels the outstanding timer and arms a fresh one only when the machine
is PLAYING with at least one event. There is therefore at most one timer,
and a resume or step always waits a full interval. A speed change while
PLAYING replaces the timer with a fresh interval at the new speed; a step
clamped to the current index sends nothing.

Completion is reported by the controller after the FINISHED transition
returns; the owner is expected to close playback in response.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from cdr_timeline.constants import PlaybackConfig
from cdr_timeline.model.event import LifecycleEvent

if TYPE_CHECKING:
    from cdr_timeline.model.project import Project
    from cdr_timeline.ui.scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


@dataclass
class PlaybackContext:
    """Playback state shared with the state machine (model pattern).

    Note: The 'state' field is managed by python-statemachine.
    """

    state: str | None = None
    events: tuple[LifecycleEvent, ...] = ()
    index: int = 0
    speed_ms: int = PlaybackConfig.DEFAULT_SPEED_MS
    completed_runs: int = 0

    def clear(self) -> None:
        self.events = ()
        self.index = 0

    def __repr__(self) -> str:
        return f"PlaybackContext(state={self.state}, index={self.index}/{len(self.events)}, speed={self.speed_ms}ms)"


class PlaybackStateMachine(StateMachine):
    """State machine for timed playback. See module docstring for transitions."""

    idle = State("Idle", initial=True)
    playing = State("Playing")
    paused = State("Paused")
    finished = State("Finished")

    start = idle.to(playing, on="reset_index")

    advance = playing.to(playing, cond="has_next_event", on="increment_index") | playing.to(
        finished, unless="has_next_event"
    )

    pause = playing.to(paused) | paused.to(paused) | finished.to(paused)

    resume = paused.to(playing)

    step = (
        playing.to(playing, on="move_to")
        | paused.to(paused, on="move_to")
        | finished.to(finished, on="move_to")
    )

    stop = playing.to(idle) | paused.to(idle) | finished.to(idle)

    def __init__(self, context: PlaybackContext | None = None, start_value: str | None = None) -> None:
        """Initialize state machine with model pattern.

        Args:
            context: Shared context/model (creates new if None)
            start_value: Optional initial state value
        """
        model = context or PlaybackContext()
        super().__init__(model=model, start_value=start_value)

    @property
    def context(self) -> PlaybackContext:
        return self.model

    # ==========================================================================
    # Guards
    # ==========================================================================

    def has_next_event(self) -> bool:
        return self.context.index < len(self.context.events) - 1

    # ==========================================================================
    # Transition Actions
    # ==========================================================================

    def reset_index(self) -> None:
        self.context.index = 0

    def increment_index(self) -> None:
        self.context.index += 1

    def move_to(self, index: int) -> None:
        self.context.index = index

    def on_enter_idle(self) -> None:
        self.context.clear()

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[STATE] {source.name} --({event})--> {target.name} at index {self.context.index}")

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def is_playing(self) -> bool:
        return self.playing.is_active

    @property
    def is_paused(self) -> bool:
        return self.paused.is_active

    @property
    def is_finished(self) -> bool:
        return self.finished.is_active

    def get_state_name(self) -> str:
        return self.current_state.name

    def __repr__(self) -> str:
        return f"PlaybackStateMachine(state={self.get_state_name()}, model={self.context!r})"


class PlaybackController:
    """Owns the playback state machine and its single timer.

    Args:
        scheduler: Source of cancellable delayed callbacks
        speed_ms: Initial milliseconds per event

    Example:
        with PlaybackController(PollingScheduler()) as playback:
            playback.on_complete(playback.close)
            playback.open(project)
    """

    def __init__(self, scheduler: Scheduler, speed_ms: int = PlaybackConfig.DEFAULT_SPEED_MS) -> None:
        self._validate_speed(speed_ms)
        self._scheduler = scheduler
        self._context = PlaybackContext(speed_ms=speed_ms)
        self._machine = PlaybackStateMachine(context=self._context)
        self._task: ScheduledTask | None = None
        self._complete_callbacks: list[Callable[[], None]] = []

    # ==========================================================================
    # Commands
    # ==========================================================================

    def open(self, project: Project | None = None, events: Sequence[LifecycleEvent] | None = None) -> None:
        """Start playback at the first event.

        Events default to the project's events. An empty sequence is
        accepted: playback opens but never arms a timer.
        """
        if events is None:
            events = project.events if project is not None else ()
        if self.is_active:
            self.close()
        self._context.events = tuple(events)
        if not self._context.events:
            logger.warning("[PLAYBACK] Opened with no events, nothing will play")
        self._transition("start")

    def close(self) -> None:
        """Stop playback. The pending timer is cancelled on every path."""
        try:
            if self.is_active:
                self._transition("stop")
        finally:
            self._cancel_timer()

    def pause(self) -> bool:
        return self._transition("pause")

    def resume(self) -> bool:
        return self._transition("resume")

    def toggle_pause(self) -> bool:
        return self.resume() if self.is_paused else self.pause()

    def step_previous(self) -> bool:
        return self.seek(self._context.index - 1)

    def step_next(self) -> bool:
        return self.seek(self._context.index + 1)

    def seek(self, index: int) -> bool:
        """Jump to an index, clamped to the event range.

        A request that clamps to the current index is a no-op and leaves
        the running interval alone.
        """
        last = max(len(self._context.events) - 1, 0)
        target = min(max(index, 0), last)
        if target == self._context.index:
            return False
        return self._transition("step", index=target)

    def set_speed(self, speed_ms: int) -> None:
        """Change the interval between events.

        While playing, a changed speed replaces the running timer with a
        fresh interval at the new speed. Setting the current speed again
        changes nothing.

        Raises:
            ValueError: If speed_ms is not one of PlaybackConfig.SPEEDS_MS.
        """
        self._validate_speed(speed_ms)
        if speed_ms == self._context.speed_ms:
            return
        logger.info(f"[PLAYBACK] Speed {self._context.speed_ms}ms -> {speed_ms}ms")
        self._context.speed_ms = speed_ms
        if self._task is not None:
            self._cancel_timer()
            self._arm_timer()

    def on_complete(self, callback: Callable[[], None]) -> None:
        """Register a callback run when the last event's interval elapses."""
        self._complete_callbacks.append(callback)

    def add_listener(self, *listeners: Any) -> None:
        """Attach python-statemachine listeners (after_transition etc.)."""
        self._machine.add_listener(*listeners)

    # ==========================================================================
    # Read-only State
    # ==========================================================================

    @property
    def index(self) -> int:
        return self._context.index

    @property
    def events(self) -> tuple[LifecycleEvent, ...]:
        return self._context.events

    @property
    def current_event(self) -> LifecycleEvent | None:
        if self._machine.is_idle or not self._context.events:
            return None
        return self._context.events[self._context.index]

    @property
    def speed_ms(self) -> int:
        return self._context.speed_ms

    @property
    def completed_runs(self) -> int:
        """Number of times playback reached the end since creation."""
        return self._context.completed_runs

    @property
    def is_active(self) -> bool:
        return not self._machine.is_idle

    @property
    def is_playing(self) -> bool:
        return self._machine.is_playing

    @property
    def is_paused(self) -> bool:
        return self._machine.is_paused

    @property
    def is_finished(self) -> bool:
        return self._machine.is_finished

    @property
    def is_at_last_event(self) -> bool:
        return bool(self._context.events) and self._context.index == len(self._context.events) - 1

    @property
    def has_pending_timer(self) -> bool:
        return self._task is not None

    @property
    def progress(self) -> float:
        """Fraction of events shown so far (0.0 without events)."""
        if not self._context.events:
            return 0.0
        return (self._context.index + 1) / len(self._context.events)

    @property
    def progress_label(self) -> str:
        if not self._context.events:
            return "0 / 0"
        return f"{self._context.index + 1} / {len(self._context.events)}"

    @property
    def state_name(self) -> str:
        return self._machine.get_state_name()

    def __enter__(self) -> PlaybackController:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"PlaybackController({self._machine!r}, timer={'armed' if self._task else 'none'})"

    # ==========================================================================
    # Transitions and Timer
    # ==========================================================================

    def _transition(self, event: str, **kwargs: Any) -> bool:
        """Send an event and resynchronize the timer with the new state.

        Returns:
            True if the transition happened, False if not allowed from the
            current state (logged, timer left untouched).
        """
        try:
            self._machine.send(event, **kwargs)
        except TransitionNotAllowed:
            logger.warning(f"[STATE] Transition '{event}' not allowed from {self._machine.get_state_name()}")
            return False
        except Exception:
            self._cancel_timer()
            raise
        self._cancel_timer()
        if self._machine.is_playing and self._context.events:
            self._arm_timer()
        return True

    def _arm_timer(self) -> None:
        delay_s = self._context.speed_ms / 1000
        self._task = self._scheduler.call_later(delay_s, self._on_timer)
        logger.debug(f"[PLAYBACK] Timer armed: {delay_s:.1f}s at index {self._context.index}")

    def _cancel_timer(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug("[PLAYBACK] Timer cancelled")

    def _on_timer(self) -> None:
        self._task = None
        if not self._transition("advance"):
            return
        if self._machine.is_finished:
            self._context.completed_runs += 1
            logger.info(f"[PLAYBACK] Complete after {len(self._context.events)} event(s)")
            for callback in list(self._complete_callbacks):
                callback()

    @staticmethod
    def _validate_speed(speed_ms: int) -> None:
        if speed_ms not in PlaybackConfig.SPEEDS_MS.values():
            raise ValueError(f"Unsupported speed {speed_ms}ms, expected one of {sorted(PlaybackConfig.SPEEDS_MS.values())}")
