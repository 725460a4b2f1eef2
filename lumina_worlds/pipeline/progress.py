"""
Per-slot progress tracking for visual asset generation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

CONCEPT = "concept"
CHARACTER = "character"
SCENARIO = "scenario"

SLOT_COUNTS: dict[str, int] = {CONCEPT: 1, CHARACTER: 6, SCENARIO: 3}


@dataclass(frozen=True)
class SlotState:
    loading: bool = False
    completed: bool = False
    failed: bool = False


IDLE = SlotState()
LOADING = SlotState(loading=True)


def finished_state(*, failed: bool) -> SlotState:
    return SlotState(loading=False, completed=True, failed=failed)


@dataclass(frozen=True)
class ProgressUpdated:
    """Published whenever a single visual slot changes state."""

    slot_kind: str
    slot_index: int
    state: SlotState


ProgressListener = Callable[[ProgressUpdated], None]


class VisualProgress:
    """
    Observable state of the 10 visual slots (1 concept, 6 character, 3 scenario).

    Only the orchestrator writes; presentation code subscribes and reads.
    """

    def __init__(self) -> None:
        self._slots: dict[str, list[SlotState]] = {
            kind: [IDLE] * count for kind, count in SLOT_COUNTS.items()
        }
        self._listeners: list[ProgressListener] = []

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        for kind, states in self._slots.items():
            for index, state in enumerate(states):
                if state != IDLE:
                    self.update(kind, index, IDLE)

    def update(self, slot_kind: str, slot_index: int, state: SlotState) -> None:
        states = self._slot_list(slot_kind)
        if not 0 <= slot_index < len(states):
            raise IndexError(f"{slot_kind} slot index {slot_index} out of range.")

        states[slot_index] = state
        event = ProgressUpdated(slot_kind=slot_kind, slot_index=slot_index, state=state)
        for listener in list(self._listeners):
            listener(event)

    def state(self, slot_kind: str, slot_index: int) -> SlotState:
        return self._slot_list(slot_kind)[slot_index]

    def slots(self, slot_kind: str) -> tuple[SlotState, ...]:
        return tuple(self._slot_list(slot_kind))

    def snapshot(self) -> dict[str, tuple[SlotState, ...]]:
        return {kind: tuple(states) for kind, states in self._slots.items()}

    @property
    def is_idle(self) -> bool:
        return all(state == IDLE for states in self._slots.values() for state in states)

    def _slot_list(self, slot_kind: str) -> list[SlotState]:
        try:
            return self._slots[slot_kind]
        except KeyError as exc:
            raise ValueError(f"Unknown slot kind: {slot_kind!r}") from exc
