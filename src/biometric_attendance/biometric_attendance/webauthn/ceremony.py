"""Ceremony state machine shared by registration and authentication.

    IDLE -> OPTIONS_REQUESTED -> OPTIONS_READY -> CEREMONY_IN_PROGRESS
         -> CEREMONY_COMPLETE -> VERIFYING -> SUCCESS | VERIFICATION_FAILED

Any step before VERIFYING may end in CEREMONY_FAILED. Terminal states go back
to IDLE only through `begin()` (a user-initiated restart) or, for a user
cancellation, right away.

One attempt at a time per authenticator. Every attempt has a generation
number and a cancel event; a result that arrives for an attempt that was
cancelled or superseded must not be submitted or applied.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from ..core.enums import CeremonyKind, CeremonyState
from ..core.exceptions import CeremonyBusy, CeremonyStateError, UserCancelled
from .model import CeremonyOptions

logger = logging.getLogger(__name__)

S = CeremonyState

_TRANSITIONS: Dict[CeremonyState, FrozenSet[CeremonyState]] = {
    S.IDLE: frozenset({S.OPTIONS_REQUESTED}),
    S.OPTIONS_REQUESTED: frozenset({S.OPTIONS_READY, S.CEREMONY_FAILED}),
    S.OPTIONS_READY: frozenset({S.CEREMONY_IN_PROGRESS, S.CEREMONY_FAILED}),
    S.CEREMONY_IN_PROGRESS: frozenset({S.CEREMONY_COMPLETE, S.CEREMONY_FAILED}),
    S.CEREMONY_COMPLETE: frozenset({S.VERIFYING, S.CEREMONY_FAILED}),
    S.VERIFYING: frozenset({S.SUCCESS, S.VERIFICATION_FAILED}),
    S.SUCCESS: frozenset({S.IDLE}),
    S.VERIFICATION_FAILED: frozenset({S.IDLE}),
    S.CEREMONY_FAILED: frozenset({S.IDLE}),
}


@dataclass
class CeremonyAttempt:
    kind: CeremonyKind
    generation: int
    cancel: threading.Event = field(default_factory=threading.Event)
    state: CeremonyState = S.IDLE
    history: List[CeremonyState] = field(default_factory=list)
    options: Optional[CeremonyOptions] = None
    cancelled: bool = False

    def __post_init__(self):
        self.history.append(self.state)


class CeremonyCoordinator:
    def __init__(self):
        self._lock = threading.Lock()
        self._generation = 0
        self._current: Optional[CeremonyAttempt] = None

    @property
    def state(self) -> CeremonyState:
        with self._lock:
            return self._current.state if self._current else S.IDLE

    @property
    def current(self) -> Optional[CeremonyAttempt]:
        return self._current

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._active()

    def _active(self) -> bool:
        return self._current is not None and self._current.state != S.IDLE and not self._current.state.is_terminal

    def _move(self, attempt: CeremonyAttempt, new_state: CeremonyState) -> None:
        if new_state not in _TRANSITIONS[attempt.state]:
            raise CeremonyStateError(f"Cannot move ceremony from {attempt.state.value} to {new_state.value}")
        logger.debug("ceremony #%s %s -> %s", attempt.generation, attempt.state.value, new_state.value)
        attempt.state = new_state
        attempt.history.append(new_state)

    def begin(self, kind: CeremonyKind) -> CeremonyAttempt:
        """Start a fresh attempt (a restart when the previous one ended)."""
        with self._lock:
            if self._active():
                raise CeremonyBusy("Another biometric ceremony is already in progress")
            if self._current is not None and self._current.state.is_terminal:
                self._move(self._current, S.IDLE)

            self._generation += 1
            attempt = CeremonyAttempt(kind=kind, generation=self._generation)
            self._move(attempt, S.OPTIONS_REQUESTED)
            self._current = attempt
            return attempt

    def advance(self, attempt: CeremonyAttempt, new_state: CeremonyState) -> None:
        """Move a live attempt forward; a cancelled or stale one raises UserCancelled."""
        with self._lock:
            self._ensure_current(attempt)
            self._move(attempt, new_state)

    def fail(self, attempt: CeremonyAttempt, *, cancelled: bool = False) -> None:
        """End an attempt unsuccessfully: VERIFICATION_FAILED once submitted, else CEREMONY_FAILED."""
        with self._lock:
            if cancelled:
                attempt.cancelled = True
            if attempt.state.is_terminal or attempt.state == S.IDLE:
                return
            terminal = S.VERIFICATION_FAILED if attempt.state == S.VERIFYING else S.CEREMONY_FAILED
            self._move(attempt, terminal)
            if attempt.cancelled and attempt is self._current:
                # Dismissal is itself the user's action: nothing is left stuck.
                self._move(attempt, S.IDLE)

    def _ensure_current(self, attempt: CeremonyAttempt) -> None:
        if attempt.cancelled or attempt.generation != self._generation:
            raise UserCancelled("The ceremony was cancelled")

    def cancel(self) -> bool:
        """Cancel the in-flight attempt, if any. Returns True when one was cancelled."""
        with self._lock:
            if not self._active():
                return False
            attempt = self._current
            attempt.cancelled = True
            attempt.cancel.set()
            logger.info("ceremony #%s cancelled in state %s", attempt.generation, attempt.state.value)
            return True

    def reset(self) -> None:
        """Explicit return to IDLE after a terminal state."""
        with self._lock:
            if self._current is not None and self._current.state.is_terminal:
                self._move(self._current, S.IDLE)
