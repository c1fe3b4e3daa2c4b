"""MonsterStateTracker — per-target combat bookkeeping.

One AttackState per monster unit id, created lazily on first observation.
Every access goes through a single lock; helpers suffixed ``_locked``
assume the caller already holds it and never re-acquire it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace

from raidbot.core.models import Monster, Position

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AttackState:
    """Mutable per-target state. Callers only ever see copies."""

    last_health: int = 0
    last_health_check: float = 0.0
    stall_started_at: float | None = None   # None = not stalled
    last_reposition: float | None = None
    reposition_attempts: int = 0
    position: Position = Position()

    def copy(self) -> AttackState:
        return replace(self)

    def stalled_for(self, now: float) -> float:
        """Seconds since the stall timer started (0.0 when not stalled)."""
        if self.stall_started_at is None:
            return 0.0
        return now - self.stall_started_at


class MonsterStateTracker:
    """Thread-safe table of AttackState keyed by monster unit id.

    Shared by every attack sequence of a session (and by overlapping
    sessions when handed the same instance).
    """

    __slots__ = ("_states", "_lock", "_sample_interval", "_gc_threshold", "_idle_ttl")

    def __init__(
        self,
        sample_interval: float = 0.1,
        gc_threshold: int = 100,
        idle_ttl: float = 300.0,
    ) -> None:
        self._states: dict[int, AttackState] = {}
        self._lock = threading.Lock()
        self._sample_interval = sample_interval
        self._gc_threshold = gc_threshold
        self._idle_ttl = idle_ttl

    # -- queries --

    def get(self, unit_id: int) -> AttackState | None:
        with self._lock:
            state = self._states.get(unit_id)
            return state.copy() if state is not None else None

    def snapshot(self) -> dict[int, AttackState]:
        with self._lock:
            return {uid: s.copy() for uid, s in self._states.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

    def __contains__(self, unit_id: int) -> bool:
        with self._lock:
            return unit_id in self._states

    # -- observation --

    def get_or_create(self, monster: Monster, now: float) -> AttackState:
        with self._lock:
            return self._get_or_create_locked(monster, now).copy()

    def observe(self, monster: Monster, now: float) -> tuple[bool, AttackState]:
        """Sample the monster's health and advance its stall timer.

        Samples closer together than the sample interval are ignored.
        Returns ``(did_damage, state_copy)``.
        """
        with self._lock:
            state = self._get_or_create_locked(monster, now)
            did_damage = False

            if now - state.last_health_check > self._sample_interval:
                if monster.life < state.last_health:
                    did_damage = True
                    state.stall_started_at = None
                    state.reposition_attempts = 0
                elif state.stall_started_at is None and monster.position == state.position:
                    # Only a monster that stayed put can start a stall
                    state.stall_started_at = now
                    state.reposition_attempts = 0
                    logger.debug("Stall timer started for monster %d", monster.unit_id)

                state.last_health = monster.life
                state.last_health_check = now
                state.position = monster.position

                if len(self._states) > self._gc_threshold:
                    self._collect_garbage_locked(now)

            return did_damage, state.copy()

    # -- mutators used by the attack coordinator --

    def reset_reposition_attempts(self, unit_id: int) -> None:
        with self._lock:
            state = self._states.get(unit_id)
            if state is not None:
                state.reposition_attempts = 0

    def record_reposition(self, unit_id: int, now: float) -> AttackState | None:
        with self._lock:
            state = self._states.get(unit_id)
            if state is None:
                return None
            state.reposition_attempts += 1
            state.last_reposition = now
            return state.copy()

    def forget(self, unit_id: int) -> None:
        with self._lock:
            self._states.pop(unit_id, None)

    def clear(self) -> None:
        with self._lock:
            self._states.clear()

    def collect_garbage(self, now: float) -> int:
        """Drop entries not sampled for longer than the idle TTL."""
        with self._lock:
            return self._collect_garbage_locked(now)

    # -- internals (lock held) --

    def _get_or_create_locked(self, monster: Monster, now: float) -> AttackState:
        state = self._states.get(monster.unit_id)
        if state is None:
            state = AttackState(
                last_health=monster.life,
                last_health_check=now,
                position=monster.position,
            )
            self._states[monster.unit_id] = state
        return state

    def _collect_garbage_locked(self, now: float) -> int:
        stale = [
            uid for uid, s in self._states.items()
            if now - s.last_health_check > self._idle_ttl
        ]
        for uid in stale:
            del self._states[uid]
        if stale:
            logger.debug("Purged %d idle monster states", len(stale))
        return len(stale)
