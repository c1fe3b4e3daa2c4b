"""Tests for DeterministicRNG and the event log ring buffer."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from raidbot.core.enums import Domain
from raidbot.systems.rng import DeterministicRNG
from raidbot.utils.event_log import BotEvent, EventLog


class TestDeterministicRNG:
    def test_pure_function_of_inputs(self):
        a = DeterministicRNG(42)
        b = DeterministicRNG(42)
        assert a.next_float(Domain.MOVEMENT, 0, 7) == b.next_float(Domain.MOVEMENT, 0, 7)

    def test_domains_are_separated(self):
        rng = DeterministicRNG(42)
        values = {rng.next_float(d, 0, 0) for d in Domain}
        assert len(values) == len(Domain)

    def test_int_range_inclusive(self):
        rng = DeterministicRNG(1)
        draws = [rng.next_int(Domain.MOVEMENT, 0, i, 600, 1200) for i in range(500)]
        assert min(draws) >= 600
        assert max(draws) <= 1200
        assert len(set(draws)) > 100

    def test_float_range(self):
        rng = DeterministicRNG(9)
        assert all(0.0 <= rng.next_float(Domain.NUDGE, 3, i) < 1.0 for i in range(200))

    def test_seed_changes_stream(self):
        a = [DeterministicRNG(1).next_int(Domain.SPAWN, 1, i, 0, 1000) for i in range(20)]
        b = [DeterministicRNG(2).next_int(Domain.SPAWN, 1, i, 0, 1000) for i in range(20)]
        assert a != b


class TestEventLog:
    def _event(self, t, category="attack"):
        return BotEvent(timestamp=t, category=category, message=f"event {t}")

    def test_bounded(self):
        log = EventLog(capacity=3)
        for t in range(5):
            log.append(self._event(float(t)))
        assert len(log) == 3
        assert [e.timestamp for e in log.latest()] == [2.0, 3.0, 4.0]

    def test_since_and_category(self):
        log = EventLog()
        log.append(self._event(1.0, "attack"))
        log.append(self._event(2.0, "reposition"))
        log.append(self._event(3.0, "attack"))
        assert [e.timestamp for e in log.since(2.0)] == [2.0, 3.0]
        assert [e.timestamp for e in log.by_category("attack")] == [1.0, 3.0]

    def test_clear(self):
        log = EventLog()
        log.append(self._event(1.0))
        log.clear()
        assert len(log) == 0
