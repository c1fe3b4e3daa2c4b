"""Support systems: deterministic randomness."""

from raidbot.systems.rng import DeterministicRNG

__all__ = ["DeterministicRNG"]
