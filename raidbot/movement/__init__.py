"""Movement layer: path following and caller-facing orchestration."""

from raidbot.movement.follower import MoveOpts, MovementState, PathFollower

__all__ = ["MoveOpts", "MovementState", "PathFollower"]
