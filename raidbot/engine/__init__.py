"""Session supervision: pause gate, bot session and its background runner.

Only the pause gate is exported here; import ``raidbot.engine.session`` and
``raidbot.engine.session_manager`` by their full path.
"""

from raidbot.engine.pause import PauseGate

__all__ = ["PauseGate"]
