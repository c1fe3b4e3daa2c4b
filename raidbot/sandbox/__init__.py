"""Grid-world sandbox implementing the game collaborators."""

from raidbot.sandbox.hid import SandboxHID, SandboxInteractor
from raidbot.sandbox.pathfinder import GridPathFinder
from raidbot.sandbox.scenario import build_demo_world
from raidbot.sandbox.world import SandboxWorld

__all__ = ["GridPathFinder", "SandboxHID", "SandboxInteractor", "SandboxWorld", "build_demo_world"]
