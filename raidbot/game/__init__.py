"""Collaborator interfaces: live game state, pathing, input, interaction."""

from raidbot.game.interfaces import HID, GameData, Interactor, PathFinder

__all__ = ["GameData", "HID", "Interactor", "PathFinder"]
