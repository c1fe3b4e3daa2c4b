"""raidbot: combat and movement coordination for an action-RPG character."""

__version__ = "0.1.0"
