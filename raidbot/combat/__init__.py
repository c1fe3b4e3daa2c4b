"""Combat layer: target bookkeeping, positioning and attack sequences."""

from raidbot.combat.tracker import AttackState, MonsterStateTracker
from raidbot.combat.safe_position import find_safe_position
from raidbot.combat.attack import AttackCoordinator, AttackRange, AttackSettings
from raidbot.combat.clear import AreaClearer

__all__ = [
    "AreaClearer",
    "AttackCoordinator",
    "AttackRange",
    "AttackSettings",
    "AttackState",
    "MonsterStateTracker",
    "find_safe_position",
]
