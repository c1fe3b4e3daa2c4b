"""Bot configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass

from raidbot.core.enums import Skill


@dataclass(frozen=True)
class BotConfig:
    """Immutable configuration for one bot session."""

    # Session
    name: str = "raidbot"
    seed: int = 42

    # Attack sequence
    attack_cycle_slack: float = 0.120      # Fire when cast duration minus this has elapsed
    attack_poll_interval: float = 0.05     # Max suspension while waiting for the next fire
    skill_select_delay: float = 0.01
    melee_range: int = 3                   # max_distance at or below this walks onto the target
    overshoot_distance: int = 9            # Push short moves this far past the chosen tile
    burst_timeout: float = 30.0

    # Stall / reposition (per-target bookkeeping)
    stall_threshold: float = 3.0
    damage_sample_interval: float = 0.1
    reposition_cooldown: float = 2.0
    reposition_distance: int = 4
    tracker_gc_threshold: int = 100        # Purge idle entries once the table exceeds this
    tracker_idle_ttl: float = 300.0

    # Path following
    move_tolerance: int = 4
    move_timeout: float = 30.0
    idle_threshold: float = 1.5
    wait_poll_interval: float = 0.1
    walk_interval_ms: tuple = (600, 1200)
    tolerance_widen_distance: int = 20     # Widen tolerance only below this remaining distance
    no_path_grace: int = 5                 # No path but within tolerance + grace counts as arrived
    monster_check_interval: float = 0.1
    clear_path_dist: int = 10

    # Orchestration
    area_sync_attempts: int = 10
    area_sync_delay: float = 0.1
    monster_handle_cooldown: float = 0.5
    max_path_engagements: int = 10
    max_movement_rounds: int = 5
    loot_radius: int = 25
    entrance_attempts: int = 3
    entrance_far_distance: int = 7
    entrance_click_distance: int = 3
    entrance_click_delay: float = 0.8
    entrance_retry_delay: float = 1.0
    entrance_max_depth: int = 3
    entrance_distance_override: int = 7

    # Area clearing (attack profile used when monsters block the path)
    attack_skill: int = Skill.NONE         # NONE = primary (left click) attack
    attack_min_distance: int = 1
    attack_max_distance: int = 3
    attack_follow: bool = True
    attacks_per_round: int = 3
    max_attack_loops: int = 20
    clear_through_max_steps: int = 50

    # Kiting (0 disables)
    kite_danger_distance: int = 0
    kite_safe_distance: int = 10
    kite_cooldown: float = 1.0

    # Sandbox
    sandbox_width: int = 64                # Width of the wilderness area
    sandbox_height: int = 40
    sandbox_monsters: int = 6
    player_damage: int = 12
    monster_life: int = 40
    walk_speed: float = 8.0                # Tiles per second while walking
    teleport_range: int = 10
    use_teleport: bool = False
    area_load_delay: float = 0.2           # Sandbox lag between entering an area and its data loading

    # Demo session
    session_clear_radius: int = 40         # Radius cleared after arriving in each area

    # Logging
    log_level: str = "INFO"
