"""Pydantic response models for the REST API."""

from __future__ import annotations

from pydantic import BaseModel


# --- State ---

class PositionSchema(BaseModel):
    x: int
    y: int


class PlayerSchema(BaseModel):
    x: int
    y: int
    area: str
    hp_percent: int
    right_skill: str
    gold: int = 0
    alive: bool = True


class MonsterSchema(BaseModel):
    unit_id: int
    name: str
    x: int
    y: int
    life: int
    max_life: int = 0
    monster_type: str = "normal"


class AttackStateSchema(BaseModel):
    unit_id: int
    last_health: int
    last_health_check: float
    stall_started_at: float | None = None
    last_reposition: float | None = None
    reposition_attempts: int = 0
    position: PositionSchema


class SessionStateResponse(BaseModel):
    phase: str
    running: bool
    paused: bool
    timestamp: float
    loaded_area: str
    current_step: str | None = None
    error: str | None = None
    player: PlayerSchema
    monsters: list[MonsterSchema]
    attack_states: list[AttackStateSchema]


# --- Events ---

class EventSchema(BaseModel):
    timestamp: float
    category: str
    message: str
    unit_ids: list[int] = []


class EventsResponse(BaseModel):
    count: int
    events: list[EventSchema]


# --- Control ---

class ControlResponse(BaseModel):
    status: str
    message: str
    phase: str


# --- Config ---

class BotConfigResponse(BaseModel):
    name: str
    seed: int
    move_tolerance: int
    move_timeout: float
    stall_threshold: float
    reposition_cooldown: float
    damage_sample_interval: float
    clear_path_dist: int
    loot_radius: int
    monster_handle_cooldown: float
    attack_skill: str
    attack_min_distance: int
    attack_max_distance: int
    use_teleport: bool
    sandbox_width: int
    sandbox_height: int
    sandbox_monsters: int
