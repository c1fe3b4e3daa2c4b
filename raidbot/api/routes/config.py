"""GET /api/v1/config — expose bot configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from raidbot.api.dependencies import get_session_manager
from raidbot.api.schemas import BotConfigResponse
from raidbot.core.enums import Skill
from raidbot.engine.session_manager import SessionManager

router = APIRouter()


@router.get("/config", response_model=BotConfigResponse)
def get_config(
    manager: SessionManager = Depends(get_session_manager),
) -> BotConfigResponse:
    cfg = manager.config
    return BotConfigResponse(
        name=cfg.name,
        seed=cfg.seed,
        move_tolerance=cfg.move_tolerance,
        move_timeout=cfg.move_timeout,
        stall_threshold=cfg.stall_threshold,
        reposition_cooldown=cfg.reposition_cooldown,
        damage_sample_interval=cfg.damage_sample_interval,
        clear_path_dist=cfg.clear_path_dist,
        loot_radius=cfg.loot_radius,
        monster_handle_cooldown=cfg.monster_handle_cooldown,
        attack_skill=Skill(cfg.attack_skill).name,
        attack_min_distance=cfg.attack_min_distance,
        attack_max_distance=cfg.attack_max_distance,
        use_teleport=cfg.use_teleport,
        sandbox_width=cfg.sandbox_width,
        sandbox_height=cfg.sandbox_height,
        sandbox_monsters=cfg.sandbox_monsters,
    )
