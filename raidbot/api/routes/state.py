"""GET /api/v1/state and /api/v1/events — live session data (polled by UI)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from raidbot.api.dependencies import get_session_manager
from raidbot.api.schemas import (
    AttackStateSchema,
    EventSchema,
    EventsResponse,
    MonsterSchema,
    PlayerSchema,
    PositionSchema,
    SessionStateResponse,
)
from raidbot.engine.session_manager import SessionManager

router = APIRouter()


@router.get("/state", response_model=SessionStateResponse)
def get_state(
    manager: SessionManager = Depends(get_session_manager),
) -> SessionStateResponse:
    state = manager.get_state()
    p = state.player
    return SessionStateResponse(
        phase=state.phase.value,
        running=state.running,
        paused=state.paused,
        timestamp=state.timestamp,
        loaded_area=state.loaded_area,
        current_step=state.current_step,
        error=state.error,
        player=PlayerSchema(
            x=p.position.x, y=p.position.y, area=p.area.name,
            hp_percent=p.hp_percent, right_skill=p.right_skill.name,
            gold=state.gold, alive=p.alive,
        ),
        monsters=[
            MonsterSchema(
                unit_id=m.unit_id, name=m.name, x=m.position.x, y=m.position.y,
                life=m.life, max_life=m.max_life, monster_type=m.monster_type.name.lower(),
            )
            for m in state.monsters
        ],
        attack_states=[
            AttackStateSchema(
                unit_id=uid,
                last_health=a.last_health,
                last_health_check=a.last_health_check,
                stall_started_at=a.stall_started_at,
                last_reposition=a.last_reposition,
                reposition_attempts=a.reposition_attempts,
                position=PositionSchema(x=a.position.x, y=a.position.y),
            )
            for uid, a in sorted(state.attack_states.items())
        ],
    )


@router.get("/events", response_model=EventsResponse)
def get_events(
    limit: int = Query(50, ge=1, le=1000, description="Most recent events to return"),
    category: str | None = Query(None, description="Only events of this category"),
    manager: SessionManager = Depends(get_session_manager),
) -> EventsResponse:
    log = manager.event_log
    events = log.by_category(category)[-limit:] if category else log.latest(limit)
    return EventsResponse(
        count=len(events),
        events=[
            EventSchema(
                timestamp=e.timestamp, category=e.category,
                message=e.message, unit_ids=list(e.unit_ids),
            )
            for e in events
        ],
    )
