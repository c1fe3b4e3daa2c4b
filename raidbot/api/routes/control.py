"""POST /api/v1/control/{action} — session lifecycle controls."""

from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, Depends

from raidbot.api.dependencies import get_session_manager
from raidbot.api.schemas import ControlResponse
from raidbot.engine.session_manager import SessionManager

router = APIRouter()


class ControlAction(str, Enum):
    start = "start"
    pause = "pause"
    resume = "resume"
    stop = "stop"
    reset = "reset"


@router.post("/control/{action}", response_model=ControlResponse)
def control(
    action: ControlAction,
    manager: SessionManager = Depends(get_session_manager),
) -> ControlResponse:
    match action:
        case ControlAction.start:
            if not manager.start():
                return _response(manager, "noop", "Session already started; reset to run again.")
            return _response(manager, "ok", "Session started.")

        case ControlAction.pause:
            if not manager.running:
                return _response(manager, "error", "Not running.")
            manager.pause()
            return _response(manager, "ok", "Session paused.")

        case ControlAction.resume:
            if not manager.running:
                return _response(manager, "error", "Not running.")
            manager.resume()
            return _response(manager, "ok", "Session resumed.")

        case ControlAction.stop:
            if not manager.running:
                return _response(manager, "noop", "Not running.")
            manager.stop()
            return _response(manager, "ok", "Session stopped.")

        case ControlAction.reset:
            manager.reset()
            return _response(manager, "ok", "Session reset.")


def _response(manager: SessionManager, status: str, message: str) -> ControlResponse:
    return ControlResponse(status=status, message=message, phase=manager.session.phase.value)
