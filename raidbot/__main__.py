"""Entry point: ``python -m raidbot``.

Supports two modes:
  - ``python -m raidbot``            → Serve the control API with a live sandbox session
  - ``python -m raidbot cli``        → Run one sandbox session headless
"""

from __future__ import annotations

import argparse
import logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Combat and movement coordination engine")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI control server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--seed", type=int, default=42)
    srv.add_argument("--monsters", type=int, default=6)
    srv.add_argument("--teleport", action="store_true", help="Move with teleport outside town")
    srv.add_argument("--no-autostart", action="store_true", help="Wait for POST /control/start")
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Run a headless sandbox session")
    cli.add_argument("--seed", type=int, default=42)
    cli.add_argument("--monsters", type=int, default=6)
    cli.add_argument("--teleport", action="store_true", help="Move with teleport outside town")
    cli.add_argument("--realtime", action="store_true", help="Wait in wall-clock time instead of simulated time")
    cli.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    return parser


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from raidbot.api.app import create_app
    from raidbot.config import BotConfig

    config = BotConfig(
        seed=args.seed,
        sandbox_monsters=args.monsters,
        use_teleport=args.teleport,
        log_level=args.log_level,
    )
    app = create_app(config, autostart=not args.no_autostart)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_cli(args: argparse.Namespace) -> int:
    from raidbot.config import BotConfig
    from raidbot.core.clock import Clock, SimulatedClock
    from raidbot.engine.session import BotSession, SessionPhase
    from raidbot.utils.logging import setup_logging

    config = BotConfig(
        seed=args.seed,
        sandbox_monsters=args.monsters,
        use_teleport=args.teleport,
        log_level=args.log_level,
    )
    setup_logging(config.log_level)

    clock = Clock() if args.realtime else SimulatedClock()
    session = BotSession(config, clock=clock)
    started = clock.now()
    phase = session.run()

    logger.info(
        "Done: %s in %s with %d gold after %.1fs (%d events)",
        phase.value, session.world.player.area.name, session.world.gold,
        clock.now() - started,
        len(session.ctx.event_log),
    )
    return 0 if phase == SessionPhase.FINISHED else 1


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None or args.command == "serve":
        if args.command is None:
            args = parser.parse_args(["serve"])
        _run_server(args)
    elif args.command == "cli":
        raise SystemExit(_run_cli(args))


if __name__ == "__main__":
    main()
