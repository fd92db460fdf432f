from __future__ import annotations

import argparse
import logging
import sys

from app.core.config import db_configured, settings
from app.core.logging import configure_logging

logger = logging.getLogger("raffles.cli")


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _init_db(_: argparse.Namespace) -> int:
    if not db_configured():
        raise RuntimeError("DATABASE_URL or DB_HOST/DB_NAME/DB_USER/DB_PASSWORD is required")
    from app.services.migrations import run_migrations

    result = run_migrations()
    logger.info("Schema ready at %s", result["applied_at"].isoformat())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Raffle tickets API management")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=settings.port)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_serve)

    init_db = commands.add_parser("init-db", help="Create or update the database schema")
    init_db.set_defaults(func=_init_db)
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
