#!/usr/bin/env python3
"""
ReqRes Bridge -- ReqRes login proxy with locally persisted users and posts.

Usage:
  python main.py serve
  python main.py serve --host 127.0.0.1 --port 9000 --reload
  python main.py import 1 2 3

Environment variables (or .env):
  REQRES_URL       Base URL of the identity provider, e.g. https://reqres.in/api
  REQRES_API_KEY   Value sent in the x-api-key header
  DATABASE_URL     SQLAlchemy URL of the local store (default: SQLite file)
"""

import argparse
import logging
import sys

from core.config import get_settings
from core.errors import ServiceError
from identity.store import IdentityStore
from users.service import import_user


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "asgi:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _import(args: argparse.Namespace) -> int:
    """Import each id in turn; keep going past failures, exit 1 if any failed."""
    settings = get_settings()
    store = IdentityStore(settings.database_url)
    failed = 0
    try:
        for user_id in args.ids:
            try:
                user = import_user(store, settings, user_id)
            except ServiceError as e:
                print(f"  [!] {user_id}: {e.message}")
                failed += 1
                continue
            print(f"  {user.id} {user.email} ({user.role})")
    finally:
        store.close()
    return 1 if failed else 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="reqres-bridge",
        description="ReqRes login proxy with locally persisted users and posts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve
  python main.py serve --port 9000 --reload
  python main.py import 1 2
  REQRES_URL=https://reqres.in/api python main.py import 7
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    serve.set_defaults(func=_serve)

    imp = sub.add_parser("import", help="Copy ReqRes users into the local store")
    imp.add_argument("ids", nargs="+", type=int, metavar="ID", help="ReqRes user id(s)")
    imp.set_defaults(func=_import)

    args = parser.parse_args()
    logging.basicConfig(level=get_settings().log_level.upper(), format="%(levelname)-5s %(name)s %(message)s")
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
