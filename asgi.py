"""
asgi.py -- Application assembly for ReqRes Bridge.

The single import target for ASGI servers. api/main.py builds the app and
registers every router; this module only re-exports it so deployment
configuration never depends on the package layout.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import app

__all__ = ["app"]
