"""
api/limiter.py -- Rate limit policy for ReqRes Bridge.

One Limiter instance is shared by api/main.py (mounted through
SlowAPIMiddleware) and the routers that carry per-route limits. Counters are
kept in process memory and keyed by client IP, so they reset on restart and
are not shared between workers.

Limits:
  LOGIN_LIMIT -- POST /auth/login. Each attempt costs an identity provider
                 round trip, so it is the tightest limit.
  STATS_LIMIT -- GET /stats. Four database reads per call.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

LOGIN_LIMIT = "10/minute"
STATS_LIMIT = "60/minute"

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
