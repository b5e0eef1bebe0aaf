"""
api/routes/stats.py -- Aggregated counts for dashboard widgets.

Returns a single payload:
  - Total saved users and total posts
  - The 3 newest users and the 3 newest posts

This is a read-only aggregate route -- no mutations here. The four reads run
concurrently (see identity/stats.py), so the handler is async.
"""

from fastapi import APIRouter, Request

from api.limiter import STATS_LIMIT, limiter
from api.models import ApiResponse, StatsResponse
from identity.stats import gather_stats

router = APIRouter()


@limiter.limit(STATS_LIMIT)
@router.get("/stats", response_model=ApiResponse[StatsResponse])
async def get_stats(request: Request) -> ApiResponse[StatsResponse]:
    stats = await gather_stats(request.app.state.store)
    return ApiResponse[StatsResponse].ok(StatsResponse.from_stats(stats))
