"""Rate limiter instance for SlowAPI.

Shared so main (app.state.limiter) and the route modules use the same
instance. Limit strings live here.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

WRITE_ENDPOINT_LIMIT = "120/minute"
RUN_WORKFLOW_LIMIT = "30/minute"

limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
limit_runs = limiter.limit(RUN_WORKFLOW_LIMIT)
