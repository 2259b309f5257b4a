# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - sessions.py: Academic-session administration (active session,
#   provisioning, rollover, archive)
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import sessions

__all__ = [
    "health",
    "sessions",
]
