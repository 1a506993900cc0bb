# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - admin_assets.py: Asset moderation (approve/reject) and admin asset edits
# - contributors.py: Contributor applications and their review
# - assets.py: Asset submission
# - plans.py: Subscription plans and subscribing
# - admin.py: Site settings and the admin dashboard
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import admin_assets
from . import contributors
from . import assets
from . import plans
from . import admin

__all__ = [
    "health",
    "admin_assets",
    "contributors",
    "assets",
    "plans",
    "admin",
]
