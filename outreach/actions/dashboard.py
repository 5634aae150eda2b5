from django.conf import settings

from outreach.auth import AuthContext, require_org
from outreach.services import dashboard as dashboard_service
from outreach.services.views_cache import cached_view_data

from .base import unwrap


def get_dashboard_stats(ctx: AuthContext):
    ctx = require_org(ctx)
    # cached per organization until a mutation revalidates "/"
    return cached_view_data(
        '/', ('stats', ctx.org_id),
        lambda: unwrap(dashboard_service.get_org_stats(ctx.org_id)),
        settings.VIEW_CACHE_TTL,
    )
