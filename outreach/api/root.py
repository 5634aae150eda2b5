"""
The application router: every namespace the RPC endpoint and the
in-process caller can reach.  Built once at import and read-only after.
"""
from outreach.rpc import create_caller_factory, create_router

from .routers import admin, call, campaign, dashboard, organization, patient, run

app_router = create_router({
    'organization': organization.router,
    'campaign': campaign.router,
    'run': run.router,
    'patient': patient.router,
    'call': call.router,
    'admin': admin.router,
    'dashboard': dashboard.router,
})

create_caller = create_caller_factory(app_router)
