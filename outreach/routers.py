"""
URL mappings for the outreach API.

Besides login and health checks, everything goes through the single RPC
endpoint; ``<namespace>.<procedure>`` picks the procedure.  The campaign
create sheet posts to a plain form view.  Trailing slashes are omitted
throughout.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view
from .views import campaigns, health
from .views.rpc import rpc_view

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    path('api/rpc/<str:path>', rpc_view, name='rpc'),
    path('campaigns/new', campaigns.create_campaign, name='campaign_create'),
]
