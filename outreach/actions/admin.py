"""
Super-admin actions.  Every function checks the caller before touching
validation or services.
"""
from outreach.auth import AuthContext, require_super_admin
from outreach.serializers.admin import (
    CampaignCreateSerializer, OrganizationCreateSerializer, OrganizationListQuerySerializer,
    RecentCallsQuerySerializer,
)
from outreach.serializers.campaigns import CampaignRequestListQuerySerializer
from outreach.services import audit
from outreach.services import campaigns as campaign_service
from outreach.services import dashboard as dashboard_service
from outreach.services import organizations as organization_service
from outreach.services.views_cache import revalidate_path

from .base import unwrap, unwrap_or_none, validate


def get_dashboard_stats(ctx: AuthContext):
    require_super_admin(ctx)
    return unwrap(dashboard_service.get_stats())


def get_recent_calls(ctx: AuthContext, params=None):
    require_super_admin(ctx)
    v = validate(RecentCallsQuerySerializer, params if params is not None else {'limit': 10})
    return unwrap(dashboard_service.get_recent_calls(**v))


def get_organizations(ctx: AuthContext, params=None):
    require_super_admin(ctx)
    v = validate(OrganizationListQuerySerializer, params)
    return unwrap(organization_service.get_all(**v))


def get_organization(ctx: AuthContext, org_id):
    require_super_admin(ctx)
    return unwrap_or_none(organization_service.get_by_id(org_id))


def create_organization(ctx: AuthContext, data):
    ctx = require_super_admin(ctx)
    v = validate(OrganizationCreateSerializer, data)
    hours = v.get('officeHours')
    org = unwrap(organization_service.create(
        name=v['name'],
        external_id=v['externalId'],
        phone=v.get('phone', ''),
        timezone=v.get('timezone'),
        concurrent_call_limit=v.get('concurrentCallLimit'),
        is_super_admin=v['isSuperAdmin'],
        office_hours={k: (dict(d) if d else None) for k, d in hours.items()} if hours else None,
    ))
    audit.log_action(user_id=ctx.user_id, action='organization.create', object_type='organization',
                     object_id=org.get('id'))
    revalidate_path('/admin/organizations')
    return org


def get_all_campaigns(ctx: AuthContext):
    require_super_admin(ctx)
    return unwrap(campaign_service.get_all())


def get_campaign(ctx: AuthContext, campaign_id):
    require_super_admin(ctx)
    return unwrap_or_none(campaign_service.get_by_id(campaign_id))


def get_campaign_requests(ctx: AuthContext, params=None):
    require_super_admin(ctx)
    v = validate(CampaignRequestListQuerySerializer, params)
    return unwrap(campaign_service.get_requests(**v))


def create_campaign(ctx: AuthContext, data):
    ctx = require_super_admin(ctx)
    v = validate(CampaignCreateSerializer, data)
    campaign = unwrap(campaign_service.create(
        org_id=str(v['orgId']),
        name=v['name'],
        description=v.get('description', ''),
        agent_id=v['agentId'],
        llm_id=v['llmId'],
        direction=v['direction'],
        base_prompt=v['basePrompt'],
        voicemail_message=v.get('voicemailMessage', ''),
        variables_config=v['variablesConfig'],
        analysis_config=v['analysisConfig'],
        request_id=str(v['requestId']) if v.get('requestId') else None,
        created_by=ctx.user_id,
    ))
    audit.log_action(user_id=ctx.user_id, action='campaign.create', object_type='campaign',
                     object_id=campaign.get('id'))
    revalidate_path('/admin/campaigns', '/campaigns')
    return campaign
