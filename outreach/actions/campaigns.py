from outreach.auth import AuthContext, require_org, require_super_admin
from outreach.serializers.campaigns import (
    CampaignRequestCreateSerializer, CampaignRequestListQuerySerializer, CampaignRequestProcessSerializer,
)
from outreach.services import audit
from outreach.services import campaigns as campaign_service
from outreach.services.views_cache import revalidate_path

from .base import unwrap, unwrap_or_none, validate


def get_campaign_by_id(ctx: AuthContext, campaign_id):
    ctx = require_org(ctx)
    return unwrap_or_none(campaign_service.get_by_id(campaign_id, ctx.org_id))


def get_all_campaigns_for_org(ctx: AuthContext):
    ctx = require_org(ctx)
    return unwrap(campaign_service.get_all_by_org(ctx.org_id))


def request_campaign(ctx: AuthContext, data):
    ctx = require_org(ctx)
    v = validate(CampaignRequestCreateSerializer, data)
    result = campaign_service.create_request(
        org_id=ctx.org_id,
        requested_by=ctx.user_id,
        name=v['name'],
        description=v['description'],
        direction=v['direction'],
        main_goal=v.get('mainGoal', ''),
        desired_analysis=v.get('desiredAnalysis'),
        example_sheets=[dict(s) for s in v.get('exampleSheets') or []],
    )
    req = unwrap(result)
    audit.log_action(user_id=ctx.user_id, action='campaign_request.create',
                     object_type='campaign_request', object_id=req.get('id'))
    revalidate_path('/campaigns')
    return req


def get_all_campaign_requests(ctx: AuthContext, params=None):
    ctx = require_org(ctx)
    v = validate(CampaignRequestListQuerySerializer, params)
    return unwrap(campaign_service.get_requests(org_id=ctx.org_id, **v))


def process_campaign_request(ctx: AuthContext, data):
    ctx = require_super_admin(ctx)
    v = validate(CampaignRequestProcessSerializer, data)
    req = unwrap(campaign_service.process_request(
        request_id=v['requestId'],
        status=v['status'],
        admin_notes=v.get('adminNotes', ''),
        resulting_campaign_id=v.get('resultingCampaignId'),
    ))
    audit.log_action(user_id=ctx.user_id, action='campaign_request.process',
                     object_type='campaign_request', object_id=v['requestId'],
                     detail={'status': v['status']})
    revalidate_path('/campaigns', '/admin/campaign-requests')
    return req
