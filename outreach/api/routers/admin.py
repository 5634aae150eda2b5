from outreach.actions import admin as admin_actions
from outreach.rpc import SUPER_ADMIN, Router, mutation, query

from ._inputs import input_id


@query(guard=SUPER_ADMIN)
def get_dashboard_stats(ctx, input):
    return admin_actions.get_dashboard_stats(ctx)


@query(guard=SUPER_ADMIN)
def get_recent_calls(ctx, input):
    return admin_actions.get_recent_calls(ctx, input)


@query(guard=SUPER_ADMIN)
def get_organizations(ctx, input):
    return admin_actions.get_organizations(ctx, input)


@query(guard=SUPER_ADMIN)
def get_organization(ctx, input):
    return admin_actions.get_organization(ctx, input_id(input))


@mutation(guard=SUPER_ADMIN)
def create_organization(ctx, input):
    return admin_actions.create_organization(ctx, input)


@query(guard=SUPER_ADMIN)
def get_campaigns(ctx, input):
    return admin_actions.get_all_campaigns(ctx)


@query(guard=SUPER_ADMIN)
def get_campaign(ctx, input):
    return admin_actions.get_campaign(ctx, input_id(input))


@query(guard=SUPER_ADMIN)
def get_campaign_requests(ctx, input):
    return admin_actions.get_campaign_requests(ctx, input)


@mutation(guard=SUPER_ADMIN)
def create_campaign(ctx, input):
    return admin_actions.create_campaign(ctx, input)


router = Router({
    'getDashboardStats': get_dashboard_stats,
    'getRecentCalls': get_recent_calls,
    'getOrganizations': get_organizations,
    'getOrganization': get_organization,
    'createOrganization': create_organization,
    'getCampaigns': get_campaigns,
    'getCampaign': get_campaign,
    'getCampaignRequests': get_campaign_requests,
    'createCampaign': create_campaign,
})
