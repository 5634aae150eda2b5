from outreach.actions import campaigns as campaign_actions
from outreach.rpc import ORG, SUPER_ADMIN, Router, mutation, query

from ._inputs import input_id


@query(guard=ORG)
def get_all(ctx, input):
    return campaign_actions.get_all_campaigns_for_org(ctx)


@query(guard=ORG)
def get_by_id(ctx, input):
    return campaign_actions.get_campaign_by_id(ctx, input_id(input))


@query(guard=ORG)
def get_requests(ctx, input):
    return campaign_actions.get_all_campaign_requests(ctx, input)


@mutation(guard=ORG)
def request(ctx, input):
    return campaign_actions.request_campaign(ctx, input)


@mutation(guard=SUPER_ADMIN)
def process_request(ctx, input):
    return campaign_actions.process_campaign_request(ctx, input)


router = Router({
    'getAll': get_all,
    'getById': get_by_id,
    'getRequests': get_requests,
    'request': request,
    'processRequest': process_request,
})
