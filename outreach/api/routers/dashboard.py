from outreach.actions import dashboard as dashboard_actions
from outreach.rpc import ORG, Router, query


@query(guard=ORG)
def get_stats(ctx, input):
    return dashboard_actions.get_dashboard_stats(ctx)


router = Router({
    'getStats': get_stats,
})
