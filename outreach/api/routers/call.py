from outreach.actions import calls as call_actions
from outreach.rpc import ORG, Router, mutation, query

from ._inputs import input_id


@query(guard=ORG)
def get_all(ctx, input):
    return call_actions.get_calls(ctx, input)


@query(guard=ORG)
def get_by_id(ctx, input):
    return call_actions.get_call(ctx, input_id(input))


@mutation(guard=ORG)
def create(ctx, input):
    return call_actions.create_manual_call(ctx, input)


router = Router({
    'getAll': get_all,
    'getById': get_by_id,
    'create': create,
})
