from outreach.actions import runs as run_actions
from outreach.rpc import ORG, Router, mutation, query

from ._inputs import input_id


@query(guard=ORG)
def get_all(ctx, input):
    return run_actions.get_runs(ctx, input)


@query(guard=ORG)
def get_by_id(ctx, input):
    return run_actions.get_run(ctx, input_id(input))


@query(guard=ORG)
def get_rows(ctx, input):
    return run_actions.get_run_rows(ctx, input)


@mutation(guard=ORG)
def create(ctx, input):
    return run_actions.create_run(ctx, input)


@mutation(guard=ORG)
def start(ctx, input):
    return run_actions.start_run(ctx, input)


@mutation(guard=ORG)
def pause(ctx, input):
    return run_actions.pause_run(ctx, input)


@mutation(guard=ORG)
def upload_file(ctx, input):
    return run_actions.upload_run_file(ctx, input)


router = Router({
    'getAll': get_all,
    'getById': get_by_id,
    'getRows': get_rows,
    'create': create,
    'start': start,
    'pause': pause,
    'uploadFile': upload_file,
})
