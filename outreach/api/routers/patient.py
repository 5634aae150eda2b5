from outreach.actions import calls as call_actions
from outreach.actions import patients as patient_actions
from outreach.actions.base import validate
from outreach.rpc import ORG, Router, mutation, query
from outreach.serializers.calls import PatientCallsQuerySerializer

from ._inputs import input_id


@query(guard=ORG)
def get_all(ctx, input):
    return patient_actions.get_patients(ctx, input)


@query(guard=ORG)
def get_by_id(ctx, input):
    return patient_actions.get_patient(ctx, input_id(input))


@query(guard=ORG)
def get_calls(ctx, input):
    v = validate(PatientCallsQuerySerializer, input)
    return call_actions.get_patient_calls(ctx, v['patientId'], v['limit'])


@mutation(guard=ORG)
def create(ctx, input):
    return patient_actions.create_patient(ctx, input)


router = Router({
    'getAll': get_all,
    'getById': get_by_id,
    'getCalls': get_calls,
    'create': create,
})
