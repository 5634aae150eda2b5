from outreach.auth import AuthContext, require_org
from outreach.serializers.calls import (
    CallListQuerySerializer, ManualCallCreateSerializer, PatientCallsQuerySerializer,
)
from outreach.services import audit
from outreach.services import calls as call_service
from outreach.services.views_cache import revalidate_path

from .base import unwrap, unwrap_or_none, validate


def get_calls(ctx: AuthContext, params=None):
    ctx = require_org(ctx)
    v = validate(CallListQuerySerializer, params)
    return unwrap(call_service.get_all(
        ctx.org_id,
        limit=v['limit'],
        offset=v['offset'],
        patient_id=v.get('patientId'),
        run_id=v.get('runId'),
        campaign_id=v.get('campaignId'),
        status=v.get('status'),
        direction=v.get('direction'),
        search=v.get('search', ''),
    ))


def get_call(ctx: AuthContext, call_id):
    ctx = require_org(ctx)
    return unwrap_or_none(call_service.get_by_id(ctx.org_id, call_id))


def get_patient_calls(ctx: AuthContext, patient_id, limit=10):
    ctx = require_org(ctx)
    v = validate(PatientCallsQuerySerializer, {'patientId': patient_id, 'limit': limit})
    return unwrap(call_service.get_patient_calls(ctx.org_id, v['patientId'], v['limit']))


def create_manual_call(ctx: AuthContext, data):
    ctx = require_org(ctx)
    v = validate(ManualCallCreateSerializer, data)
    patient_id = str(v['patientId'])
    call = unwrap(call_service.create_manual_call(
        org_id=ctx.org_id,
        patient_id=patient_id,
        agent_id=v['agentId'],
        campaign_id=str(v['campaignId']) if v.get('campaignId') else None,
        variables=v['variables'],
    ))
    audit.log_action(user_id=ctx.user_id, action='call.create', object_type='call', object_id=call.get('id'))
    revalidate_path(f'/patients/{patient_id}', '/calls')
    return call
