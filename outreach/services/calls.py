import logging
from typing import Any, Dict, Optional

from django.db.models import Q

from outreach.models import Call, Campaign, OrganizationPatient
from outreach.results import (
    BAD_REQUEST, NOT_FOUND, ServiceResult, create_error, create_success, handle_service_error,
)

logger = logging.getLogger(__name__)


def format_call(call: Call) -> Dict[str, Any]:
    patient = call.patient
    return {
        'id': str(call.id),
        'orgId': str(call.organization_id),
        'runId': str(call.run_id) if call.run_id else None,
        'campaignId': str(call.campaign_id) if call.campaign_id else None,
        'patientId': str(call.patient_id) if call.patient_id else None,
        'patient': {
            'firstName': patient.first_name,
            'lastName': patient.last_name,
        } if patient else None,
        'campaignName': call.campaign.name if call.campaign_id else None,
        'direction': call.direction,
        'status': call.status,
        'toNumber': call.to_number,
        'fromNumber': call.from_number,
        'duration': call.duration,
        'analysis': call.analysis,
        'error': call.error or None,
        'metadata': call.metadata,
        'createdAt': call.created_at.isoformat(),
    }


def _calls():
    return Call.objects.select_related('patient', 'campaign')


def get_all(org_id: str, *, limit: int = 50, offset: int = 0, patient_id=None, run_id=None,
            campaign_id=None, status: Optional[str] = None, direction: Optional[str] = None,
            search: str = '') -> ServiceResult:
    try:
        qs = _calls().filter(organization_id=org_id)
        if patient_id:
            qs = qs.filter(patient_id=patient_id)
        if run_id:
            qs = qs.filter(run_id=run_id)
        if campaign_id:
            qs = qs.filter(campaign_id=campaign_id)
        if status:
            qs = qs.filter(status=status)
        if direction:
            qs = qs.filter(direction=direction)
        if search:
            qs = qs.filter(
                Q(to_number__icontains=search)
                | Q(from_number__icontains=search)
                | Q(patient__first_name__icontains=search)
                | Q(patient__last_name__icontains=search)
            )
        total = qs.count()
        return create_success({
            'calls': [format_call(c) for c in qs[offset:offset + limit]],
            'totalCount': total,
            'hasMore': offset + limit < total,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch calls')


def get_by_id(org_id: str, call_id: str) -> ServiceResult:
    try:
        call = _calls().filter(organization_id=org_id, id=call_id).first()
        if call is None:
            return create_error(NOT_FOUND, 'Call not found')
        data = format_call(call)
        data['transcript'] = call.transcript
        return create_success(data)
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch call')


def get_patient_calls(org_id: str, patient_id: str, limit: int = 10) -> ServiceResult:
    try:
        qs = _calls().filter(organization_id=org_id, patient_id=patient_id)[:limit]
        return create_success([format_call(c) for c in qs])
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch patient calls')


def create_manual_call(*, org_id: str, patient_id: str, agent_id: str, campaign_id: Optional[str] = None,
                       variables: Optional[Dict[str, Any]] = None) -> ServiceResult:
    """Queue a one-off outbound call to a patient of ``org_id``."""
    try:
        link = (OrganizationPatient.objects.select_related('patient', 'organization')
                .filter(organization_id=org_id, patient_id=patient_id, is_active=True).first())
        if link is None:
            return create_error(NOT_FOUND, 'Patient not found')
        campaign = None
        if campaign_id:
            campaign = Campaign.objects.filter(id=campaign_id, organization_id=org_id).first()
            if campaign is None:
                return create_error(NOT_FOUND, 'Campaign not found')
        patient = link.patient
        if not patient.primary_phone:
            return create_error(BAD_REQUEST, 'Patient has no phone number')
        if not link.organization.phone:
            return create_error(BAD_REQUEST, 'Organization has no outbound phone number')
        call = Call.objects.create(
            organization_id=org_id,
            patient=patient,
            campaign=campaign,
            agent_id=agent_id,
            direction='outbound',
            status='pending',
            to_number=patient.primary_phone,
            from_number=link.organization.phone,
            metadata={'manual': True, 'variables': variables or {}},
        )
        logger.info('manual call %s queued for patient %s in org %s', call.id, patient.id, org_id)
        return create_success(format_call(call))
    except Exception as e:
        return handle_service_error(e, 'Failed to create call')
