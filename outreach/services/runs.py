"""
Run lifecycle: listing, row pages, creation and the start/pause transitions.

Status changes are pushed to the organization's channel group as
``run.updated`` events so open run pages refresh without polling.
"""
import logging
import math
from typing import Any, Dict, Optional

from django.db.models import Count, Q
from django.utils import timezone

from outreach.models import Campaign, Row, Run
from outreach.results import (
    BAD_REQUEST, NOT_FOUND, ServiceResult, create_error, create_success, handle_service_error,
)
from outreach.services.campaigns import format_campaign, format_template
from outreach.services.patients import format_patient
from outreach.services.realtime import org_group, publish

logger = logging.getLogger(__name__)

ROW_STATUSES = [s for s, _ in Row.STATUS_CHOICES]


def format_run(run: Run) -> Dict[str, Any]:
    return {
        'id': str(run.id),
        'campaignId': str(run.campaign_id),
        'orgId': str(run.organization_id),
        'name': run.name,
        'customPrompt': run.custom_prompt,
        'customVoicemailMessage': run.custom_voicemail_message,
        'status': run.status,
        'metadata': run.metadata,
        'scheduledAt': run.scheduled_at.isoformat() if run.scheduled_at else None,
        'createdAt': run.created_at.isoformat(),
        'updatedAt': run.updated_at.isoformat(),
    }


def format_row(row: Row) -> Dict[str, Any]:
    return {
        'id': str(row.id),
        'runId': str(row.run_id),
        'orgId': str(row.organization_id),
        'patientId': str(row.patient_id) if row.patient_id else None,
        'variables': row.variables,
        'status': row.status,
        'error': row.error or None,
        'sortIndex': row.sort_index,
        'retryCount': row.retry_count,
        'metadata': row.metadata,
        'createdAt': row.created_at.isoformat(),
        'patient': format_patient(row.patient) if row.patient_id else None,
    }


def initial_metadata(extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    meta = {
        'rows': {'total': 0, 'invalid': 0},
        'calls': {
            'total': 0, 'completed': 0, 'failed': 0, 'calling': 0, 'pending': 0,
            'skipped': 0, 'voicemail': 0, 'connected': 0, 'converted': 0,
        },
        'run': {'createdAt': timezone.now().isoformat()},
    }
    meta.update(extra or {})
    return meta


def get_all(*, campaign_id: str, org_id: str, limit: int = 20, offset: int = 0) -> ServiceResult:
    try:
        qs = Run.objects.filter(campaign_id=campaign_id, organization_id=org_id)
        total = qs.count()
        page = qs.order_by('-created_at')[offset:offset + limit]
        return create_success({
            'runs': [format_run(r) for r in page],
            'totalCount': total,
            'hasMore': offset + limit < total,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch runs')


def get_by_id(run_id: str, org_id: str) -> ServiceResult:
    try:
        run = (Run.objects.select_related('campaign__template')
               .filter(id=run_id, organization_id=org_id).first())
        if run is None:
            return create_error(NOT_FOUND, 'Run not found')
        data = format_run(run)
        campaign = format_campaign(run.campaign)
        template = format_template(run.campaign.template)
        campaign['config'] = template['config'] if template else {'basePrompt': ''}
        data['campaign'] = campaign
        return create_success(data)
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch run')


def get_run_rows(*, run_id: str, org_id: str, limit: int = 50, offset: int = 0,
                 filter: str = '') -> ServiceResult:
    try:
        base = Row.objects.filter(run_id=run_id, organization_id=org_id)
        qs = base.select_related('patient')
        if filter:
            qs = qs.filter(
                Q(patient__first_name__icontains=filter)
                | Q(patient__last_name__icontains=filter)
                | Q(patient__primary_phone__icontains=filter)
            )
        total = qs.count()
        counts = {s: 0 for s in ROW_STATUSES}
        for item in base.values('status').annotate(n=Count('id')):
            if item['status'] in counts:
                counts[item['status']] = item['n']
        counts['total'] = base.count()
        page = qs[offset:offset + limit]
        return create_success({
            'rows': [format_row(r) for r in page],
            'pagination': {
                'page': offset // limit + 1,
                'pageSize': limit,
                'totalPages': math.ceil(total / limit),
                'totalItems': total,
            },
            'counts': counts,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch run rows')


def create_run(*, campaign_id: str, org_id: str, name: str, custom_prompt: str = '',
               custom_voicemail_message: str = '', scheduled_at=None,
               metadata: Optional[Dict[str, Any]] = None) -> ServiceResult:
    try:
        if not Campaign.objects.filter(id=campaign_id, organization_id=org_id).exists():
            return create_error(NOT_FOUND, 'Campaign not found')
        run = Run.objects.create(
            campaign_id=campaign_id,
            organization_id=org_id,
            name=name,
            status='draft',
            custom_prompt=custom_prompt,
            custom_voicemail_message=custom_voicemail_message,
            metadata=initial_metadata(metadata),
            scheduled_at=scheduled_at,
        )
        logger.info('run %s created for campaign %s', run.id, campaign_id)
        return create_success(format_run(run))
    except Exception as e:
        return handle_service_error(e, 'Failed to create run')


def publish_status(run: Run, **extra) -> None:
    publish(org_group(str(run.organization_id)), {
        'type': 'run.updated',
        'runId': str(run.id),
        'status': run.status,
        'metadata': run.metadata,
        **extra,
    })


def start(run_id: str, org_id: str) -> ServiceResult:
    try:
        run = Run.objects.filter(id=run_id, organization_id=org_id).first()
        if run is None:
            return create_error(NOT_FOUND, 'Run not found')
        if run.status not in Run.STARTABLE_STATUSES:
            return create_error(BAD_REQUEST, f'Run cannot be started from {run.status} status')
        meta = dict(run.metadata or {})
        run_meta = dict(meta.get('run') or {})
        run_meta.setdefault('startTime', timezone.now().isoformat())
        meta['run'] = run_meta
        run.status = 'running'
        run.metadata = meta
        run.save(update_fields=['status', 'metadata', 'updated_at'])
        publish_status(run)
        return create_success({'success': True, 'status': 'running'})
    except Exception as e:
        return handle_service_error(e, 'Failed to start run')


def pause(run_id: str, org_id: str) -> ServiceResult:
    try:
        run = Run.objects.filter(id=run_id, organization_id=org_id).first()
        if run is None:
            return create_error(NOT_FOUND, 'Run not found')
        if run.status != 'running':
            return create_error(BAD_REQUEST, f'Run cannot be paused from {run.status} status')
        paused_at = timezone.now().isoformat()
        meta = dict(run.metadata or {})
        meta['run'] = {**(meta.get('run') or {}), 'lastPausedAt': paused_at}
        run.status = 'paused'
        run.metadata = meta
        run.save(update_fields=['status', 'metadata', 'updated_at'])
        publish_status(run, reason='User paused run', pausedAt=paused_at)
        return create_success({'success': True, 'status': 'paused'})
    except Exception as e:
        return handle_service_error(e, 'Failed to pause run')
