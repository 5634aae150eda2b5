from typing import Any, Dict

from django.db.models import Count

from outreach.models import Call, Campaign, CampaignRequest, Organization, Run
from outreach.results import ServiceResult, create_success, handle_service_error
from outreach.services.calls import format_call
from outreach.services.campaigns import format_request


def get_stats() -> ServiceResult:
    """Platform-wide counters for the admin overview."""
    try:
        top = (Call.objects.values('organization_id')
               .annotate(call_count=Count('id'))
               .order_by('-call_count')[:5])
        names = dict(Organization.objects
                     .filter(id__in=[t['organization_id'] for t in top])
                     .values_list('id', 'name'))
        top_orgs = [
            {'id': str(t['organization_id']), 'name': names[t['organization_id']], 'callCount': t['call_count']}
            for t in top if t['organization_id'] in names
        ]
        recent = CampaignRequest.objects.order_by('-created_at')[:5]
        return create_success({
            'counts': {
                'organizations': Organization.objects.filter(is_super_admin=False).count(),
                'campaigns': Campaign.objects.count(),
                'runs': Run.objects.count(),
                'calls': Call.objects.count(),
                'pendingRequests': CampaignRequest.objects.filter(status='pending').count(),
            },
            'recentRequests': [format_request(r) for r in recent],
            'topOrganizations': top_orgs,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch dashboard stats')


def get_recent_calls(*, limit: int = 50, offset: int = 0) -> ServiceResult:
    try:
        qs = Call.objects.select_related('organization', 'patient', 'campaign').order_by('-created_at')
        total = qs.count()
        items = []
        for call in qs[offset:offset + limit]:
            items.append({
                'call': format_call(call),
                'organization': {'id': str(call.organization_id), 'name': call.organization.name},
            })
        return create_success({
            'calls': items,
            'totalCount': total,
            'hasMore': offset + limit < total,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch recent calls')


def get_org_stats(org_id: str) -> ServiceResult:
    """Counters shown on an organization's home page."""
    try:
        calls = Call.objects.filter(organization_id=org_id)
        data: Dict[str, Any] = {
            'totalCampaigns': Campaign.objects.filter(organization_id=org_id).count(),
            'activeRuns': Run.objects.filter(organization_id=org_id, status__in=Run.ACTIVE_STATUSES).count(),
            'completedCalls': calls.filter(status='completed').count(),
            'totalPatients': calls.exclude(patient_id=None).values('patient_id').distinct().count(),
            'callsByStatus': {
                row['status']: row['n'] for row in calls.values('status').annotate(n=Count('id'))
            },
        }
        return create_success(data)
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch dashboard stats')
