import logging
from typing import Any, Dict, Optional

import requests
from django.db.models import Count, Q

from outreach.exceptions import IntegrationError
from outreach.models import Organization, User
from outreach.results import (
    BAD_REQUEST, CONFLICT, INTERNAL_ERROR, NOT_FOUND, ServiceResult,
    create_error, create_success, handle_service_error,
)
from outreach.services import invitations

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    'name': 'name',
    'phone': 'phone',
    'timezone': 'timezone',
    'officeHours': 'office_hours',
    'concurrentCallLimit': 'concurrent_call_limit',
}


def normalize_office_hours(hours: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not hours:
        return hours
    return {**hours, 'saturday': hours.get('saturday'), 'sunday': hours.get('sunday')}


def format_organization(org: Organization) -> Dict[str, Any]:
    return {
        'id': str(org.id),
        'externalId': org.external_id,
        'name': org.name,
        'phone': org.phone,
        'timezone': org.timezone,
        'officeHours': org.office_hours,
        'concurrentCallLimit': org.concurrent_call_limit,
        'isSuperAdmin': org.is_super_admin,
        'createdAt': org.created_at.isoformat(),
        'updatedAt': org.updated_at.isoformat(),
    }


def format_member(user: User) -> Dict[str, Any]:
    return {
        'id': user.id,
        'externalId': user.external_id,
        'username': user.username,
        'email': user.email,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'role': user.role,
        'createdAt': user.date_joined.isoformat(),
    }


def get_current(org_id: str) -> ServiceResult:
    try:
        org = Organization.objects.filter(id=org_id).first()
        if org is None:
            return create_error(NOT_FOUND, 'Organization not found')
        return create_success(format_organization(org))
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch organization')


def update(org_id: str, changes: Dict[str, Any]) -> ServiceResult:
    """Apply camelCase ``changes`` to the organization.  Unknown keys are ignored."""
    try:
        org = Organization.objects.filter(id=org_id).first()
        if org is None:
            return create_error(NOT_FOUND, 'Organization not found')
        fields = []
        for key, attr in UPDATABLE_FIELDS.items():
            if key not in changes:
                continue
            value = changes[key]
            if key == 'officeHours':
                value = normalize_office_hours(value)
            setattr(org, attr, value)
            fields.append(attr)
        if fields:
            org.save(update_fields=fields + ['updated_at'])
        return create_success(format_organization(org))
    except Exception as e:
        return handle_service_error(e, 'Failed to update organization')


def get_members(organization_id: str, *, limit: int = 50, offset: int = 0) -> ServiceResult:
    try:
        qs = User.objects.filter(organization_id=organization_id).order_by('date_joined')
        total = qs.count()
        return create_success({
            'members': [format_member(u) for u in qs[offset:offset + limit]],
            'totalCount': total,
            'hasMore': offset + limit < total,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch organization members')


def is_super_admin(org_id: str) -> ServiceResult:
    try:
        org = Organization.objects.filter(id=org_id).only('is_super_admin').first()
        if org is None:
            return create_error(NOT_FOUND, 'Organization not found')
        return create_success(org.is_super_admin)
    except Exception as e:
        return handle_service_error(e, 'Failed to check super admin status')


def _provider_call(org_id: str, fn, failure_message: str, *args) -> ServiceResult:
    org = Organization.objects.filter(id=org_id).only('external_id').first()
    if org is None:
        return create_error(NOT_FOUND, 'Organization not found')
    try:
        return create_success(fn(org.external_id, *args))
    except ValueError as e:
        return create_error(BAD_REQUEST, str(e))
    except (requests.RequestException, IntegrationError) as e:
        # provider detail (URLs, bodies) stays in the log
        logger.warning('invitation provider call failed for org %s: %r', org_id, e)
        return create_error(INTERNAL_ERROR, failure_message)


def invite_user(*, organization_id: str, email_address: str, role: str) -> ServiceResult:
    try:
        return _provider_call(organization_id, invitations.invite_user_to_organization,
                              'Failed to invite user to organization', email_address, role)
    except Exception as e:
        return handle_service_error(e, 'Failed to invite user')


def revoke_invitation(*, organization_id: str, invitation_id: str) -> ServiceResult:
    try:
        return _provider_call(organization_id, invitations.revoke_invitation,
                              'Failed to revoke invitation', invitation_id)
    except Exception as e:
        return handle_service_error(e, 'Failed to revoke invitation')


# Cross-tenant views used by the admin area

def get_all(*, limit: int = 50, offset: int = 0, search: str = '') -> ServiceResult:
    try:
        qs = Organization.objects.filter(is_super_admin=False)
        search = (search or '').strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(external_id__icontains=search) | Q(phone__icontains=search))
        total = qs.count()
        page = (qs.annotate(
                    campaign_count=Count('campaigns', distinct=True),
                    run_count=Count('runs', distinct=True),
                    call_count=Count('calls', distinct=True),
                )
                .order_by('created_at')[offset:offset + limit])
        items = []
        for org in page:
            item = format_organization(org)
            item.update({
                'campaignCount': org.campaign_count,
                'runCount': org.run_count,
                'callCount': org.call_count,
            })
            items.append(item)
        return create_success({
            'organizations': items,
            'totalCount': total,
            'hasMore': offset + limit < total,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch organizations')


def get_by_id(org_id: str) -> ServiceResult:
    try:
        org = Organization.objects.filter(id=org_id).first()
        if org is None:
            return create_error(NOT_FOUND, 'Organization not found')
        return create_success(format_organization(org))
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch organization')


def create(*, name: str, external_id: str, phone: str = '', timezone: Optional[str] = None,
           concurrent_call_limit: Optional[int] = None, is_super_admin: bool = False,
           office_hours: Optional[Dict[str, Any]] = None) -> ServiceResult:
    try:
        if Organization.objects.filter(external_id=external_id).exists():
            return create_error(CONFLICT, 'An organization with this external ID already exists')
        fields = {
            'name': name,
            'external_id': external_id,
            'phone': phone,
            'is_super_admin': is_super_admin,
            'office_hours': normalize_office_hours(office_hours),
        }
        if timezone:
            fields['timezone'] = timezone
        if concurrent_call_limit:
            fields['concurrent_call_limit'] = concurrent_call_limit
        org = Organization.objects.create(**fields)
        logger.info('organization %s created (%s)', org.id, external_id)
        return create_success(format_organization(org))
    except Exception as e:
        return handle_service_error(e, 'Failed to create organization')
