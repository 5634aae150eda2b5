"""
Organization invitations at the external auth provider.

The provider owns user accounts and memberships; this module only asks it
to send or revoke an invitation for an organization and returns the
provider's invitation record.
"""
import logging
from typing import Any, Dict

import requests
from django.conf import settings

from outreach.exceptions import IntegrationError

logger = logging.getLogger(__name__)

INVITATION_ROLES = ('member', 'admin', 'superadmin')


def _headers() -> Dict[str, str]:
    return {
        'Authorization': f'Bearer {settings.INVITATION_SECRET_KEY}',
        'Content-Type': 'application/json',
    }


def _provider_role(role: str) -> str:
    return f'org:{role}'


def invite_user_to_organization(organization_id: str, email_address: str, role: str) -> Dict[str, Any]:
    if role not in INVITATION_ROLES:
        raise ValueError(f'unsupported role: {role}')
    url = f'{settings.INVITATION_API_URL}/organizations/{organization_id}/invitations'
    r = requests.post(
        url,
        json={'email_address': email_address, 'role': _provider_role(role)},
        headers=_headers(),
        timeout=settings.INVITATION_TIMEOUT,
    )
    r.raise_for_status()
    data = r.json() if r.content else None
    if not data:
        raise IntegrationError('Failed to invite user to organization')
    logger.info('invited %s to organization %s as %s', email_address, organization_id, role)
    return data


def revoke_invitation(organization_id: str, invitation_id: str) -> Dict[str, Any]:
    url = f'{settings.INVITATION_API_URL}/organizations/{organization_id}/invitations/{invitation_id}/revoke'
    r = requests.post(url, json={}, headers=_headers(), timeout=settings.INVITATION_TIMEOUT)
    r.raise_for_status()
    data = r.json() if r.content else None
    if not data:
        raise IntegrationError('Failed to revoke invitation')
    return data
