from outreach.auth import AuthContext, require_auth, require_org
from outreach.exceptions import ActionError, Forbidden
from outreach.serializers.organizations import (
    InviteSerializer, MembersQuerySerializer, OrganizationUpdateSerializer, RevokeInvitationSerializer,
)
from outreach.services import audit
from outreach.services import organizations as organization_service
from outreach.services.views_cache import revalidate_path

from .base import unwrap, validate


def get_current_organization(ctx: AuthContext):
    ctx = require_org(ctx)
    return unwrap(organization_service.get_current(ctx.org_id))


def is_super_admin(ctx: AuthContext) -> bool:
    return bool(ctx.is_authenticated and ctx.is_super_admin)


def get_organization_members(ctx: AuthContext, params=None):
    ctx = require_auth(ctx)
    v = validate(MembersQuerySerializer, params)
    # only super admins may look at another organization
    requested = v.get('organizationId')
    organization_id = str(requested) if ctx.is_super_admin and requested else ctx.org_id
    if not organization_id:
        raise ActionError('No organization specified')
    return unwrap(organization_service.get_members(organization_id, limit=v['limit'], offset=v['offset']))


def update_organization(ctx: AuthContext, data):
    ctx = require_auth(ctx)
    v = validate(OrganizationUpdateSerializer, data)
    org_id = str(v.pop('id'))
    if not ctx.is_super_admin and ctx.org_id != org_id:
        raise Forbidden('You do not have permission to update this organization')
    if 'officeHours' in v:
        v['officeHours'] = {k: (dict(d) if d else None) for k, d in v['officeHours'].items()}
    org = unwrap(organization_service.update(org_id, v))
    audit.log_action(user_id=ctx.user_id, action='organization.update', object_type='organization',
                     object_id=org_id, detail={'fields': sorted(v)})
    revalidate_path('/settings/organization')
    if ctx.is_super_admin:
        revalidate_path(f'/admin/organizations/{org_id}', '/admin/organizations')
    return org


def invite_user_to_organization(ctx: AuthContext, data):
    ctx = require_org(ctx)
    v = validate(InviteSerializer, data)
    result = organization_service.invite_user(
        organization_id=ctx.org_id, email_address=v['emailAddress'], role=v['role'],
    )
    unwrap(result)
    audit.log_action(user_id=ctx.user_id, action='organization.invite', object_type='organization',
                     object_id=ctx.org_id, detail={'email': v['emailAddress'], 'role': v['role']})
    revalidate_path('/settings')
    return {'success': True, 'emailAddress': v['emailAddress'], 'role': v['role']}


def revoke_invitation(ctx: AuthContext, data):
    ctx = require_org(ctx)
    v = validate(RevokeInvitationSerializer, data)
    unwrap(organization_service.revoke_invitation(organization_id=ctx.org_id, invitation_id=v['invitationId']))
    revalidate_path('/settings')
    return {'success': True}
