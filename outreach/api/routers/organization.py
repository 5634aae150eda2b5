from outreach.actions import organizations as organization_actions
from outreach.rpc import ORG, PROTECTED, Router, mutation, query


@query(guard=ORG)
def get_current(ctx, input):
    return organization_actions.get_current_organization(ctx)


@query(guard=PROTECTED)
def is_super_admin(ctx, input):
    return organization_actions.is_super_admin(ctx)


@query(guard=PROTECTED)
def get_members(ctx, input):
    return organization_actions.get_organization_members(ctx, input)


@mutation(guard=PROTECTED)
def update(ctx, input):
    return organization_actions.update_organization(ctx, input)


@mutation(guard=ORG)
def invite_user(ctx, input):
    return organization_actions.invite_user_to_organization(ctx, input)


@mutation(guard=ORG)
def revoke_invitation(ctx, input):
    return organization_actions.revoke_invitation(ctx, input)


router = Router({
    'getCurrent': get_current,
    'isSuperAdmin': is_super_admin,
    'getMembers': get_members,
    'update': update,
    'inviteUser': invite_user,
    'revokeInvitation': revoke_invitation,
})
