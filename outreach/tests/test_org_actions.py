import pytest
import requests

from outreach.actions import campaigns as campaign_actions
from outreach.actions import calls as call_actions
from outreach.actions import organizations as organization_actions
from outreach.auth import auth_context_for_user
from outreach.exceptions import ActionError, Forbidden, IntegrationError, ValidationFailed
from outreach.models import Call, Campaign, CampaignRequest, CampaignTemplate, Patient, User
from outreach.services import invitations
from outreach.services import organizations as organization_service

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def no_broadcast(monkeypatch):
    for module in (campaign_actions, organization_actions):
        monkeypatch.setattr(module, 'revalidate_path', lambda *p: None)


def test_update_own_organization(member_ctx, org):
    data = organization_actions.update_organization(member_ctx, {
        'id': str(org.id), 'name': 'Renamed', 'concurrentCallLimit': 7,
    })
    org.refresh_from_db()
    assert org.name == 'Renamed' and org.concurrent_call_limit == 7
    assert data['name'] == 'Renamed'


def test_member_cannot_update_other_organization(member_ctx, other_org):
    with pytest.raises(Forbidden):
        organization_actions.update_organization(member_ctx, {'id': str(other_org.id), 'name': 'Hijack'})
    other_org.refresh_from_db()
    assert other_org.name == 'Other Clinic'


def test_super_admin_can_update_any_organization(super_ctx, other_org, monkeypatch):
    paths = []
    monkeypatch.setattr(organization_actions, 'revalidate_path', lambda *p: paths.extend(p))
    organization_actions.update_organization(super_ctx, {'id': str(other_org.id), 'timezone': 'America/Chicago'})
    other_org.refresh_from_db()
    assert other_org.timezone == 'America/Chicago'
    assert f'/admin/organizations/{other_org.id}' in paths


def test_concurrent_call_limit_is_bounded(member_ctx, org):
    with pytest.raises(ValidationFailed):
        organization_actions.update_organization(member_ctx, {'id': str(org.id), 'concurrentCallLimit': 0})


def test_members_scoped_to_own_org_unless_super_admin(member_ctx, super_ctx, member, org, other_org):
    User.objects.create_user(username='elsewhere', password='x', organization=other_org)
    mine = organization_actions.get_organization_members(member_ctx, {'organizationId': str(other_org.id)})
    assert [m['username'] for m in mine['members']] == ['member1']
    theirs = organization_actions.get_organization_members(super_ctx, {'organizationId': str(other_org.id)})
    assert [m['username'] for m in theirs['members']] == ['elsewhere']


def test_members_without_any_org(loner):
    with pytest.raises(ActionError) as exc:
        organization_actions.get_organization_members(auth_context_for_user(loner), {})
    assert str(exc.value) == 'No organization specified'


def test_invite_uses_provider_org_id(member_ctx, monkeypatch):
    seen = {}

    def fake_invite(organization_id, email_address, role):
        seen.update(organization_id=organization_id, email=email_address, role=role)
        return {'id': 'inv_1'}

    monkeypatch.setattr(invitations, 'invite_user_to_organization', fake_invite)
    data = organization_actions.invite_user_to_organization(member_ctx, {'emailAddress': 'a@b.co'})
    assert data == {'success': True, 'emailAddress': 'a@b.co', 'role': 'member'}
    assert seen == {'organization_id': 'org_real', 'email': 'a@b.co', 'role': 'member'}


def test_invite_rejects_unknown_role(member_ctx):
    with pytest.raises(ValidationFailed):
        organization_actions.invite_user_to_organization(member_ctx, {'emailAddress': 'a@b.co', 'role': 'owner'})


def test_empty_provider_response_surfaces_as_action_error(member_ctx, monkeypatch):
    def fake_invite(*args):
        raise IntegrationError('Failed to invite user to organization')

    monkeypatch.setattr(invitations, 'invite_user_to_organization', fake_invite)
    with pytest.raises(ActionError) as exc:
        organization_actions.invite_user_to_organization(member_ctx, {'emailAddress': 'a@b.co'})
    assert str(exc.value) == 'Failed to invite user to organization'


def test_provider_http_error_detail_is_not_exposed(member_ctx, org, monkeypatch, settings):
    def fake_revoke(organization_id, invitation_id):
        raise requests.HTTPError(
            '404 Client Error for url: https://auth.example.com/v1/organizations/org_real/invitations/inv_9/revoke'
        )

    monkeypatch.setattr(invitations, 'revoke_invitation', fake_revoke)
    with pytest.raises(ActionError) as exc:
        organization_actions.revoke_invitation(member_ctx, {'invitationId': 'inv_9'})
    assert str(exc.value) == 'Failed to revoke invitation'
    assert 'auth.example.com' not in str(exc.value.detail)

    settings.DEBUG = True
    result = organization_service.revoke_invitation(organization_id=str(org.id), invitation_id='inv_9')
    assert result.error.details is None


def test_is_super_admin(member_ctx, super_ctx):
    assert organization_actions.is_super_admin(member_ctx) is False
    assert organization_actions.is_super_admin(super_ctx) is True


def test_campaign_lookup_includes_template(member_ctx, org, other_org):
    t = CampaignTemplate.objects.create(name='T', agent_id='agent_1', llm_id='llm_1', base_prompt='Hi')
    mine = Campaign.objects.create(organization=org, template=t, name='Mine', direction='outbound')
    theirs = Campaign.objects.create(organization=other_org, template=t, name='Theirs', direction='outbound')
    data = campaign_actions.get_campaign_by_id(member_ctx, str(mine.id))
    assert data['campaign']['name'] == 'Mine'
    assert data['template']['config']['basePrompt'] == 'Hi'
    assert campaign_actions.get_campaign_by_id(member_ctx, str(theirs.id)) is None
    assert [c['name'] for c in campaign_actions.get_all_campaigns_for_org(member_ctx)] == ['Mine']


def test_request_campaign_and_process(member_ctx, super_ctx, member):
    req = campaign_actions.request_campaign(member_ctx, {
        'name': '<b>Flu shots</b>', 'description': 'Remind patients',
        'exampleSheets': [{'name': 's.xlsx', 'url': 'https://files.example.com/s.xlsx', 'fileType': 'xlsx'}],
    })
    assert req['name'] == 'Flu shots'
    assert req['status'] == 'pending'
    assert req['requestedBy'] == member.id
    assert req['exampleSheets'][0]['fileType'] == 'xlsx'

    with pytest.raises(Forbidden):
        campaign_actions.process_campaign_request(member_ctx, {'requestId': req['id'], 'status': 'approved'})
    done = campaign_actions.process_campaign_request(super_ctx, {
        'requestId': req['id'], 'status': 'approved', 'adminNotes': 'ok',
    })
    assert done['status'] == 'approved'
    assert CampaignRequest.objects.get(id=req['id']).admin_notes == 'ok'

    listing = campaign_actions.get_all_campaign_requests(member_ctx, {'status': 'approved'})
    assert listing['totalCount'] == 1


def test_calls_filtering(member_ctx, org, other_org):
    p = Patient.objects.create(patient_hash='h', first_name='Ann', last_name='Lee')
    Call.objects.create(organization=org, patient=p, agent_id='a', direction='outbound', status='completed',
                        to_number='5550001111', from_number='5559990000')
    Call.objects.create(organization=org, agent_id='a', direction='inbound', status='failed',
                        to_number='5550002222', from_number='5559990000')
    Call.objects.create(organization=other_org, agent_id='a', direction='outbound',
                        to_number='5550003333', from_number='5559990000')
    assert call_actions.get_calls(member_ctx, {})['totalCount'] == 2
    assert call_actions.get_calls(member_ctx, {'direction': 'inbound'})['calls'][0]['status'] == 'failed'
    assert call_actions.get_calls(member_ctx, {'search': 'ann'})['totalCount'] == 1
    assert len(call_actions.get_patient_calls(member_ctx, str(p.id))) == 1


def test_get_calls_rejects_bad_status(member_ctx):
    with pytest.raises(ValidationFailed):
        call_actions.get_calls(member_ctx, {'status': 'exploded'})
