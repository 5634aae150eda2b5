import pytest
import requests

from outreach.exceptions import IntegrationError
from outreach.services import invitations


class FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status
        self.content = b'' if payload is None else b'{}'

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')


@pytest.fixture
def posted(monkeypatch, settings):
    settings.INVITATION_API_URL = 'https://auth.example.com/v1'
    settings.INVITATION_SECRET_KEY = 'sk_test'
    calls = []
    responses = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({'url': url, 'json': json, 'headers': headers, 'timeout': timeout})
        return responses.pop(0)

    monkeypatch.setattr(invitations.requests, 'post', fake_post)
    return calls, responses


def test_invite_posts_role_and_email(posted):
    calls, responses = posted
    responses.append(FakeResponse({'id': 'inv_1', 'status': 'pending'}))
    data = invitations.invite_user_to_organization('org_abc', 'a@b.co', 'admin')
    assert data['id'] == 'inv_1'
    assert calls[0]['url'] == 'https://auth.example.com/v1/organizations/org_abc/invitations'
    assert calls[0]['json'] == {'email_address': 'a@b.co', 'role': 'org:admin'}
    assert calls[0]['headers']['Authorization'] == 'Bearer sk_test'


def test_invite_raises_when_provider_returns_nothing(posted):
    _, responses = posted
    responses.append(FakeResponse(None))
    with pytest.raises(IntegrationError):
        invitations.invite_user_to_organization('org_abc', 'a@b.co', 'member')


def test_invite_rejects_unknown_role(posted):
    calls, _ = posted
    with pytest.raises(ValueError):
        invitations.invite_user_to_organization('org_abc', 'a@b.co', 'owner')
    assert calls == []


def test_revoke_propagates_http_errors(posted):
    calls, responses = posted
    responses.append(FakeResponse({'error': 'gone'}, status=404))
    with pytest.raises(requests.HTTPError):
        invitations.revoke_invitation('org_abc', 'inv_1')
    assert calls[0]['url'].endswith('/organizations/org_abc/invitations/inv_1/revoke')
