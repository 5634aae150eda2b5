import pytest
from django.core.management import call_command
from rest_framework.authtoken.models import Token

from outreach.models import AuditEvent, Organization, User
from outreach.services import views_cache

pytestmark = pytest.mark.django_db


def test_healthz(api_client):
    r = api_client.get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}


def test_login_returns_tokens_and_organization(api_client, member, org):
    r = api_client.post('/api/auth/login', {'username': 'member1', 'password': 'P@ssw0rd1'}, format='json')
    assert r.status_code == 200
    body = r.json()
    assert body['ok'] is True
    assert body['token'] == Token.objects.get(user=member).key
    assert body['jwt_access'] and body['jwt_refresh']
    assert body['isSuperAdmin'] is False
    assert body['organization'] == {'id': str(org.id), 'name': 'Real Clinic', 'externalId': 'org_real'}
    assert AuditEvent.objects.filter(user=member, action='login').exists()


def test_login_without_organization(api_client, loner):
    r = api_client.post('/api/auth/login', {'username': 'loner', 'password': 'P@ssw0rd1'}, format='json')
    assert r.status_code == 200
    assert r.json()['organization'] is None


def test_login_rejects_bad_password(api_client, member):
    r = api_client.post('/api/auth/login', {'username': 'member1', 'password': 'wrong'}, format='json')
    assert r.status_code == 400
    assert r.json()['error']['code'] == 'invalid_credentials'
    assert AuditEvent.objects.filter(user=None, action='login').count() == 1


def test_login_requires_fields(api_client):
    r = api_client.post('/api/auth/login', {}, format='json')
    assert r.status_code == 400
    assert r.json()['ok'] is False


def test_jwt_authenticates_rpc(api_client, member):
    login = api_client.post('/api/auth/login', {'username': 'member1', 'password': 'P@ssw0rd1'}, format='json')
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.json()['jwt_access']}")
    r = api_client.get('/api/rpc/organization.getCurrent')
    assert r.status_code == 200
    assert r.json()['data']['name'] == 'Real Clinic'


def test_refresh_returns_new_access(api_client, member):
    login = api_client.post('/api/auth/login', {'username': 'member1', 'password': 'P@ssw0rd1'}, format='json')
    r = api_client.post('/api/auth/refresh', {'refresh': login.json()['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert 'jwt_access' in r.json()


def test_logout_revokes_token(member_client, member):
    r = member_client.post('/api/auth/logout', {}, format='json')
    assert r.status_code == 200
    assert r.json()['ok'] is True
    assert not Token.objects.filter(user=member).exists()
    assert member_client.get('/api/rpc/organization.getCurrent').status_code == 401


def test_logout_with_bad_refresh(member_client):
    r = member_client.post('/api/auth/logout', {'refresh': 'not-a-token'}, format='json')
    assert r.status_code == 400
    assert r.json()['error']['code'] == 'invalid_token'


def test_ensure_test_users_is_idempotent():
    call_command('ensure_test_users', password='secret-pass')
    call_command('ensure_test_users', password='secret-pass')
    assert Organization.objects.filter(external_id__in=['org_demo', 'org_rivvi']).count() == 2
    assert User.objects.get(username='super').organization.is_super_admin is True
    assert User.objects.get(username='nobody').organization is None
    assert User.objects.get(username='member1').check_password('secret-pass')


def test_ensure_test_users_refuses_in_prod(settings):
    settings.ENV = 'prod'
    call_command('ensure_test_users')
    assert not User.objects.exists()


def test_revalidate_paths_command(monkeypatch):
    events = []
    monkeypatch.setattr(views_cache, 'publish', lambda group, event: events.append(event) or True)
    before = views_cache.path_version('/patients')
    call_command('revalidate_paths', '/patients')
    assert views_cache.path_version('/patients') == before + 1
    assert events[0]['paths'] == ['/patients']
