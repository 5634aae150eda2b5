import pytest
from django.core.cache import cache
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from outreach.auth import auth_context_for_user
from outreach.models import Organization, User


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def org(db):
    return Organization.objects.create(external_id='org_real', name='Real Clinic', phone='5551234567')


@pytest.fixture
def other_org(db):
    return Organization.objects.create(external_id='org_other', name='Other Clinic')


@pytest.fixture
def platform_org(db):
    return Organization.objects.create(external_id='org_platform', name='Platform', is_super_admin=True)


@pytest.fixture
def member(org):
    return User.objects.create_user(username='member1', password='P@ssw0rd1', organization=org)


@pytest.fixture
def superadmin(platform_org):
    return User.objects.create_user(username='super1', password='P@ssw0rd1', organization=platform_org,
                                    role=User.ROLE_SUPERADMIN)


@pytest.fixture
def loner(db):
    return User.objects.create_user(username='loner', password='P@ssw0rd1')


@pytest.fixture
def member_ctx(member):
    return auth_context_for_user(member)


@pytest.fixture
def super_ctx(superadmin):
    return auth_context_for_user(superadmin)


@pytest.fixture
def api_client():
    return APIClient()


def client_for(user):
    client = APIClient()
    token, _ = Token.objects.get_or_create(user=user)
    client.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')
    return client


@pytest.fixture
def member_client(member):
    return client_for(member)


@pytest.fixture
def super_client(superadmin):
    return client_for(superadmin)
