import pytest
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.urls import path
from rest_framework.authtoken.models import Token
from rest_framework_simplejwt.tokens import RefreshToken

from outreach.models import Campaign, Run
from outreach.realtime.consumers import UpdatesConsumer
from outreach.realtime.middleware import TokenAuthMiddlewareStack
from outreach.services import runs as run_service
from outreach.services.realtime import UPDATES_GROUP, org_group

pytestmark = pytest.mark.django_db(transaction=True)

application = TokenAuthMiddlewareStack(URLRouter([
    path('ws/updates/', UpdatesConsumer.as_asgi()),
]))


async def _connect(query=''):
    communicator = WebsocketCommunicator(application, f'/ws/updates/{query}')
    connected, _ = await communicator.connect()
    assert connected
    welcome = await communicator.receive_json_from()
    assert welcome['type'] == 'welcome'
    return communicator


def _org_event_reaches(query, org_id):
    async def scenario():
        communicator = await _connect(query)
        await get_channel_layer().group_send(org_group(org_id), {'type': 'run.updated', 'runId': 'r1'})
        got = await communicator.receive_nothing(timeout=0.2) is False
        event = await communicator.receive_json_from() if got else None
        await communicator.disconnect()
        return event
    return async_to_sync(scenario)()


def test_drf_token_joins_org_group(member, org):
    token = Token.objects.create(user=member)
    event = _org_event_reaches(f'?token={token.key}', str(org.id))
    assert event == {'type': 'run.updated', 'runId': 'r1'}


def test_jwt_access_token_joins_org_group(member, org):
    access = str(RefreshToken.for_user(member).access_token)
    event = _org_event_reaches(f'?token={access}', str(org.id))
    assert event['type'] == 'run.updated'


def test_anonymous_socket_gets_no_org_events(org):
    assert _org_event_reaches('', str(org.id)) is None


def test_invalid_token_is_treated_as_anonymous(org):
    assert _org_event_reaches('?token=not-a-real-token', str(org.id)) is None


def test_everyone_receives_refresh_broadcasts():
    async def scenario():
        communicator = await _connect()
        await get_channel_layer().group_send(UPDATES_GROUP, {'type': 'broadcast.refresh', 'paths': ['/patients']})
        event = await communicator.receive_json_from()
        await communicator.disconnect()
        return event
    assert async_to_sync(scenario)()['paths'] == ['/patients']


def test_started_run_is_pushed_to_its_organization(member, org):
    token = Token.objects.create(user=member)
    campaign = Campaign.objects.create(organization=org, name='Recall', direction='outbound')
    run = Run.objects.create(campaign=campaign, organization=org, name='March', status='ready')

    async def scenario():
        communicator = await _connect(f'?token={token.key}')
        result = await database_sync_to_async(run_service.start)(str(run.id), str(org.id))
        event = await communicator.receive_json_from()
        await communicator.disconnect()
        return result, event

    result, event = async_to_sync(scenario)()
    assert result.data['status'] == 'running'
    assert event['type'] == 'run.updated'
    assert event['runId'] == str(run.id)
    assert event['status'] == 'running'
