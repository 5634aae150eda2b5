import json

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from outreach.services.realtime import UPDATES_GROUP, org_group


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes view invalidations to everyone and run events to the caller's organization."""

    async def connect(self):
        self.groups_joined = [UPDATES_GROUP]
        org_id = await self._org_id()
        if org_id:
            self.groups_joined.append(org_group(org_id))
        for group in self.groups_joined:
            await self.channel_layer.group_add(group, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        for group in getattr(self, 'groups_joined', []):
            await self.channel_layer.group_discard(group, self.channel_name)

    @database_sync_to_async
    def _org_id(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated or not user.organization_id:
            return None
        return str(user.organization_id)

    async def broadcast_refresh(self, event):
        # {"type": "broadcast.refresh", "version": int, "ts": "...", "paths": [...]}
        await self.send(json.dumps(event))

    async def run_updated(self, event):
        await self.send(json.dumps(event))
