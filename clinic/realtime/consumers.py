import json

from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.services.updates import GROUP


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Read-only feed of ``broadcast.refresh`` events for the dashboard."""

    async def connect(self):
        await self.channel_layer.group_add(GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(GROUP, self.channel_name)

    async def broadcast_refresh(self, event):
        # event: {"type": "broadcast.refresh", "version": int, "ts": "...", "keys": ["bills", "stats"]}
        await self.send(json.dumps(event))
