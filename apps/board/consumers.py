# apps/board/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.utils import timezone

from apps.core.models import Project
from apps.core.permissions import OmniHubPermissions

from .realtime import room_for_project

logger = logging.getLogger(__name__)


class BoardConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket do board de um projeto

    Funcionalidades:
    - Entra na sala do projeto (todos que estão vendo o board)
    - Repassa os eventos publicados pelo BoardStore
    - Heartbeat (ping/pong)
    - Sincronização completa sob demanda (sync_board)
    """

    async def connect(self):
        """
        Conecta usuário à sala do projeto
        Verifica permissões antes de aceitar conexão
        """
        self.project_id = self.scope['url_route']['kwargs']['project_id']
        self.room_name = room_for_project(self.project_id)
        self.user = self.scope.get('user')

        if not OmniHubPermissions.is_authenticated(self.user):
            logger.warning("❌ Conexão WebSocket rejeitada - usuário não autenticado")
            await self.close()
            return

        has_access = await self.check_project_access()
        if not has_access:
            logger.warning(
                f"❌ Conexão WebSocket rejeitada - {self.user.username} sem acesso ao projeto {self.project_id}"
            )
            await self.close()
            return

        await self.channel_layer.group_add(self.room_name, self.channel_name)
        self.joined = True

        await self.accept()
        logger.info(f"✅ WebSocket conectado - {self.user.username} no board do projeto {self.project_id}")

    async def disconnect(self, close_code):
        if getattr(self, 'joined', False):
            await self.channel_layer.group_discard(self.room_name, self.channel_name)

        username = getattr(self.user, 'username', 'anônimo')
        logger.info(f"🔌 WebSocket desconectado - {username} do projeto {self.project_id}")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Recebe mensagens do cliente WebSocket
        """
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.error(f"❌ JSON inválido recebido via WebSocket de {self.user.username}")
            return

        message_type = data.get('type') if isinstance(data, dict) else None

        # Heartbeat/Ping
        if message_type == 'ping':
            await self.send(text_data=json.dumps({
                'type': 'pong',
                'timestamp': self.get_timestamp(),
                'interval': getattr(settings, 'OMNIHUB_WS_HEARTBEAT_INTERVAL', 30),
            }))

        # Cliente descartou estado local e quer o board inteiro
        elif message_type == 'sync_board':
            board_data = await self.get_board_state()
            await self.send(text_data=json.dumps({
                'type': 'board_sync',
                'payload': board_data,
                'timestamp': self.get_timestamp()
            }))

    # === Handler dos eventos do board ===

    async def board_event(self, event):
        """
        Repassa evento publicado pelo ChannelLayerBroadcaster
        """
        await self.send(text_data=json.dumps({
            'type': event['event'],
            'payload': event['payload']
        }))

    # === Métodos auxiliares ===

    @database_sync_to_async
    def check_project_access(self):
        try:
            project = Project.objects.get(pk=self.project_id)
        except Project.DoesNotExist:
            return False
        return OmniHubPermissions.tem_acesso_projeto(self.user, project)

    @database_sync_to_async
    def get_board_state(self):
        from .services import BoardStore
        return BoardStore().get_board(self.project_id)

    def get_timestamp(self):
        return timezone.now().isoformat()
