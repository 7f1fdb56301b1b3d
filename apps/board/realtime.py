# apps/board/realtime.py

"""
Fan-out em tempo real das mudanças do board

O BoardStore não conhece WebSocket: ele só chama um RoomBroadcaster
(emit_to_room). A implementação padrão publica no channel layer do
Django Channels, no grupo do projeto, e o BoardConsumer repassa
para os clientes conectados.

Entrega é best-effort: falha ao emitir é logada e nunca derruba
a requisição HTTP.
"""

import json
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.serializers.json import DjangoJSONEncoder

logger = logging.getLogger(__name__)


# Nomes dos eventos enviados aos clientes
TICKET_CREATED = 'ticket_created'
TICKET_UPDATED = 'ticket_updated'
TICKET_DELETED = 'ticket_deleted'
COLUMN_CREATED = 'column_created'
COLUMN_DELETED = 'column_deleted'
COLUMNS_REORDERED = 'columns_reordered'
BOARD_REFETCH_NEEDED = 'board_refetch_needed'
TASK_CREATED = 'task_created'
TASK_UPDATED = 'task_updated'
TASK_DELETED = 'task_deleted'


def room_for_project(project_id):
    """Grupo do channel layer com todos que estão vendo o board do projeto"""
    return f'project_{project_id}'


class RoomBroadcaster:
    """Interface mínima de publicação por sala"""

    def emit_to_room(self, room_id, event, payload):
        raise NotImplementedError


class ChannelLayerBroadcaster(RoomBroadcaster):
    """Publica eventos no channel layer configurado (Redis ou memória)"""

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    def emit_to_room(self, room_id, event, payload):
        layer = self.channel_layer
        if layer is None:
            logger.warning(f"⚠️ Channel layer não configurado - evento '{event}' descartado")
            return

        # Garante payload serializável (datas, Decimals) antes de ir para o Redis
        message = json.loads(json.dumps(payload, cls=DjangoJSONEncoder))

        async_to_sync(layer.group_send)(
            room_id,
            {
                'type': 'board.event',
                'event': event,
                'payload': message,
            }
        )
        logger.debug(f"📡 Evento '{event}' enviado para {room_id}")


class BoardEvents:
    """
    Política de fan-out: decide o que emitir para cada mutação do board

    Movimento que desloca irmãos emite apenas board_refetch_needed,
    porque a ordem dos vizinhos mudou como efeito colateral e enviar
    só o ticket movido deixaria os outros clientes inconsistentes.
    """

    def __init__(self, broadcaster=None):
        self.broadcaster = broadcaster or ChannelLayerBroadcaster()

    def emit(self, project_id, event, payload):
        """Envia para a sala do projeto; nunca propaga exceção"""
        room = room_for_project(project_id)
        try:
            self.broadcaster.emit_to_room(room, event, payload)
        except Exception:
            logger.exception(f"❌ Falha ao emitir '{event}' para {room}")

    # === Colunas ===

    def column_created(self, column):
        self.emit(column.project_id, COLUMN_CREATED, column.to_dict())

    def column_deleted(self, project_id, column_id, deleted_tickets):
        self.emit(project_id, COLUMN_DELETED, {
            'columnId': column_id,
            'projectId': project_id,
            'deletedTickets': deleted_tickets,
        })

    def column_moved(self, project_id, plan, columns):
        """Reordenação de colunas envia a lista completa já ordenada"""
        if plan.is_noop:
            return
        self.emit(project_id, COLUMNS_REORDERED, {
            'projectId': project_id,
            'columns': [column.to_dict() for column in columns],
        })

    # === Tickets ===

    def ticket_created(self, ticket):
        self.emit(ticket.project_id, TASK_UPDATED, ticket.task.to_dict())
        self.emit(ticket.project_id, TICKET_CREATED, ticket.to_dict())

    def ticket_updated(self, ticket):
        self.emit(ticket.project_id, TICKET_UPDATED, ticket.to_dict())

    def ticket_moved(self, ticket, plan):
        if plan.is_noop:
            return

        if plan.shifts_siblings:
            self.emit(ticket.project_id, BOARD_REFETCH_NEEDED, {
                'projectId': ticket.project_id,
            })
        else:
            self.ticket_updated(ticket)

    def ticket_deleted(self, project_id, ticket_pk, task=None):
        if task is not None:
            self.emit(project_id, TASK_UPDATED, task.to_dict())
        self.emit(project_id, TICKET_DELETED, {
            'ticketId': ticket_pk,
            'projectId': project_id,
        })

    # === Tasks ===

    def task_created(self, task):
        self.emit(task.project_id, TASK_CREATED, task.to_dict())

    def task_updated(self, task):
        self.emit(task.project_id, TASK_UPDATED, task.to_dict())

    def task_deleted(self, project_id, task_ids, deleted_tickets=0):
        """
        Um task_deleted por task removida (a principal e as sub-tasks)

        Se tickets sumiram junto, a ordem das colunas ficou com lacunas
        e o board precisa ser recarregado.
        """
        for task_id in task_ids:
            self.emit(project_id, TASK_DELETED, {
                'taskId': task_id,
                'projectId': project_id,
            })
        if deleted_tickets:
            self.emit(project_id, BOARD_REFETCH_NEEDED, {
                'projectId': project_id,
            })
