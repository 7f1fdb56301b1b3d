# tests/test_realtime.py
"""Política de fan-out: quais eventos saem para a sala do projeto"""

import datetime
import logging

import pytest
from asgiref.sync import sync_to_async
from channels.layers import InMemoryChannelLayer

from apps.board.ordering import MovePlan, OrderDelta
from apps.board.realtime import (
    BOARD_REFETCH_NEEDED,
    COLUMN_CREATED,
    COLUMN_DELETED,
    COLUMNS_REORDERED,
    TASK_UPDATED,
    TICKET_CREATED,
    TICKET_DELETED,
    TICKET_UPDATED,
    BoardEvents,
    ChannelLayerBroadcaster,
    RoomBroadcaster,
    room_for_project,
)
from apps.board.services import BoardStore
from apps.board.models import Ticket
from apps.core.exceptions import ValidationError


class ExplodingBroadcaster(RoomBroadcaster):
    def emit_to_room(self, room_id, event, payload):
        raise ConnectionError('redis fora do ar')


def test_room_name():
    assert room_for_project(42) == 'project_42'


@pytest.mark.django_db
class TestMutationEvents:

    def test_create_column(self, store, project, columns, broadcaster, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            column = store.create_column(project.pk, 'Review')

        assert broadcaster.sent == [
            (f'project_{project.pk}', COLUMN_CREATED, column.to_dict()),
        ]

    def test_create_ticket_emits_task_then_ticket(self, store, project, columns, make_task,
                                                  broadcaster, django_capture_on_commit_callbacks):
        task = make_task('Landing page')

        with django_capture_on_commit_callbacks(execute=True):
            ticket = store.create_ticket(task.pk, project.pk, columns[0].pk)

        assert broadcaster.events == [TASK_UPDATED, TICKET_CREATED]
        assert broadcaster.payloads(TASK_UPDATED)[0]['isTicket'] is True
        assert broadcaster.payloads(TICKET_CREATED)[0]['ticketId'] == ticket.ticket_id

    def test_move_that_shifts_siblings_asks_for_refetch(self, store, columns, make_ticket, broadcaster,
                                                        django_capture_on_commit_callbacks):
        first = make_ticket(columns[0], 'a')
        make_ticket(columns[0], 'b')
        broadcaster.clear()

        with django_capture_on_commit_callbacks(execute=True):
            store.move_ticket(first.pk, columns[0].pk, 1)

        assert broadcaster.events == [BOARD_REFETCH_NEEDED]
        assert broadcaster.payloads(BOARD_REFETCH_NEEDED) == [{'projectId': first.project_id}]

    def test_move_without_sibling_shift_sends_ticket(self, store, columns, make_ticket, broadcaster,
                                                     django_capture_on_commit_callbacks):
        ticket = make_ticket(columns[0], 'sozinho')
        broadcaster.clear()

        with django_capture_on_commit_callbacks(execute=True):
            store.move_ticket(ticket.pk, columns[2].pk, 0)

        assert broadcaster.events == [TICKET_UPDATED]
        payload = broadcaster.payloads(TICKET_UPDATED)[0]
        assert payload['column'] == columns[2].pk
        assert payload['order'] == 0

    def test_noop_move_emits_nothing(self, store, columns, make_ticket, broadcaster,
                                     django_capture_on_commit_callbacks):
        ticket = make_ticket(columns[0], 'parado')
        broadcaster.clear()

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            store.move_ticket(ticket.pk, columns[0].pk, 0)

        assert callbacks == []
        assert broadcaster.sent == []

    def test_move_column_sends_full_sorted_list(self, store, project, columns, broadcaster,
                                                django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            store.move_column(columns[0].pk, 2)

        assert broadcaster.events == [COLUMNS_REORDERED]
        payload = broadcaster.payloads(COLUMNS_REORDERED)[0]
        assert payload['projectId'] == project.pk
        assert [c['name'] for c in payload['columns']] == ['In Progress', 'Closed', 'Start']
        assert [c['order'] for c in payload['columns']] == [0, 1, 2]

    def test_delete_ticket(self, store, columns, make_ticket, broadcaster,
                           django_capture_on_commit_callbacks):
        ticket = make_ticket(columns[0], 'tchau')
        broadcaster.clear()

        with django_capture_on_commit_callbacks(execute=True):
            store.delete_ticket(ticket.pk)

        assert broadcaster.events == [TASK_UPDATED, TICKET_DELETED]
        assert broadcaster.payloads(TASK_UPDATED)[0]['isTicket'] is False
        assert broadcaster.payloads(TICKET_DELETED) == [
            {'ticketId': ticket.pk, 'projectId': ticket.project_id}
        ]

    def test_delete_column(self, store, project, columns, make_ticket, broadcaster,
                           django_capture_on_commit_callbacks):
        make_ticket(columns[1], 'x')
        broadcaster.clear()

        with django_capture_on_commit_callbacks(execute=True):
            store.delete_column(columns[1].pk)

        assert broadcaster.sent == [(
            f'project_{project.pk}',
            COLUMN_DELETED,
            {'columnId': columns[1].pk, 'projectId': project.pk, 'deletedTickets': 1},
        )]

    def test_failed_validation_emits_nothing(self, store, columns, make_ticket, broadcaster,
                                             django_capture_on_commit_callbacks):
        ticket = make_ticket(columns[0], 'a')
        broadcaster.clear()

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(ValidationError):
                store.move_ticket(ticket.pk, columns[1].pk, 5)

        assert callbacks == []
        assert broadcaster.sent == []

    def test_broadcaster_failure_does_not_break_mutation(self, project, columns, make_task, caplog,
                                                         django_capture_on_commit_callbacks):
        store = BoardStore(broadcaster=ExplodingBroadcaster())
        task = make_task('resiliente')

        with caplog.at_level(logging.ERROR, logger='apps.board.realtime'):
            with django_capture_on_commit_callbacks(execute=True):
                ticket = store.create_ticket(task.pk, project.pk, columns[0].pk)

        assert Ticket.objects.filter(pk=ticket.pk).exists()
        assert 'Falha ao emitir' in caplog.text


class TestBoardEventsPolicy:
    """Decisões sobre MovePlan sem banco"""

    class FakeTicket:
        project_id = 9
        pk = 1

        def to_dict(self):
            return {'id': self.pk}

    def test_noop_plan_is_silent(self, broadcaster):
        events = BoardEvents(broadcaster)
        plan = MovePlan(1, 'A', 'A', 0, is_noop=True)

        events.ticket_moved(self.FakeTicket(), plan)
        events.column_moved(9, plan, [])

        assert broadcaster.sent == []

    def test_plan_with_deltas_requests_refetch(self, broadcaster):
        plan = MovePlan(1, 'A', 'B', 0, deltas=[OrderDelta(2, 1)])

        BoardEvents(broadcaster).ticket_moved(self.FakeTicket(), plan)

        assert broadcaster.sent == [('project_9', BOARD_REFETCH_NEEDED, {'projectId': 9})]

    def test_plan_without_deltas_sends_ticket(self, broadcaster):
        plan = MovePlan(1, 'A', 'B', 0)

        BoardEvents(broadcaster).ticket_moved(self.FakeTicket(), plan)

        assert broadcaster.sent == [('project_9', TICKET_UPDATED, {'id': 1})]


class TestChannelLayerBroadcaster:

    async def test_publishes_to_project_group(self):
        layer = InMemoryChannelLayer()
        channel = await layer.new_channel()
        await layer.group_add('project_7', channel)

        broadcaster = ChannelLayerBroadcaster(layer)
        await sync_to_async(broadcaster.emit_to_room)(
            'project_7', TICKET_UPDATED, {'id': 3, 'deadline': datetime.date(2025, 3, 1)}
        )

        message = await layer.receive(channel)
        assert message == {
            'type': 'board.event',
            'event': TICKET_UPDATED,
            'payload': {'id': 3, 'deadline': '2025-03-01'},
        }

    def test_missing_channel_layer_is_logged(self, monkeypatch, caplog):
        monkeypatch.setattr('apps.board.realtime.get_channel_layer', lambda: None)

        with caplog.at_level(logging.WARNING, logger='apps.board.realtime'):
            ChannelLayerBroadcaster().emit_to_room('project_1', TICKET_UPDATED, {})

        assert 'Channel layer não configurado' in caplog.text
