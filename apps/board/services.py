# apps/board/services.py

"""
BoardStore - operações persistentes sobre colunas e tickets

Cada mutação roda em transaction.atomic() com select_for_update nas
linhas afetadas (projeto para colunas, colunas para tickets). O plano
de ordenação vem de apps.board.ordering e é aplicado inteiro ou não é
aplicado. Eventos em tempo real saem só depois do commit.
"""

import logging
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Max

from apps.core.exceptions import AlreadyTicket, NotFound, TransientStorageError, ValidationError
from apps.core.models import Project, Task

from .models import Column, Ticket, generate_ticket_id
from .ordering import Placement, plan_move
from .realtime import BoardEvents

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = [
    {'name': 'Start', 'order': 0, 'is_default': True},
    {'name': 'In Progress', 'order': 1, 'is_default': False},
    {'name': 'Closed', 'order': 2, 'is_default': True},
]

COLUMN_NAME_MAX_LENGTH = 100


class BoardStore:
    """Aplica os planos do motor de ordenação sobre Column/Ticket"""

    def __init__(self, broadcaster=None, events: Optional[BoardEvents] = None):
        self.events = events or BoardEvents(broadcaster)

    # === Leitura ===

    def get_board(self, project_id) -> Dict[str, List[dict]]:
        """
        Colunas (ordenadas) e tickets populados do projeto

        Cria as colunas padrão no primeiro acesso.
        """
        project = self._get_project(project_id)
        columns = list(project.columns.order_by('order', 'id'))

        if not columns:
            columns = self.ensure_default_columns(project.pk)

        tickets = (
            Ticket.objects
            .filter(project_id=project.pk)
            .select_related('task', 'assignee', 'column')
            .order_by('column__order', 'column_id', 'order', 'id')
        )

        return {
            'columns': [column.to_dict() for column in columns],
            'tickets': [ticket.to_dict() for ticket in tickets],
        }

    def ensure_default_columns(self, project_id) -> List[Column]:
        """
        Cria Start / In Progress / Closed se o projeto não tiver colunas

        O lock na linha do projeto serializa primeiros acessos
        simultâneos: quem chega depois vê as colunas já criadas.
        """
        with transaction.atomic():
            project = self._lock_project(project_id)
            columns = list(Column.objects.filter(project=project).order_by('order', 'id'))
            if columns:
                return columns

            defaults = getattr(settings, 'OMNIHUB_DEFAULT_COLUMNS', DEFAULT_COLUMNS)
            columns = [
                Column.objects.create(
                    project=project,
                    name=coluna['name'],
                    order=coluna['order'],
                    is_default=coluna.get('is_default', False),
                )
                for coluna in defaults
            ]
            logger.info(f"🧱 Colunas padrão criadas para o projeto {project.pk}")
            return columns

    # === Colunas ===

    def create_column(self, project_id, name) -> Column:
        """Nova coluna no fim do board (max(order) + 1)"""
        name = self._clean_column_name(name)

        with transaction.atomic():
            project = self._lock_project(project_id)
            last_order = Column.objects.filter(project=project).aggregate(
                last=Max('order')
            )['last']
            order = 0 if last_order is None else last_order + 1

            column = Column.objects.create(project=project, name=name, order=order)
            transaction.on_commit(lambda: self.events.column_created(column))

        logger.info(f"➕ Coluna '{column.name}' criada no projeto {project.pk} (order={order})")
        return column

    def move_column(self, column_id, new_order) -> Column:
        """Reordena colunas do projeto (sempre dentro do mesmo container)"""
        column = self._get_column(column_id)

        with transaction.atomic():
            self._lock_project(column.project_id)
            columns = list(
                Column.objects.select_for_update()
                .filter(project_id=column.project_id)
                .order_by('order', 'id')
            )
            column = next((c for c in columns if c.pk == column.pk), None)
            if column is None:
                raise NotFound('Coluna não encontrada')

            plan = plan_move(
                Placement(column.pk, column.project_id, column.order),
                column.project_id,
                new_order,
                [Placement(c.pk, c.project_id, c.order) for c in columns],
            )

            if not plan.is_noop:
                self._apply_deltas(Column, columns, plan.deltas)
                column.order = plan.target_order
                column.save(update_fields=['order', 'updated_at'])

                ordered = sorted(columns, key=lambda c: (c.order, c.pk))
                project_id = column.project_id
                transaction.on_commit(
                    lambda: self.events.column_moved(project_id, plan, ordered)
                )

        logger.info(f"↔️ Coluna {column.pk} movida: {plan}")
        return column

    def delete_column(self, column_id) -> int:
        """
        Remove a coluna e os tickets dela

        As tasks dos tickets voltam a ser tasks comuns (post_delete do
        Ticket). Não compacta a ordem das colunas restantes. Retorna
        quantos tickets foram removidos.
        """
        with transaction.atomic():
            column = self._get_column(column_id, lock=True)
            project_id = column.project_id

            deleted_tickets = column.tickets.count()
            column.delete()

            transaction.on_commit(
                lambda: self.events.column_deleted(project_id, column_id, deleted_tickets)
            )

        logger.info(
            f"🗑️ Coluna {column_id} removida do projeto {project_id} "
            f"({deleted_tickets} tickets removidos)"
        )
        return deleted_tickets

    # === Tickets ===

    def create_ticket(self, task_id, project_id, column_id=None) -> Ticket:
        """
        Promove uma Task a Ticket

        Sem coluna informada, usa a primeira coluna do projeto (criando
        as padrão se necessário). O ticket entra no fim da coluna.
        """
        project = self._get_project(project_id)

        with transaction.atomic():
            try:
                task = Task.objects.select_for_update().get(pk=task_id)
            except (Task.DoesNotExist, ValueError, TypeError):
                raise NotFound('Task não encontrada')

            if task.is_ticket or Ticket.objects.filter(task=task).exists():
                raise AlreadyTicket()

            if task.project_id != project.pk:
                raise ValidationError('Task não pertence a este projeto')

            if column_id:
                column = self._get_column(column_id, lock=True)
                if column.project_id != project.pk:
                    raise ValidationError('Coluna não pertence a este projeto')
            else:
                self.ensure_default_columns(project.pk)
                column = (
                    Column.objects.select_for_update()
                    .filter(project=project)
                    .order_by('order', 'id')
                    .first()
                )

            last_order = column.tickets.aggregate(last=Max('order'))['last']

            ticket = Ticket.objects.create(
                task=task,
                project=project,
                column=column,
                assignee_id=task.assigned_to_id,
                deadline=task.deadline,
                priority=task.priority,
                ticket_id=self._unique_ticket_id(),
                order=0 if last_order is None else last_order + 1,
            )

            task.is_ticket = True
            task.save(update_fields=['is_ticket', 'updated_at'])

            transaction.on_commit(lambda: self.events.ticket_created(ticket))

        logger.info(f"🎫 Task {task.pk} virou ticket #{ticket.ticket_id} na coluna {column.pk}")
        return ticket

    def move_ticket(self, ticket_id, new_column_id, new_order) -> Ticket:
        """
        Drag-and-drop de ticket na mesma coluna ou entre colunas

        Trava as colunas envolvidas (em ordem de id) e aplica os
        deslocamentos dos irmãos junto com a escrita do ticket.
        """
        ticket = self._get_ticket(ticket_id)
        target_column = self._get_column(new_column_id)

        if target_column.project_id != ticket.project_id:
            raise ValidationError('Coluna de destino pertence a outro projeto')

        with transaction.atomic():
            column_ids = sorted({ticket.column_id, target_column.pk})
            locked = list(
                Column.objects.select_for_update()
                .filter(pk__in=column_ids)
                .order_by('pk')
            )
            if len(locked) != len(column_ids):
                raise NotFound('Coluna não encontrada')

            # Recarrega dentro do lock: outra requisição pode ter movido o ticket
            ticket = self._get_ticket(ticket_id, lock=True)
            if ticket.column_id not in column_ids:
                self._get_column(ticket.column_id, lock=True)
            column_ids = sorted({ticket.column_id, target_column.pk})

            siblings = list(
                Ticket.objects.select_for_update()
                .filter(column_id__in=column_ids)
                .order_by('column_id', 'order', 'id')
            )

            plan = plan_move(
                Placement(ticket.pk, ticket.column_id, ticket.order),
                target_column.pk,
                new_order,
                [Placement(t.pk, t.column_id, t.order) for t in siblings],
            )

            if not plan.is_noop:
                self._apply_deltas(Ticket, siblings, plan.deltas)
                ticket.column = target_column
                ticket.order = plan.target_order
                ticket.save(update_fields=['column', 'order', 'updated_at'])

                transaction.on_commit(lambda: self.events.ticket_moved(ticket, plan))

        logger.info(f"🔀 Ticket {ticket.pk} movido: {plan}")
        return ticket

    def delete_ticket(self, ticket_id) -> None:
        """
        Remove o ticket do board (a Task continua existindo)

        Não compacta a ordem da coluna: leitores ordenam pelo valor.
        """
        with transaction.atomic():
            ticket = self._get_ticket(ticket_id, lock=True)
            project_id = ticket.project_id
            ticket_pk = ticket.pk
            task = ticket.task

            ticket.delete()
            # post_delete já reverteu a linha no banco
            task.refresh_from_db(fields=['is_ticket', 'updated_at'])

            transaction.on_commit(
                lambda: self.events.ticket_deleted(project_id, ticket_pk, task)
            )

        logger.info(f"🗑️ Ticket {ticket_pk} removido do projeto {project_id}")

    # === Auxiliares ===

    def _apply_deltas(self, model, instances, deltas):
        """Aplica as novas ordens dos irmãos com um único bulk_update"""
        if not deltas:
            return

        by_pk = {instance.pk: instance for instance in instances}
        changed = []
        for delta in deltas:
            instance = by_pk[delta.id]
            instance.order = delta.new_order
            changed.append(instance)

        model.objects.bulk_update(changed, ['order'])

    def _unique_ticket_id(self) -> str:
        """Gera ticket_id de 6 dígitos sem colidir com os existentes"""
        attempts = getattr(settings, 'OMNIHUB_TICKET_ID_ATTEMPTS', 10)
        for _ in range(attempts):
            candidate = generate_ticket_id()
            if not Ticket.objects.filter(ticket_id=candidate).exists():
                return candidate

        logger.error(f"❌ Nenhum ticket_id livre após {attempts} tentativas")
        raise TransientStorageError('Não foi possível gerar um ticket_id único')

    def _clean_column_name(self, name) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("'name' é obrigatório")
        name = name.strip()
        if len(name) > COLUMN_NAME_MAX_LENGTH:
            raise ValidationError(
                f"'name' deve ter no máximo {COLUMN_NAME_MAX_LENGTH} caracteres"
            )
        return name

    def _get_project(self, project_id) -> Project:
        try:
            return Project.objects.get(pk=project_id)
        except (Project.DoesNotExist, ValueError, TypeError):
            raise NotFound('Projeto não encontrado')

    def _lock_project(self, project_id) -> Project:
        try:
            return Project.objects.select_for_update().get(pk=project_id)
        except (Project.DoesNotExist, ValueError, TypeError):
            raise NotFound('Projeto não encontrado')

    def _get_column(self, column_id, lock=False) -> Column:
        queryset = Column.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=column_id)
        except (Column.DoesNotExist, ValueError, TypeError):
            raise NotFound('Coluna não encontrada')

    def _get_ticket(self, ticket_id, lock=False) -> Ticket:
        queryset = Ticket.objects.select_related('task')
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=ticket_id)
        except (Ticket.DoesNotExist, ValueError, TypeError):
            raise NotFound('Ticket não encontrado')
