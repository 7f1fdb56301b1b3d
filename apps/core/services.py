# apps/core/services.py

"""
TaskService - CRUD das tasks de um projeto

Mesma receita do BoardStore: escrita dentro de transaction.atomic(),
eventos para a sala do projeto só depois do commit. O espelhamento
de priority/deadline/responsável no Ticket fica no post_save da Task.
"""

import logging
from typing import Dict, List, Optional

from django.db import transaction
from django.utils.dateparse import parse_date

from apps.board.realtime import BoardEvents

from .exceptions import NotFound, ValidationError
from .models import Project, Task, User

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200

# Campos que o PATCH aceita (chave JSON -> atributo da Task)
CAMPOS_EDITAVEIS = {
    'title': 'title',
    'description': 'description',
    'status': 'status',
    'priority': 'priority',
    'deadline': 'deadline',
    'assignedTo': 'assigned_to',
}


class TaskService:
    """Cria, lista, edita e remove tasks emitindo os eventos task_*"""

    def __init__(self, broadcaster=None, events: Optional[BoardEvents] = None):
        self.events = events or BoardEvents(broadcaster)

    def list_tasks(self, project_id) -> List[dict]:
        """Tasks do projeto em ordem de criação, com ticket e coluna"""
        project = self._get_project(project_id)
        tasks = (
            Task.objects.filter(project=project)
            .select_related('assigned_to', 'ticket__column')
            .order_by('created_at', 'id')
        )
        return [task.to_dict() for task in tasks]

    def create_task(self, project_id, data: Dict) -> Task:
        project = self._get_project(project_id)

        task = Task(
            project=project,
            title=self._clean_title(data.get('title')),
            description=self._clean_description(data.get('description')),
            type=self._clean_choice(data.get('type') or Task.TYPE_TASK, Task.TYPE_CHOICES, 'type'),
            status=self._clean_choice(data.get('status') or Task.STATUS_TODO, Task.STATUS_CHOICES, 'status'),
            priority=self._clean_choice(data.get('priority') or 'Medium', Task.PRIORITY_CHOICES, 'priority'),
            deadline=self._clean_deadline(data.get('deadline')),
            assigned_to=self._clean_assignee(project, data.get('assignedTo')),
            parent_task=self._clean_parent(project, data.get('parentTask')),
        )

        with transaction.atomic():
            task.save()
            transaction.on_commit(lambda: self.events.task_created(task))

        logger.info(f"📝 Task {task.pk} criada no projeto {project.pk} ({task.type})")
        return task

    def update_task(self, task_id, data: Dict) -> Task:
        """
        Atualiza só os campos permitidos; qualquer outra chave é rejeitada
        """
        invalidos = sorted(set(data) - set(CAMPOS_EDITAVEIS))
        if invalidos:
            raise ValidationError(f"Atualização inválida: {', '.join(invalidos)}")

        with transaction.atomic():
            task = self._get_task(task_id, lock=True)
            project = task.project

            for chave, valor in data.items():
                if chave == 'title':
                    valor = self._clean_title(valor)
                elif chave == 'description':
                    valor = self._clean_description(valor)
                elif chave == 'status':
                    valor = self._clean_choice(valor, Task.STATUS_CHOICES, 'status')
                elif chave == 'priority':
                    valor = self._clean_choice(valor, Task.PRIORITY_CHOICES, 'priority')
                elif chave == 'deadline':
                    valor = self._clean_deadline(valor)
                elif chave == 'assignedTo':
                    valor = self._clean_assignee(project, valor)
                setattr(task, CAMPOS_EDITAVEIS[chave], valor)

            task.save()
            transaction.on_commit(lambda: self.events.task_updated(task))

        logger.info(f"✏️ Task {task.pk} atualizada: {sorted(data)}")
        return task

    def delete_task(self, task_id) -> Dict:
        """
        Remove a task e as sub-tasks diretas (tickets vão junto)

        Retorna os ids removidos e quantos tickets saíram do board.
        """
        with transaction.atomic():
            task = self._get_task(task_id, lock=True)
            project_id = task.project_id

            ids = [task.pk] + list(task.subtasks.values_list('pk', flat=True))
            deleted_tickets = Task.objects.filter(pk__in=ids, is_ticket=True).count()
            deleted_ids = task.delete_with_subtasks()

            transaction.on_commit(
                lambda: self.events.task_deleted(project_id, deleted_ids, deleted_tickets)
            )

        logger.info(
            f"🗑️ Task {task_id} removida do projeto {project_id} "
            f"({len(deleted_ids)} tasks, {deleted_tickets} tickets)"
        )
        return {'deletedTasks': deleted_ids, 'deletedTickets': deleted_tickets}

    # === Validação ===

    def _clean_title(self, value) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("'title' é obrigatório")
        value = value.strip()
        if len(value) > TITLE_MAX_LENGTH:
            raise ValidationError(f"'title' deve ter no máximo {TITLE_MAX_LENGTH} caracteres")
        return value

    def _clean_description(self, value) -> str:
        if value is None:
            return ''
        if not isinstance(value, str):
            raise ValidationError("'description' deve ser texto")
        return value

    def _clean_choice(self, value, choices, field) -> str:
        validos = [choice for choice, _ in choices]
        if value not in validos:
            raise ValidationError(f"'{field}' deve ser um de: {', '.join(validos)}")
        return value

    def _clean_deadline(self, value):
        if value in (None, ''):
            return None
        if not isinstance(value, str):
            raise ValidationError("'deadline' deve ser uma data AAAA-MM-DD")
        try:
            deadline = parse_date(value[:10])
        except ValueError:
            deadline = None
        if deadline is None:
            raise ValidationError("'deadline' deve ser uma data AAAA-MM-DD")
        return deadline

    def _clean_assignee(self, project, value) -> Optional[User]:
        """Responsável precisa ser membro do projeto"""
        if value in (None, ''):
            return None
        try:
            user = User.objects.get(pk=value)
        except (User.DoesNotExist, ValueError, TypeError):
            raise ValidationError('Responsável não encontrado')
        if not project.is_member(user):
            raise ValidationError('Responsável não é membro do projeto')
        return user

    def _clean_parent(self, project, value) -> Optional[Task]:
        if value in (None, ''):
            return None
        try:
            parent = Task.objects.get(pk=value)
        except (Task.DoesNotExist, ValueError, TypeError):
            raise ValidationError('Task pai não encontrada')
        if parent.project_id != project.pk:
            raise ValidationError('Task pai pertence a outro projeto')
        return parent

    # === Auxiliares ===

    def _get_project(self, project_id) -> Project:
        try:
            return Project.objects.get(pk=project_id)
        except (Project.DoesNotExist, ValueError, TypeError):
            raise NotFound('Projeto não encontrado')

    def _get_task(self, task_id, lock=False) -> Task:
        queryset = Task.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=task_id)
        except (Task.DoesNotExist, ValueError, TypeError):
            raise NotFound('Task não encontrada')
