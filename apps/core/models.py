# apps/core/models.py

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ObjectDoesNotExist
from django.db import models
from django.db.models import Q


class User(AbstractUser):
    """
    Usuário do OmniHub

    Autenticação fica com django.contrib.auth; aqui só adicionamos
    os campos de perfil que o board exibe.
    """

    avatar = models.CharField(
        max_length=500,
        blank=True,
        help_text="URL pública do avatar (object storage externo)"
    )

    class Meta:
        db_table = 'omnihub_user'

    def get_accessible_projects(self):
        """
        Retorna projetos que o usuário pode acessar

        Dono do projeto ou colaborador com convite aceito.
        """
        return Project.objects.filter(
            Q(owner=self) |
            Q(contributors__user=self,
              contributors__status=ProjectContributor.STATUS_ACCEPTED)
        ).distinct()

    def __str__(self):
        return self.get_full_name() or self.username


class Project(models.Model):
    """Projeto - dono de colunas, tasks e (indiretamente) tickets"""

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='owned_projects'
    )
    is_public = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'project'
        ordering = ['-updated_at']

    def __str__(self):
        return self.name

    def is_member(self, user):
        """Dono ou colaborador aceito"""
        if not user or not user.is_authenticated:
            return False
        if self.owner_id == user.id:
            return True
        return self.contributors.filter(
            user=user,
            status=ProjectContributor.STATUS_ACCEPTED
        ).exists()


class ProjectContributor(models.Model):
    """Colaborador convidado para um projeto"""

    ROLE_CHOICES = [
        ('Admin', 'Admin'),
        ('Editor', 'Editor'),
        ('Viewer', 'Viewer'),
    ]

    STATUS_PENDING = 'Pending'
    STATUS_ACCEPTED = 'Accepted'
    STATUS_IGNORED = 'Ignored'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pendente'),
        (STATUS_ACCEPTED, 'Aceito'),
        (STATUS_IGNORED, 'Ignorado'),
    ]

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='contributors'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='contributions'
    )
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='Editor')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    invited_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'project_contributor'
        unique_together = ['project', 'user']

    def __str__(self):
        return f"{self.user} em {self.project} ({self.status})"


class Task(models.Model):
    """
    Item de trabalho canônico

    Pode formar árvore via parent_task (referência fraca, sem posse)
    e pode ser promovido a Ticket no board (is_ticket).
    """

    PRIORITY_CHOICES = [
        ('Low', 'Low'),
        ('Medium', 'Medium'),
        ('High', 'High'),
        ('Critical', 'Critical'),
    ]

    STATUS_TODO = 'To Do'
    STATUS_IN_PROGRESS = 'In Progress'
    STATUS_DONE = 'Done'

    STATUS_CHOICES = [
        (STATUS_TODO, 'To Do'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_DONE, 'Done'),
    ]

    TYPE_HEADING = 'Heading'
    TYPE_SUB_HEADING = 'Sub-Heading'
    TYPE_TASK = 'Task'

    TYPE_CHOICES = [
        (TYPE_HEADING, 'Heading'),
        (TYPE_SUB_HEADING, 'Sub-Heading'),
        (TYPE_TASK, 'Task'),
    ]

    # Campos espelhados no Ticket quando a task está no board
    TICKET_MIRRORED_FIELDS = ('priority', 'deadline', 'assigned_to_id')

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='Medium')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_TODO)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_TASK)
    deadline = models.DateField(null=True, blank=True)
    assigned_to = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_tasks'
    )
    parent_task = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subtasks'
    )
    is_ticket = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task'
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.type} - {self.title}"

    @property
    def is_organizational(self):
        return self.type in (self.TYPE_HEADING, self.TYPE_SUB_HEADING)

    def delete_with_subtasks(self):
        """
        Remove a task e as sub-tasks diretas

        Os tickets somem junto pelo CASCADE de Ticket.task.
        Retorna os ids removidos.
        """
        ids = [self.pk] + list(self.subtasks.values_list('pk', flat=True))
        Task.objects.filter(pk__in=ids).delete()
        return ids

    def summary(self):
        """Resumo usado no payload dos tickets"""
        return {
            'id': self.pk,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'priority': self.priority,
            'deadline': self.deadline.isoformat() if self.deadline else None,
            'assignedTo': self.assigned_to_id,
            'isTicket': self.is_ticket,
        }

    def to_dict(self):
        """
        Task completa para a lista de tasks e os eventos task_*

        Inclui responsável e, se estiver no board, o ticket com a coluna.
        O front monta a hierarquia a partir de parentTask.
        """
        data = self.summary()

        assignee = None
        if self.assigned_to_id:
            assignee = {
                'id': self.assigned_to.pk,
                'username': self.assigned_to.username,
                'avatar': self.assigned_to.avatar,
            }

        ticket = None
        if self.is_ticket:
            try:
                linked = self.ticket
            except ObjectDoesNotExist:
                linked = None
            if linked is not None:
                ticket = {
                    'id': linked.pk,
                    'ticketId': linked.ticket_id,
                    'column': {'id': linked.column_id, 'name': linked.column.name},
                }

        data.update({
            'project': self.project_id,
            'type': self.type,
            'parentTask': self.parent_task_id,
            'assignee': assignee,
            'ticket': ticket,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        })
        return data
