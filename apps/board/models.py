# apps/board/models.py

import random

from django.conf import settings
from django.db import models

from apps.core.models import Project, Task


def generate_ticket_id():
    """Rótulo numérico de 6 dígitos exibido no card"""
    return str(random.randint(100000, 999999))


class Column(models.Model):
    """Coluna do board Kanban de um projeto"""

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='columns'
    )
    name = models.CharField(max_length=100)
    order = models.IntegerField(default=0)
    is_default = models.BooleanField(
        default=False,
        help_text="Colunas protegidas (Start/Closed) criadas automaticamente"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board_column'
        ordering = ['order', 'id']
        indexes = [
            models.Index(fields=['project', 'order']),
        ]

    def __str__(self):
        return f"{self.name} ({self.project_id})"

    def to_dict(self):
        return {
            'id': self.pk,
            'project': self.project_id,
            'name': self.name,
            'order': self.order,
            'isDefault': self.is_default,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }


class Ticket(models.Model):
    """
    Projeção visível no board de uma Task

    Uma Task tem no máximo um Ticket (OneToOne); apagar a Task
    apaga o Ticket, apagar a coluna apaga os tickets dela.
    """

    task = models.OneToOneField(
        Task,
        on_delete=models.CASCADE,
        related_name='ticket'
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='tickets'
    )
    column = models.ForeignKey(
        Column,
        on_delete=models.CASCADE,
        related_name='tickets'
    )
    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tickets'
    )
    deadline = models.DateField(null=True, blank=True)
    priority = models.CharField(
        max_length=10,
        choices=Task.PRIORITY_CHOICES,
        default='Medium'
    )
    ticket_id = models.CharField(max_length=6, unique=True)
    order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board_ticket'
        ordering = ['column__order', 'order', 'id']
        indexes = [
            models.Index(fields=['column', 'order']),
        ]

    def __str__(self):
        return f"#{self.ticket_id} - {self.task.title}"

    def to_dict(self):
        """Ticket com task e responsável populados"""
        assignee = None
        if self.assignee_id:
            assignee = {
                'id': self.assignee.pk,
                'username': self.assignee.username,
                'avatar': self.assignee.avatar,
            }

        return {
            'id': self.pk,
            'ticketId': self.ticket_id,
            'project': self.project_id,
            'column': self.column_id,
            'order': self.order,
            'priority': self.priority,
            'deadline': self.deadline.isoformat() if self.deadline else None,
            'assignee': assignee,
            'task': self.task.summary(),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
