# apps/core/signals.py

import logging

from django.db import transaction
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Task

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Task)
def guardar_campos_espelhados(sender, instance, **kwargs):
    """
    Guarda os valores anteriores de priority/deadline/responsável
    para saber no post_save se o Ticket precisa ser atualizado
    """
    instance._valores_anteriores = None

    if not instance.pk or not instance.is_ticket:
        return

    try:
        anterior = sender.objects.get(pk=instance.pk)
    except sender.DoesNotExist:
        return

    instance._valores_anteriores = {
        campo: getattr(anterior, campo) for campo in Task.TICKET_MIRRORED_FIELDS
    }


@receiver(post_save, sender=Task)
def sincronizar_ticket(sender, instance, created, update_fields=None, **kwargs):
    """
    Espelha no Ticket as mudanças de priority, deadline e responsável
    e avisa o board via ticket_updated
    """
    anteriores = getattr(instance, '_valores_anteriores', None)
    if created or not anteriores:
        return

    alterados = {
        campo: getattr(instance, campo)
        for campo, valor in anteriores.items()
        if getattr(instance, campo) != valor
    }
    if not alterados:
        return

    from apps.board.models import Ticket
    from apps.board.realtime import BoardEvents

    updates = {}
    if 'priority' in alterados:
        updates['priority'] = alterados['priority']
    if 'deadline' in alterados:
        updates['deadline'] = alterados['deadline']
    if 'assigned_to_id' in alterados:
        updates['assignee_id'] = alterados['assigned_to_id']

    atualizados = Ticket.objects.filter(task=instance).update(**updates)
    if not atualizados:
        return

    logger.info(f"🔄 Ticket da task {instance.pk} sincronizado: {sorted(updates)}")

    def emitir():
        ticket = (
            Ticket.objects.select_related('task', 'assignee')
            .filter(task_id=instance.pk)
            .first()
        )
        if ticket is not None:
            BoardEvents().ticket_updated(ticket)

    transaction.on_commit(emitir)
