# apps/board/signals.py

import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver
from django.utils import timezone

from apps.core.models import Task

from .models import Ticket

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=Ticket)
def reverter_task_do_ticket(sender, instance, **kwargs):
    """
    Ticket removido por qualquer caminho (store, admin, cascade da coluna)
    devolve a task ao estado de task comum
    """
    revertidas = Task.objects.filter(pk=instance.task_id, is_ticket=True).update(
        is_ticket=False,
        updated_at=timezone.now(),
    )
    if revertidas:
        logger.debug(f"↩️ Task {instance.task_id} deixou de ser ticket")
