# apps/board/progress.py

"""
Cálculo de progresso do projeto a partir das posições no board

Primeira coluna vale 0%, última vale 100%, as do meio ficam
igualmente espaçadas. Tasks fora do board usam o status.
Sempre recalculado: qualquer movimento invalida o resultado anterior.
"""

from collections import defaultdict, namedtuple
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping

ProgressStats = namedtuple('ProgressStats', ['progress', 'total', 'completed', 'pending'])

# Foto mínima de uma Task para o cálculo
TaskSnapshot = namedtuple('TaskSnapshot', ['id', 'type', 'status', 'is_ticket', 'parent_id'])

STATUS_SCORES = {
    'Done': 100,
    'In Progress': 50,
}

ORGANIZATIONAL_TYPES = ('Heading', 'Sub-Heading')


def weigh_columns(column_ids: List) -> Dict:
    """
    Peso de cada coluna, na ordem recebida

    Com N colunas, a coluna i vale i * 100 / (N - 1); uma coluna só vale 0.
    """
    if len(column_ids) <= 1:
        return {column_id: 0 for column_id in column_ids}

    step = 100 / (len(column_ids) - 1)
    return {column_id: index * step for index, column_id in enumerate(column_ids)}


def build_children_index(tasks: Iterable[TaskSnapshot]) -> Dict:
    """Mapa parent_id -> ids dos filhos"""
    children = defaultdict(list)
    for task in tasks:
        if task.parent_id is not None:
            children[task.parent_id].append(task.id)
    return children


def is_countable(task: TaskSnapshot, children: Mapping) -> bool:
    """
    Conta para o progresso: ticket, task comum, ou heading/sub-heading
    sem filhos (folha organizacional vira item de trabalho)
    """
    if task.is_ticket:
        return True
    if task.type not in ORGANIZATIONAL_TYPES:
        return True
    return not children.get(task.id)


def summarize(tasks: Iterable[TaskSnapshot], ticket_columns: Mapping,
              weights: Mapping) -> ProgressStats:
    """
    Agrega as contribuições

    `ticket_columns` mapeia task_id -> column_id dos tickets existentes.
    """
    tasks = list(tasks)
    children = build_children_index(tasks)

    total = 0
    completed = 0
    score_sum = 0

    for task in tasks:
        if not is_countable(task, children):
            continue

        total += 1
        if task.is_ticket and task.id in ticket_columns:
            score = weights.get(ticket_columns[task.id], 0)
        else:
            score = STATUS_SCORES.get(task.status, 0)

        score_sum += score
        if score >= 100:
            completed += 1

    if total == 0:
        return ProgressStats(progress=0, total=0, completed=0, pending=0)

    progress = Decimal(str(score_sum / total)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return ProgressStats(
        progress=int(progress),
        total=total,
        completed=completed,
        pending=total - completed,
    )


def calculate_project_progress(project) -> ProgressStats:
    """Carrega colunas, tasks e tickets do projeto e calcula o progresso"""
    from apps.core.models import Task
    from .models import Column, Ticket

    column_ids = list(
        Column.objects.filter(project=project)
        .order_by('order', 'id')
        .values_list('pk', flat=True)
    )
    weights = weigh_columns(column_ids)

    tasks = [
        TaskSnapshot(*row)
        for row in Task.objects.filter(project=project).values_list(
            'pk', 'type', 'status', 'is_ticket', 'parent_task_id'
        )
    ]
    ticket_columns = dict(
        Ticket.objects.filter(project=project).values_list('task_id', 'column_id')
    )

    return summarize(tasks, ticket_columns, weights)


def progress_payload(stats: ProgressStats) -> dict:
    return {
        'progress': stats.progress,
        'stats': stats._asdict(),
    }
