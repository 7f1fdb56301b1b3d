# apps/board/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.core.exceptions import NotFound, ValidationError
from apps.core.models import Project
from apps.core.permissions import OmniHubPermissions, api_login_required, requer_acesso_projeto
from apps.core.utils import campos_obrigatorios, ler_json

from .models import Column, Ticket
from .services import BoardStore


def get_board_store():
    """Ponto único de criação do store (facilita trocar o broadcaster em testes)"""
    return BoardStore()


def _projeto_editavel(user, project_id):
    try:
        project = Project.objects.get(pk=project_id)
    except (Project.DoesNotExist, ValueError, TypeError):
        raise NotFound('Projeto não encontrado')

    OmniHubPermissions.garantir_acesso(user, project, editar=True)
    return project


def _projeto_da_coluna(user, column_id):
    try:
        column = Column.objects.select_related('project').get(pk=column_id)
    except (Column.DoesNotExist, ValueError, TypeError):
        raise NotFound('Coluna não encontrada')

    OmniHubPermissions.garantir_acesso(user, column.project, editar=True)
    return column


def _projeto_do_ticket(user, ticket_id):
    try:
        ticket = Ticket.objects.select_related('project').get(pk=ticket_id)
    except (Ticket.DoesNotExist, ValueError, TypeError):
        raise NotFound('Ticket não encontrado')

    OmniHubPermissions.garantir_acesso(user, ticket.project, editar=True)
    return ticket


@api_login_required
@require_http_methods(["GET"])
@requer_acesso_projeto
def board_view(request, project_id):
    """
    Board completo do projeto: colunas ordenadas + tickets populados
    Cria as colunas padrão no primeiro acesso
    """
    return JsonResponse(get_board_store().get_board(request.project.pk))


@csrf_exempt
@api_login_required
@require_http_methods(["POST"])
def criar_coluna(request):
    """Cria coluna no fim do board"""
    data = ler_json(request)
    campos_obrigatorios(data, 'projectId', 'name')

    project = _projeto_editavel(request.user, data['projectId'])
    column = get_board_store().create_column(project.pk, data['name'])

    return JsonResponse(column.to_dict(), status=201)


@csrf_exempt
@api_login_required
@require_http_methods(["POST"])
def criar_ticket(request):
    """Promove uma task a ticket (coluna opcional)"""
    data = ler_json(request)
    campos_obrigatorios(data, 'taskId', 'projectId')

    project = _projeto_editavel(request.user, data['projectId'])
    ticket = get_board_store().create_ticket(
        data['taskId'],
        project.pk,
        data.get('columnId') or None,
    )

    return JsonResponse(ticket.to_dict(), status=201)


@csrf_exempt
@api_login_required
@require_http_methods(["PATCH"])
def mover_ticket(request):
    """
    Drag-and-drop de ticket
    Usado pelo board ao soltar um card
    """
    data = ler_json(request)
    campos_obrigatorios(data, 'ticketId', 'newColumnId')
    if 'newOrder' not in data:
        raise ValidationError('Campos obrigatórios: newOrder')

    _projeto_do_ticket(request.user, data['ticketId'])
    ticket = get_board_store().move_ticket(
        data['ticketId'],
        data['newColumnId'],
        data['newOrder'],
    )

    return JsonResponse(ticket.to_dict())


@csrf_exempt
@api_login_required
@require_http_methods(["PATCH"])
def mover_coluna(request):
    """Reordena colunas do board"""
    data = ler_json(request)
    campos_obrigatorios(data, 'columnId')
    if 'newOrder' not in data:
        raise ValidationError('Campos obrigatórios: newOrder')

    _projeto_da_coluna(request.user, data['columnId'])
    column = get_board_store().move_column(data['columnId'], data['newOrder'])

    return JsonResponse(column.to_dict())


@csrf_exempt
@api_login_required
@require_http_methods(["DELETE"])
def remover_ticket(request, ticket_id):
    """Tira o ticket do board; a task continua existindo"""
    _projeto_do_ticket(request.user, ticket_id)
    get_board_store().delete_ticket(ticket_id)

    return JsonResponse({'message': 'Ticket removido'})


@csrf_exempt
@api_login_required
@require_http_methods(["DELETE"])
def remover_coluna(request, column_id):
    """Remove a coluna e todos os tickets dela"""
    _projeto_da_coluna(request.user, column_id)
    deleted_tickets = get_board_store().delete_column(column_id)

    return JsonResponse({
        'message': 'Coluna removida',
        'deletedTickets': deleted_tickets,
    })
