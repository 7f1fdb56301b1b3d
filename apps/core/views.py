# apps/core/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.board.progress import calculate_project_progress, progress_payload

from .exceptions import NotFound
from .models import Project, Task
from .permissions import OmniHubPermissions, api_login_required, requer_acesso_projeto
from .services import TaskService
from .utils import campos_obrigatorios, ler_json


def get_task_service():
    """Ponto único de criação do serviço (testes trocam o broadcaster)"""
    return TaskService()


def _projeto_resumo(project):
    return {
        'id': project.pk,
        'name': project.name,
        'description': project.description,
        'owner': {
            'id': project.owner_id,
            'username': project.owner.username,
        },
        'isPublic': project.is_public,
        'updatedAt': project.updated_at.isoformat(),
    }


@api_login_required
@require_http_methods(["GET"])
def projetos_progresso(request):
    """
    Progresso de todos os projetos do usuário (dono ou colaborador aceito)
    Usado no painel de projetos
    """
    projects = (
        request.user.get_accessible_projects()
        .select_related('owner')
        .order_by('-updated_at')
    )

    resultado = []
    for project in projects:
        item = _projeto_resumo(project)
        item.update(progress_payload(calculate_project_progress(project)))
        resultado.append(item)

    return JsonResponse(resultado, safe=False)


@api_login_required
@require_http_methods(["GET"])
@requer_acesso_projeto
def projeto_progresso(request, project_id):
    """Progresso de um projeto (403 se não for membro)"""
    project = request.project

    item = _projeto_resumo(project)
    item.update(progress_payload(calculate_project_progress(project)))

    return JsonResponse(item)


# === Tasks ===

def _task_editavel(user, task_id):
    try:
        task = Task.objects.select_related('project').get(pk=task_id)
    except (Task.DoesNotExist, ValueError, TypeError):
        raise NotFound('Task não encontrada')

    OmniHubPermissions.garantir_acesso(user, task.project, editar=True)
    return task


@csrf_exempt
@api_login_required
@require_http_methods(["POST"])
def criar_task(request):
    """
    Cria Heading, Sub-Heading ou Task no projeto
    Body: {projectId, title, description?, type?, status?, priority?,
           deadline?, assignedTo?, parentTask?}
    """
    data = ler_json(request)
    campos_obrigatorios(data, 'projectId', 'title')

    try:
        project = Project.objects.get(pk=data['projectId'])
    except (Project.DoesNotExist, ValueError, TypeError):
        raise NotFound('Projeto não encontrado')
    OmniHubPermissions.garantir_acesso(request.user, project, editar=True)

    task = get_task_service().create_task(project.pk, data)

    return JsonResponse(task.to_dict(), status=201)


@api_login_required
@require_http_methods(["GET"])
@requer_acesso_projeto
def tasks_do_projeto(request, project_id):
    """Tasks do projeto; o front monta a árvore por parentTask"""
    tasks = get_task_service().list_tasks(request.project.pk)
    return JsonResponse(tasks, safe=False)


@csrf_exempt
@api_login_required
@require_http_methods(["PATCH", "DELETE"])
def task_detalhe(request, task_id):
    """
    PATCH: edita título, descrição, status, prioridade, prazo ou responsável
    DELETE: remove a task, as sub-tasks diretas e os tickets delas
    """
    _task_editavel(request.user, task_id)
    service = get_task_service()

    if request.method == 'DELETE':
        resultado = service.delete_task(task_id)
        return JsonResponse({'message': 'Task removida', **resultado})

    task = service.update_task(task_id, ler_json(request))
    return JsonResponse(task.to_dict())
