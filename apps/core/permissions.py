# apps/core/permissions.py

from functools import wraps

from .exceptions import Forbidden, NotFound, Unauthorized


class OmniHubPermissions:
    """
    Regras de acesso do OmniHub
    Baseado em dono do projeto e colaboradores com convite aceito
    """

    @staticmethod
    def is_authenticated(user):
        return user is not None and user.is_authenticated

    @staticmethod
    def tem_acesso_projeto(user, project):
        """Dono ou colaborador aceito"""
        if not OmniHubPermissions.is_authenticated(user):
            return False
        return project.is_member(user)

    @staticmethod
    def pode_editar_board(user, project):
        """Viewer só enxerga o board, não move nem cria"""
        if not OmniHubPermissions.tem_acesso_projeto(user, project):
            return False

        if project.owner_id == user.id:
            return True

        return project.contributors.filter(
            user=user,
            status='Accepted',
            role__in=['Admin', 'Editor']
        ).exists()

    @staticmethod
    def garantir_acesso(user, project, editar=False):
        """Levanta Forbidden quando o usuário não pode usar o board"""
        if editar:
            permitido = OmniHubPermissions.pode_editar_board(user, project)
        else:
            permitido = OmniHubPermissions.tem_acesso_projeto(user, project)

        if not permitido:
            raise Forbidden()


# Decoradores para views JSON

def api_login_required(view_func):
    """
    Equivalente ao login_required para a API
    Retorna 401 em JSON ao invés de redirecionar para o login
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        if not OmniHubPermissions.is_authenticated(getattr(request, 'user', None)):
            raise Unauthorized()
        return view_func(request, *args, **kwargs)

    return wrapped_view


def requer_acesso_projeto(view_func):
    """
    Decorador que verifica acesso ao projeto
    Espera que a view receba project_id como parâmetro
    """

    @wraps(view_func)
    def wrapped_view(request, project_id, *args, **kwargs):
        from .models import Project

        try:
            project = Project.objects.get(pk=project_id)
        except Project.DoesNotExist:
            raise NotFound('Projeto não encontrado')

        OmniHubPermissions.garantir_acesso(request.user, project)

        # Adiciona o projeto ao request para uso na view
        request.project = project
        return view_func(request, project_id, *args, **kwargs)

    return wrapped_view
