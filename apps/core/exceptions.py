# apps/core/exceptions.py

"""
Taxonomia de erros do OmniHub

Cada erro carrega o status HTTP e um código curto. O ApiErrorMiddleware
converte qualquer OmniHubError em {"status", "message", "code"}.
"""


class OmniHubError(Exception):
    """Erro base da aplicação"""

    status = 500
    code = 'Error'
    default_message = 'Erro interno'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self):
        return {
            'status': self.status,
            'message': self.message,
            'code': self.code,
        }


class NotFound(OmniHubError):
    status = 404
    code = 'NotFound'
    default_message = 'Recurso não encontrado'


class ValidationError(OmniHubError):
    status = 400
    code = 'ValidationError'
    default_message = 'Dados inválidos'


class Unauthorized(OmniHubError):
    status = 401
    code = 'Unauthorized'
    default_message = 'Autenticação necessária'


class Forbidden(OmniHubError):
    status = 403
    code = 'Forbidden'
    default_message = 'Você não tem acesso a este projeto'


class Conflict(OmniHubError):
    status = 400
    code = 'Conflict'
    default_message = 'Conflito com o estado atual'


class AlreadyTicket(Conflict):
    code = 'AlreadyTicket'
    default_message = 'Task já é um ticket'


class TransientStorageError(OmniHubError):
    """Banco indisponível - não há retry automático aqui"""

    status = 500
    code = 'TransientStorageError'
    default_message = 'Armazenamento indisponível no momento'
