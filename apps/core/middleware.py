# apps/core/middleware.py

import logging

from django.db import DatabaseError
from django.http import JsonResponse

from .exceptions import OmniHubError, TransientStorageError

logger = logging.getLogger(__name__)


class ApiErrorMiddleware:
    """
    Converte erros da aplicação em respostas JSON estruturadas

    Toda OmniHubError vira {"status", "message", "code"} com o status
    HTTP do erro. Falha do banco vira TransientStorageError (500).
    O resto segue para o tratamento padrão do Django.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if isinstance(exception, OmniHubError):
            if exception.status >= 500:
                logger.error(f"❌ {exception.code} em {request.path}: {exception.message}")
            else:
                logger.info(f"⚠️ {exception.code} em {request.path}: {exception.message}")
            return JsonResponse(exception.as_dict(), status=exception.status)

        if isinstance(exception, DatabaseError):
            logger.exception(f"❌ Erro de banco em {request.path}")
            error = TransientStorageError()
            return JsonResponse(error.as_dict(), status=error.status)

        return None
