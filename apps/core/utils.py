# apps/core/utils.py

import json
from typing import Dict

from .exceptions import ValidationError


def ler_json(request) -> Dict:
    """
    Lê o corpo JSON da requisição
    Corpo inválido ou que não seja objeto vira ValidationError
    """
    try:
        data = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError('JSON inválido')

    if not isinstance(data, dict):
        raise ValidationError('Corpo da requisição deve ser um objeto JSON')
    return data


def campos_obrigatorios(data: Dict, *campos: str) -> None:
    faltando = [campo for campo in campos if data.get(campo) in (None, '')]
    if faltando:
        raise ValidationError(f"Campos obrigatórios: {', '.join(faltando)}")
