# apps/__init__.py

"""
OmniHub - Aplicações Django

Este pacote contém todas as aplicações do sistema:
- core: Models principais, permissões, erros e progresso de projetos
- board: Kanban, ordenação de colunas/tickets e WebSockets
"""

__version__ = '0.1.0'
__author__ = 'Equipe OmniHub'
