# apps/core/__init__.py

"""
Core - Aplicação principal do OmniHub

Contém:
- Models de usuário, projeto, colaboradores e tasks
- Taxonomia de erros e middleware de respostas JSON
- Sistema de permissões por projeto
- Comando de seed para desenvolvimento
"""
