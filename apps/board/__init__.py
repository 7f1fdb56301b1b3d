# apps/board/__init__.py

"""
Board - Aplicação Kanban do OmniHub

Funcionalidades:
- Colunas e tickets por projeto com ordenação densa (drag-and-drop)
- Fan-out em tempo real via Django Channels
- Progresso do projeto calculado pela posição dos tickets
"""
