# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

# Rotas sem barra final: o front envia POST/PATCH/DELETE nesses caminhos exatos
urlpatterns = [
    # Colunas
    path('column', views.criar_coluna, name='criar_coluna'),
    path('column/move', views.mover_coluna, name='mover_coluna'),
    path('column/<int:column_id>', views.remover_coluna, name='remover_coluna'),

    # Tickets
    path('ticket', views.criar_ticket, name='criar_ticket'),
    path('ticket/move', views.mover_ticket, name='mover_ticket'),
    path('ticket/<int:ticket_id>', views.remover_ticket, name='remover_ticket'),

    # Board completo
    path('<int:project_id>', views.board_view, name='board'),
]
