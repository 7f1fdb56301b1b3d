# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # Progresso calculado a partir do board
    path('projects/progress', views.projetos_progresso, name='projetos_progresso'),
    path('projects/<int:project_id>/progress', views.projeto_progresso, name='projeto_progresso'),

    # Tasks (POST cria, PATCH/DELETE por id)
    path('tasks', views.criar_task, name='criar_task'),
    path('tasks/project/<int:project_id>', views.tasks_do_projeto, name='tasks_do_projeto'),
    path('tasks/<int:task_id>', views.task_detalhe, name='task_detalhe'),
]
