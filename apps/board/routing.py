# apps/board/routing.py

from django.urls import re_path
from . import consumers

# Rotas WebSocket para a aplicação board
websocket_urlpatterns = [
    # Sala do board de um projeto - atualizações em tempo real
    re_path(r'ws/board/(?P<project_id>\d+)/$', consumers.BoardConsumer.as_asgi()),
]
