# config/urls.py

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API do board, tasks e progresso de projetos
    path('board/', include('apps.board.urls')),
    path('', include('apps.core.urls')),
]

# Customizar títulos do admin
admin.site.site_header = 'OmniHub Admin'
admin.site.site_title = 'OmniHub'
admin.site.index_title = 'Administração do Sistema'
