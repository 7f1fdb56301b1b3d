# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Project, ProjectContributor, Task, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin customizado para o modelo User"""

    list_display = ['username', 'email', 'get_full_name', 'is_active', 'date_joined']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Perfil', {
            'fields': ('avatar',)
        }),
    )


class ProjectContributorInline(admin.TabularInline):
    model = ProjectContributor
    extra = 0
    autocomplete_fields = ['user']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    """Admin para gerenciamento de projetos"""

    list_display = ['name', 'owner', 'contributors_count', 'is_public', 'updated_at']
    list_filter = ['is_public', 'created_at']
    search_fields = ['name', 'description']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ProjectContributorInline]

    def contributors_count(self, obj):
        return obj.contributors.filter(status=ProjectContributor.STATUS_ACCEPTED).count()

    contributors_count.short_description = 'Colaboradores'


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'project', 'type', 'status', 'priority', 'is_ticket']
    list_filter = ['type', 'status', 'priority', 'is_ticket']
    search_fields = ['title', 'description']
    raw_id_fields = ['parent_task', 'assigned_to']
