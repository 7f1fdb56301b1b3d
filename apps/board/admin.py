# apps/board/admin.py

from django.contrib import admin
from django.utils.html import format_html

from .models import Column, Ticket


@admin.register(Column)
class ColumnAdmin(admin.ModelAdmin):
    list_display = ['name', 'project', 'order', 'default_badge', 'tickets_count']
    list_filter = ['is_default']
    ordering = ['project', 'order']

    def default_badge(self, obj):
        """Colunas padrão aparecem destacadas"""
        if not obj.is_default:
            return '-'
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            '#3B82F6', 'Padrão'
        )

    default_badge.short_description = 'Padrão'

    def tickets_count(self, obj):
        return obj.tickets.count()

    tickets_count.short_description = 'Tickets'


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ['ticket_id', 'task', 'project', 'column', 'order', 'priority', 'assignee']
    list_filter = ['priority']
    search_fields = ['ticket_id', 'task__title']
    raw_id_fields = ['assignee']
    ordering = ['project', 'column__order', 'order']

    # Posição e projeto só mudam pelo BoardStore (densidade e projeto da coluna)
    readonly_fields = ['task', 'ticket_id', 'project', 'column', 'order', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False
