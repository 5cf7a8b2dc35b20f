# ==========================================
# apps/ranges/admin.py
# ==========================================

from django.contrib import admin
from apps.ranges.models import ReceiptRange


@admin.register(ReceiptRange)
class ReceiptRangeAdmin(admin.ModelAdmin):
    """
    Admin interface for Receipt Ranges.

    The cursor, version and status are only changed through the range
    services, so they are read-only here.
    """

    list_display = [
        'range_id',
        'alias',
        'org_id',
        'year',
        'start',
        'end',
        'next_number',
        'remaining',
        'status',
        'version',
    ]
    list_filter = ['status', 'year', 'org_id']
    search_fields = ['range_id', 'alias']
    readonly_fields = [
        'org_id',
        'range_id',
        'year',
        'start',
        'end',
        'next_number',
        'status',
        'version',
        'created_by',
        'created_at',
        'updated_at',
        'locked_by',
        'locked_at',
    ]
    ordering = ['-year', 'alias']

    fieldsets = (
        ('Range', {
            'fields': ('org_id', 'range_id', 'alias', 'year', 'start', 'end')
        }),
        ('State', {
            'fields': ('status', 'next_number', 'version')
        }),
        ('Metadata', {
            'fields': ('created_by', 'created_at', 'updated_at', 'locked_by', 'locked_at'),
            'classes': ('collapse',)
        }),
    )

    def remaining(self, obj):
        return obj.remaining

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
