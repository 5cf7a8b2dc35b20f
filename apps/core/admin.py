# ==========================================
# apps/core/admin.py
# ==========================================

from django.contrib import admin
from apps.core.models import OrgMembership


@admin.register(OrgMembership)
class OrgMembershipAdmin(admin.ModelAdmin):
    """Admin interface for assigning staff to organizations."""

    list_display = ['user', 'org_id', 'joined_at']
    list_filter = ['org_id']
    search_fields = ['user__username', 'org_id']
    readonly_fields = ['joined_at']
    ordering = ['org_id', 'user__username']
