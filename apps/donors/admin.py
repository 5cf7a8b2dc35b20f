# ==========================================
# apps/donors/admin.py
# ==========================================

from django.contrib import admin
from apps.donors.models import Donor, DonorAlias


class DonorAliasInline(admin.TabularInline):
    """Read-only inline for donor aliases (write-once)."""
    model = DonorAlias
    extra = 0
    fields = ['alias_type', 'alias_value', 'created_at']
    readonly_fields = ['alias_type', 'alias_value', 'created_at']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    """Admin interface for Donors."""

    list_display = [
        'donor_id',
        'name',
        'org_id',
        'mobile_masked',
        'pan_masked',
        'donation_count',
        'lifetime_total',
        'last_donation_date',
    ]
    list_filter = ['org_id', 'last_donation_date']
    search_fields = ['donor_id', 'name', 'phone_e164']
    readonly_fields = [
        'org_id',
        'donor_id',
        'pan_hash',
        'email_hash',
        'phone_e164',
        'lifetime_total',
        'donation_count',
        'last_donation_date',
        'created_at',
        'updated_at',
    ]
    inlines = [DonorAliasInline]
    ordering = ['name']

    fieldsets = (
        ('Donor', {
            'fields': ('org_id', 'donor_id', 'name', 'address')
        }),
        ('Contact (masked)', {
            'fields': ('mobile_masked', 'email_masked', 'pan_masked')
        }),
        ('Identifiers', {
            'fields': ('phone_e164', 'pan_hash', 'email_hash'),
            'classes': ('collapse',)
        }),
        ('Statistics', {
            'fields': ('lifetime_total', 'donation_count', 'last_donation_date'),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(DonorAlias)
class DonorAliasAdmin(admin.ModelAdmin):
    """Admin interface for Donor Aliases."""

    list_display = ['alias_type', 'alias_value', 'get_donor_id', 'org_id', 'created_at']
    list_filter = ['alias_type', 'org_id']
    search_fields = ['alias_value', 'donor__donor_id']
    readonly_fields = ['org_id', 'alias_type', 'alias_value', 'donor', 'created_at']

    def get_donor_id(self, obj):
        return obj.donor.donor_id
    get_donor_id.short_description = 'Donor'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
