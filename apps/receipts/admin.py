# ==========================================
# apps/receipts/admin.py
# ==========================================

from django.contrib import admin
from apps.receipts.models import Donation


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    """
    Admin interface for Donations.

    Receipts are immutable once issued; the admin is view-only.
    """

    list_display = [
        'receipt_no',
        'date',
        'donor_name',
        'total',
        'payment_mode',
        'eligible_80g',
        'range_id',
        'org_id',
    ]
    list_filter = ['payment_mode', 'eligible_80g', 'date', 'org_id']
    search_fields = ['receipt_no', 'donor_name', 'donor__donor_id']
    date_hierarchy = 'date'
    ordering = ['-date', '-receipt_no']

    fieldsets = (
        ('Receipt', {
            'fields': ('org_id', 'receipt_no', 'range_id', 'date', 'total', 'breakup', 'eligible_80g')
        }),
        ('Donor', {
            'fields': (
                'donor',
                'donor_name',
                'donor_mobile',
                'donor_email',
                'donor_pan_masked',
                'donor_address',
            )
        }),
        ('Payment', {
            'fields': ('payment_mode', 'payment_ref', 'payment_bank')
        }),
        ('Metadata', {
            'fields': ('created_by', 'created_at'),
            'classes': ('collapse',)
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
