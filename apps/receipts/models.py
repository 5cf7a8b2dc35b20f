# ==========================================
# apps/receipts/models.py
# ==========================================

from django.db import models

from apps.donors.models import Donor


class PaymentMode(models.TextChoices):
    CASH = 'CASH', 'Cash'
    UPI = 'UPI', 'UPI'
    CHEQUE = 'CHEQUE', 'Cheque'
    NEFT = 'NEFT', 'NEFT'
    RTGS = 'RTGS', 'RTGS'
    CARD = 'CARD', 'Card'
    ONLINE = 'ONLINE', 'Online'


class Donation(models.Model):
    """
    An issued receipt. Immutable once created.

    Donor fields are a snapshot taken at issue time; later changes to the
    donor profile do not alter past receipts.
    """

    org_id = models.CharField(max_length=64)
    receipt_no = models.CharField(max_length=16)
    range_id = models.CharField(max_length=8)
    date = models.DateField()

    donor = models.ForeignKey(Donor, on_delete=models.PROTECT, related_name='donations')

    # Donor snapshot
    donor_name = models.CharField(max_length=200)
    donor_mobile = models.CharField(max_length=16, blank=True)
    donor_email = models.CharField(max_length=254, blank=True)
    donor_pan_masked = models.CharField(max_length=10, blank=True)
    donor_address = models.JSONField(default=dict, blank=True)

    # purpose -> amount, amounts stored as 2-decimal strings
    breakup = models.JSONField()

    payment_mode = models.CharField(max_length=10, choices=PaymentMode.choices)
    payment_ref = models.CharField(max_length=100, blank=True)
    payment_bank = models.CharField(max_length=100, blank=True)

    eligible_80g = models.BooleanField(default=True)
    total = models.DecimalField(max_digits=12, decimal_places=2)

    created_by = models.CharField(max_length=150, default='system')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'donations'
        constraints = [
            models.UniqueConstraint(fields=['org_id', 'receipt_no'], name='uniq_receipt_per_org'),
        ]
        indexes = [
            models.Index(fields=['org_id', 'donor', 'date', 'receipt_no'], name='donations_by_donor_idx'),
            models.Index(fields=['org_id', 'date', 'receipt_no'], name='donations_by_date_idx'),
            models.Index(fields=['org_id', 'range_id'], name='donations_by_range_idx'),
        ]
        ordering = ['-date', '-receipt_no']

    def __str__(self):
        return f"{self.receipt_no} - {self.donor_name} ({self.total})"
