# ==========================================
# apps/donors/models.py
# ==========================================

from decimal import Decimal

from django.db import models


class AliasType(models.TextChoices):
    PHONE = 'PHONE', 'Phone'
    PAN = 'PAN', 'PAN'
    EMAIL = 'EMAIL', 'Email'


class Donor(models.Model):
    """
    Donor profile, one per resolved donor within an organization.

    Contact fields are stored masked; ``pan_hash``/``email_hash`` are one-way
    hashes and ``phone_e164`` is the normalized routing key.
    """

    org_id = models.CharField(max_length=64, db_index=True)
    donor_id = models.CharField(max_length=32)

    # Display fields
    name = models.CharField(max_length=200)
    mobile_masked = models.CharField(max_length=20, blank=True)
    email_masked = models.CharField(max_length=254, blank=True)
    pan_masked = models.CharField(max_length=10, blank=True)
    address = models.JSONField(default=dict, blank=True)

    # Identifiers
    pan_hash = models.CharField(max_length=80, blank=True)
    email_hash = models.CharField(max_length=80, blank=True)
    phone_e164 = models.CharField(max_length=16, blank=True)

    # Stats
    lifetime_total = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )
    last_donation_date = models.DateField(null=True, blank=True)
    donation_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'donors'
        constraints = [
            models.UniqueConstraint(fields=['org_id', 'donor_id'], name='uniq_donor_per_org'),
        ]
        indexes = [
            models.Index(fields=['org_id', 'name'], name='donors_org_name_idx'),
        ]
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.donor_id})"


class DonorAlias(models.Model):
    """
    Write-once index entry from a normalized identifier to a donor.

    ``alias_value`` is the E.164 phone for PHONE aliases and the
    ``h:sha256:`` hash for PAN and EMAIL aliases.
    """

    org_id = models.CharField(max_length=64)
    alias_type = models.CharField(max_length=10, choices=AliasType.choices)
    alias_value = models.CharField(max_length=80)
    donor = models.ForeignKey(Donor, on_delete=models.PROTECT, related_name='aliases')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'donor_aliases'
        constraints = [
            models.UniqueConstraint(
                fields=['org_id', 'alias_type', 'alias_value'],
                name='uniq_alias_per_org',
            ),
        ]
        ordering = ['alias_type']

    def __str__(self):
        return f"ALIAS#{self.alias_type}#{self.alias_value} -> {self.donor.donor_id}"
