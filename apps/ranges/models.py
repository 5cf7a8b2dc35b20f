# ==========================================
# apps/ranges/models.py
# ==========================================

from django.db import models
from django.db.models import Q

from .numbering import remaining_count


class RangeStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    ACTIVE = 'active', 'Active'
    LOCKED = 'locked', 'Locked'
    EXHAUSTED = 'exhausted', 'Exhausted'
    ARCHIVED = 'archived', 'Archived'


class ReceiptRange(models.Model):
    """
    A contiguous block of receipt numbers for one year.

    ``next_number`` is the cursor of the next number to issue and
    ``version`` is bumped by every write; both guard conditional updates.
    """

    org_id = models.CharField(max_length=64, db_index=True)
    range_id = models.CharField(max_length=8)
    alias = models.CharField(max_length=100)
    year = models.PositiveSmallIntegerField()

    start = models.PositiveIntegerField()
    end = models.PositiveIntegerField()
    next_number = models.PositiveIntegerField()

    status = models.CharField(
        max_length=10,
        choices=RangeStatus.choices,
        default=RangeStatus.DRAFT
    )
    version = models.PositiveIntegerField(default=1)

    created_by = models.CharField(max_length=150, default='system')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    locked_by = models.CharField(max_length=150, null=True, blank=True)
    locked_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'receipt_ranges'
        constraints = [
            models.UniqueConstraint(fields=['org_id', 'range_id'], name='uniq_range_per_org'),
            models.UniqueConstraint(
                fields=['org_id', 'year'],
                condition=Q(status='active'),
                name='uniq_active_range_per_year',
            ),
        ]
        indexes = [
            models.Index(fields=['org_id', 'year', 'status'], name='ranges_org_year_status_idx'),
        ]
        ordering = ['-year', 'alias']

    def __str__(self):
        return f"{self.range_id} ({self.alias}) [{self.status}]"

    @property
    def remaining(self):
        return remaining_count(next_number=self.next_number, end=self.end)

    @property
    def is_exhausted(self):
        return self.next_number > self.end
