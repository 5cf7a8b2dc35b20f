# ==========================================
# apps/core/models.py
# ==========================================

from django.conf import settings
from django.db import models


class OrgMembership(models.Model):
    """Staff user allowed to work on the receipts of one organization."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='org_memberships',
    )
    org_id = models.CharField(max_length=64)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'org_memberships'
        constraints = [
            models.UniqueConstraint(fields=['user', 'org_id'], name='uniq_membership_per_org'),
        ]
        indexes = [
            models.Index(fields=['org_id'], name='memberships_by_org_idx'),
        ]
        ordering = ['org_id']

    def __str__(self):
        return f"{self.user.get_username()} in {self.org_id}"

    def save(self, *args, **kwargs):
        self.org_id = self.org_id.strip().upper()
        super().save(*args, **kwargs)
