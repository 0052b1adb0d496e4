"""
Soft delete support for Django models.

Rows are never removed from the catalog or booking tables; ``deleted_at``
is stamped instead and every read path goes through ``alive()``.
"""

from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet with an alive filter and a bulk soft delete."""

    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def soft_delete(self) -> int:
        return self.alive().update(deleted_at=timezone.now())


class SoftDeleteModel(models.Model):
    """Abstract base adding ``deleted_at`` and the soft delete helpers."""

    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        if self.deleted_at is None:
            self.deleted_at = timezone.now()
            self.save(update_fields=["deleted_at"])
