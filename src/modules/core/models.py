"""Base abstract models shared by the domain modules.

Provides:
- ``TimestampedModel``: explicit ``created_at`` / ``updated_at`` bookkeeping.
- ``SoftDeleteModel``: extends TimestampedModel with an ``active`` flag.

Design decisions:
- Timestamps are assigned explicitly (``default=timezone.now`` plus
  ``touch()``) instead of ``auto_now`` so the service layer decides when a
  mutation happened.
- ``objects`` manager returns ALL records (unfiltered).  Use ``.active()``
  explicitly to exclude soft-deleted rows.
- Deactivation is one-way: there is no ``restore()`` and no physical delete.
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

# ---------------------------------------------------------------------------
# TimestampedModel
# ---------------------------------------------------------------------------


class TimestampedModel(models.Model):
    """Abstract base with creation / modification timestamps."""

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        abstract = True

    def touch(self) -> None:
        """Mark the instance as modified now."""
        self.updated_at = timezone.now()

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is persisted even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Soft Delete infrastructure
# ---------------------------------------------------------------------------


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet with soft-delete helpers."""

    def active(self) -> SoftDeleteQuerySet:
        """Return only active records."""
        return self.filter(active=True)

    def inactive(self) -> SoftDeleteQuerySet:
        """Return only soft-deleted records."""
        return self.filter(active=False)

    def delete(self) -> tuple[int, dict[str, int]]:
        """Bulk soft-delete: clears ``active`` and refreshes ``updated_at``."""
        count = self.active().update(active=False, updated_at=timezone.now())
        return count, {self.model._meta.label: count}


class SoftDeleteManager(models.Manager):
    """Manager that exposes ``.active()`` / ``.inactive()`` on the queryset."""

    def get_queryset(self) -> SoftDeleteQuerySet:
        return SoftDeleteQuerySet(self.model, using=self._db)

    def active(self) -> SoftDeleteQuerySet:
        return self.get_queryset().active()

    def inactive(self) -> SoftDeleteQuerySet:
        return self.get_queryset().inactive()


class SoftDeleteModel(TimestampedModel):
    """Abstract model with a one-way ``active`` flag.

    - ``objects`` is **unfiltered** (returns all rows).
    - Use ``Model.objects.active()`` to exclude soft-deleted rows.
    - ``delete()`` deactivates; rows are never physically removed.
    """

    active = models.BooleanField(default=True, db_index=True)

    objects = SoftDeleteManager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return not self.active

    def deactivate(self) -> bool:
        """Soft-delete this instance.

        One conditional ``UPDATE ... WHERE active``: of several stale copies
        of the same row only the first call wins.  Returns ``False`` (and
        writes nothing) if the row was already inactive.
        """
        if self.pk is None or not self.active:
            return False
        now = timezone.now()
        updated = (
            type(self)._default_manager.filter(pk=self.pk, active=True)
            .update(active=False, updated_at=now)
        )
        self.active = False
        if not updated:
            return False
        self.updated_at = now
        return True

    def delete(self, using=None, keep_parents=False) -> tuple[int, dict[str, int]]:
        """Soft-delete this instance (no-op if already inactive)."""
        if not self.deactivate():
            return 0, {}
        return 1, {self._meta.label: 1}
