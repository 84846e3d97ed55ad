"""Client model with active-scoped uniqueness and soft delete.

Business rules implemented:
- Email and phone are unique among *active* clients only (partial unique
  constraints), so a soft-deleted client's contact data can be reused.
- ``uuid`` is the public identifier; the integer primary key never leaves
  the database layer.
- ``country_code`` and ``demonym`` are only ever written together.
- Soft delete via ``active`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

import uuid6
from django.db import models

from modules.core.models import SoftDeleteModel

EMAIL_CONSTRAINT = "uk_client_email_active"
PHONE_CONSTRAINT = "uk_client_phone_active"


class Client(SoftDeleteModel):
    """Client aggregate root.

    Values are stored already normalised by the service layer: email
    lower-cased, phone trimmed, country code upper-cased.
    """

    uuid = models.UUIDField(default=uuid6.uuid7, unique=True, editable=False)

    first_name = models.CharField(max_length=100)
    second_name = models.CharField(max_length=100, blank=True, default="")
    first_surname = models.CharField(max_length=100)
    second_surname = models.CharField(max_length=100, blank=True, default="")

    email = models.EmailField(max_length=255)
    address = models.CharField(max_length=500)
    phone = models.CharField(max_length=20)

    country_code = models.CharField(max_length=2)
    demonym = models.CharField(max_length=100, blank=True, default="")

    class Meta:
        db_table = "clients"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["email"],
                condition=models.Q(active=True),
                name=EMAIL_CONSTRAINT,
            ),
            models.UniqueConstraint(
                fields=["phone"],
                condition=models.Q(active=True),
                name=PHONE_CONSTRAINT,
            ),
        ]
        indexes = [
            models.Index(fields=["-created_at"], name="clients_created_idx"),
            models.Index(fields=["country_code", "active"], name="clients_country_idx"),
        ]

    @property
    def full_name(self) -> str:
        """First name, second name, first surname, second surname; blanks skipped."""
        parts = (self.first_name, self.second_name, self.first_surname, self.second_surname)
        return " ".join(part.strip() for part in parts if part and part.strip())

    def __str__(self) -> str:
        return f"{self.full_name} ({self.uuid})"
