"""Django ORM implementation of the Client repository.

Satisfies ``IClientRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern for reads: methods
return ``None`` instead of raising HTTP-level exceptions; the Service
Layer decides how to translate a missing entity into an API response.
Writes run inside their own savepoint and surface unique-constraint
failures as ``ConstraintViolation``.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.clients.exceptions import ConstraintViolation
from modules.clients.models import EMAIL_CONSTRAINT, PHONE_CONSTRAINT, Client
from modules.clients.repositories.interfaces import IClientRepository

logger = structlog.get_logger(__name__)

_CONSTRAINT_FIELDS = {
    EMAIL_CONSTRAINT: "email",
    PHONE_CONSTRAINT: "phone",
}


def conflicting_field(error: IntegrityError) -> Optional[str]:
    """Work out which unique key an ``IntegrityError`` refers to.

    PostgreSQL reports the constraint name, SQLite the ``table.column``.
    """
    message = str(error).lower()
    for name, field in _CONSTRAINT_FIELDS.items():
        if name in message:
            return field
    for field in _CONSTRAINT_FIELDS.values():
        if f"{Client._meta.db_table}.{field}" in message or f"({field})" in message:
            return field
    return None


class ClientDjangoRepository(IClientRepository):
    """Concrete Client repository backed by Django ORM."""

    def _active(self):
        return Client.objects.active()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Client]:
        """Retrieve an active client by its public UUID.

        Returns ``None`` for unknown, soft-deleted or malformed IDs.
        """
        try:
            return self._active().filter(uuid=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self) -> List[Client]:
        return list(self._active().order_by("-created_at"))

    def list_by_country(self, country_code: str) -> List[Client]:
        return list(
            self._active().filter(country_code=country_code).order_by("-created_at")
        )

    def count_active(self) -> int:
        return self._active().count()

    def count_active_by_country(self, country_code: str) -> int:
        return self._active().filter(country_code=country_code).count()

    def exists_by_email(self, email: str) -> bool:
        return self._active().filter(email=email).exists()

    def exists_by_phone(self, phone: str) -> bool:
        return self._active().filter(phone=phone).exists()

    def exists_by_email_excluding(self, email: str, id: str) -> bool:
        return self._active().filter(email=email).exclude(uuid=id).exists()

    def exists_by_phone_excluding(self, phone: str, id: str) -> bool:
        return self._active().filter(phone=phone).exclude(uuid=id).exists()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _write(self, entity: Client, write):
        """Run ``write`` in its own savepoint, mapping unique-key failures."""
        try:
            with transaction.atomic():
                return write()
        except IntegrityError as exc:
            field = conflicting_field(exc)
            logger.warning(
                "client.constraint_violation",
                client_id=str(entity.uuid),
                field=field,
            )
            raise ConstraintViolation(field, str(exc)) from exc

    def insert(self, entity: Client) -> Client:
        """Persist a new client."""
        self._write(entity, lambda: entity.save(force_insert=True))
        logger.info("client.inserted", client_id=str(entity.uuid))
        return entity

    def save(
        self, entity: Client, update_fields: Optional[Sequence[str]] = None
    ) -> Optional[Client]:
        """Persist changes to an existing client, only while it is still active.

        Issues a single ``UPDATE ... WHERE pk AND active`` (``updated_at``
        always included).  Returns ``None`` when no active row matched,
        i.e. the client was soft-deleted after it was loaded.
        """
        if update_fields is None:
            fields = [f.attname for f in Client._meta.concrete_fields if not f.primary_key]
        else:
            fields = list(update_fields)
        if "updated_at" not in fields:
            fields.append("updated_at")
        values = {name: getattr(entity, name) for name in fields}

        updated = self._write(
            entity, lambda: self._active().filter(pk=entity.pk).update(**values)
        )
        if not updated:
            logger.warning("client.save_skipped_inactive", client_id=str(entity.uuid))
            return None
        logger.info("client.saved", client_id=str(entity.uuid))
        return entity

    def delete(self, id: str) -> bool:
        """Soft-delete an active client by UUID.

        A single conditional update: returns ``True`` only for the call
        that actually flipped ``active``; ``False`` if no active client
        exists with the given ID (unknown, malformed or already deleted).
        """
        try:
            count = self._active().filter(uuid=id).update(
                active=False, updated_at=timezone.now()
            )
        except (ValueError, ValidationError):
            return False
        if count:
            logger.info("client.soft_deleted", client_id=str(id))
        return bool(count)
