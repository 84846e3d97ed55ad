"""Client service layer (Use Cases).

Orchestrates the client lifecycle, delegating persistence to the
injected ``IClientRepository`` and country resolution to the injected
``CountryService``.

Rules enforced here:
- Email and phone are unique among active clients; duplicate checks run
  before any remote call.
- The country is resolved before anything is persisted, so an invalid
  or unresolvable country never reaches the database.
- ``country_code`` and ``demonym`` change together or not at all; an
  unchanged country never triggers a lookup.
- Soft delete only; a deactivated client behaves as not found, also when
  it is deactivated between the load and the write of an update or delete.
- Unique-constraint failures raised by the store at write time (races
  past the pre-check) surface as the same duplicate errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import structlog
import uuid6
from django.db import transaction
from django.utils import timezone

from modules.clients.exceptions import (
    ClientConflict,
    ClientNotFound,
    ConstraintViolation,
    DuplicateEmail,
    DuplicatePhone,
)
from modules.clients.models import Client
from modules.countries.services import normalize_country_code

if TYPE_CHECKING:
    from modules.clients.dtos import CreateClientDTO, UpdateClientDTO
    from modules.clients.repositories.interfaces import IClientRepository
    from modules.countries.services import CountryService

UPDATABLE_FIELDS = ("email", "address", "phone", "country_code", "demonym")


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def normalize_email(email: Optional[str]) -> str:
    return _clean(email).lower()


def normalize_phone(phone: Optional[str]) -> str:
    return _clean(phone)


class ClientService:
    """Application service for Client use-cases.

    Receives its collaborators via constructor injection (DIP).  A
    structlog logger may be injected as well; each operation binds its
    own context onto it.
    """

    def __init__(
        self,
        repository: IClientRepository,
        country_service: CountryService,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ) -> None:
        self._repo = repository
        self._countries = country_service
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_client(self, dto: CreateClientDTO) -> Client:
        """Create a new client.

        Raises:
            DuplicateEmail / DuplicatePhone: an active client already uses
                the email or phone (checked up front and again on insert).
            InvalidCountryCode: the country code cannot be resolved.
            CountryServiceUnavailable: the country service is down.
        """
        email = normalize_email(dto.email)
        phone = normalize_phone(dto.phone)
        country_code = normalize_country_code(dto.country_code)
        log = self._logger.bind(email=email, country_code=country_code)

        if self._repo.exists_by_email(email):
            log.warning("client.duplicate_email")
            raise DuplicateEmail(email)

        if self._repo.exists_by_phone(phone):
            log.warning("client.duplicate_phone")
            raise DuplicatePhone(phone)

        demonym = self._countries.get_demonym(country_code)

        now = timezone.now()
        client = Client(
            uuid=uuid6.uuid7(),
            first_name=_clean(dto.first_name),
            second_name=_clean(dto.second_name),
            first_surname=_clean(dto.first_surname),
            second_surname=_clean(dto.second_surname),
            email=email,
            address=_clean(dto.address),
            phone=phone,
            country_code=country_code,
            demonym=demonym,
            active=True,
            created_at=now,
            updated_at=now,
        )

        try:
            client = self._repo.insert(client)
        except ConstraintViolation as exc:
            log.warning("client.create_conflict", field=exc.field)
            raise self._conflict(exc, email, phone) from exc

        log.info("client.created", client_id=str(client.uuid))
        return client

    @transaction.atomic
    def update_client(self, id: str, dto: UpdateClientDTO) -> Client:
        """Update the mutable fields (email, address, phone, country).

        The country is resolved before the client is touched: if the lookup
        fails, the in-memory instance and the stored row are unchanged.

        Raises:
            ClientNotFound: no active client with this id, including one
                soft-deleted between the load and the write.
            DuplicateEmail / DuplicatePhone: the new value belongs to
                another active client.
            InvalidCountryCode / CountryServiceUnavailable: the new country
                could not be resolved.
        """
        client = self._get_active(id)
        log = self._logger.bind(client_id=str(id))

        email = normalize_email(dto.email)
        phone = normalize_phone(dto.phone)
        country_code = normalize_country_code(dto.country_code)

        if email != client.email and self._repo.exists_by_email_excluding(email, id):
            log.warning("client.duplicate_email", email=email)
            raise DuplicateEmail(email)

        if phone != client.phone and self._repo.exists_by_phone_excluding(phone, id):
            log.warning("client.duplicate_phone", phone=phone)
            raise DuplicatePhone(phone)

        demonym = client.demonym
        country_changed = country_code != client.country_code
        if country_changed:
            demonym = self._countries.get_demonym(country_code)

        client.email = email
        client.address = _clean(dto.address)
        client.phone = phone
        if country_changed:
            client.country_code = country_code
            client.demonym = demonym
        client.touch()

        try:
            saved = self._repo.save(client, update_fields=UPDATABLE_FIELDS)
        except ConstraintViolation as exc:
            log.warning("client.update_conflict", field=exc.field)
            raise self._conflict(exc, email, phone) from exc

        if saved is None:
            log.warning("client.update_lost_to_delete")
            raise ClientNotFound(id)

        client = saved
        log.info("client.updated", country_changed=country_changed)
        return client

    @transaction.atomic
    def delete_client(self, id: str) -> None:
        """Soft-delete a client.

        Raises:
            ClientNotFound: no active client with this id (including one
                that was already deleted).
        """
        self._get_active(id)
        if not self._repo.delete(id):
            raise ClientNotFound(id)
        self._logger.info("client.soft_deleted", client_id=str(id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_client(self, id: str) -> Client:
        """Retrieve a single active client by ID.

        Raises:
            ClientNotFound: if the client does not exist or was deleted.
        """
        client = self._get_active(id)
        self._logger.info("client.retrieved", client_id=str(id))
        return client

    def list_clients(self) -> List[Client]:
        """All active clients, newest first."""
        return self._repo.list()

    def list_clients_by_country(self, country_code: str) -> List[Client]:
        return self._repo.list_by_country(normalize_country_code(country_code))

    def count_clients(self) -> int:
        return self._repo.count_active()

    def count_clients_by_country(self, country_code: str) -> int:
        return self._repo.count_active_by_country(normalize_country_code(country_code))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_active(self, id: str) -> Client:
        client = self._repo.get_by_id(id)
        if not client:
            raise ClientNotFound(id)
        return client

    @staticmethod
    def _conflict(exc: ConstraintViolation, email: str, phone: str) -> Exception:
        if exc.field == "email":
            return DuplicateEmail(email)
        if exc.field == "phone":
            return DuplicatePhone(phone)
        return ClientConflict()
