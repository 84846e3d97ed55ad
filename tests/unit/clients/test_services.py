"""Unit tests for ClientService.

Covers:
- create_client: happy path, normalisation, duplicate email / phone,
  country resolution failures, store-level conflicts.
- update_client: happy path, unchanged country skips the lookup,
  duplicate checks only for changed values, failed lookup leaves the
  client untouched.
- get_client / delete_client: happy path, not found.
- list / count queries: country codes are normalised.
- update / delete racing a soft delete: the write is refused with
  ClientNotFound and the deleted row is left alone.
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from django.utils import timezone

from modules.clients.dtos import CreateClientDTO, UpdateClientDTO
from modules.clients.exceptions import (
    ClientConflict,
    ClientNotFound,
    ConstraintViolation,
    DuplicateEmail,
    DuplicatePhone,
)
from modules.clients.models import Client
from modules.clients.repositories.django_repository import ClientDjangoRepository
from modules.clients.services import UPDATABLE_FIELDS, ClientService
from modules.countries.exceptions import CountryServiceUnavailable, InvalidCountryCode

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_repo():
    repo = MagicMock()
    repo.exists_by_email.return_value = False
    repo.exists_by_phone.return_value = False
    repo.exists_by_email_excluding.return_value = False
    repo.exists_by_phone_excluding.return_value = False
    repo.insert.side_effect = lambda c: c
    repo.save.side_effect = lambda c, update_fields=None: c
    return repo


@pytest.fixture()
def mock_countries():
    countries = MagicMock()
    countries.get_demonym.return_value = "American"
    return countries


@pytest.fixture()
def service(mock_repo, mock_countries):
    return ClientService(repository=mock_repo, country_service=mock_countries)


def _make_client(**overrides) -> Client:
    """Unsaved Client as the repository would hand it back."""
    yesterday = timezone.now() - timedelta(days=1)
    defaults = {
        "uuid": uuid.uuid4(),
        "first_name": "John",
        "second_name": "",
        "first_surname": "Doe",
        "second_surname": "",
        "email": "john@example.com",
        "address": "123 Main St, Springfield",
        "phone": "+1 555 0100",
        "country_code": "US",
        "demonym": "American",
        "active": True,
        "created_at": yesterday,
        "updated_at": yesterday,
    }
    defaults.update(overrides)
    return Client(**defaults)


def _create_dto(**overrides) -> CreateClientDTO:
    data = {
        "first_name": "John",
        "first_surname": "Doe",
        "email": "john@example.com",
        "address": "123 Main St, Springfield",
        "phone": "+1 555 0100",
        "country_code": "US",
    }
    data.update(overrides)
    return CreateClientDTO(**data)


def _update_dto(**overrides) -> UpdateClientDTO:
    data = {
        "email": "john@example.com",
        "address": "123 Main St, Springfield",
        "phone": "+1 555 0100",
        "country_code": "US",
    }
    data.update(overrides)
    return UpdateClientDTO(**data)


# ===========================================================================
# create_client
# ===========================================================================


class TestCreateClient:
    def test_success(self, service, mock_repo, mock_countries):
        client = service.create_client(_create_dto())

        assert client.first_name == "John"
        assert client.first_surname == "Doe"
        assert client.demonym == "American"
        assert client.active is True
        assert client.uuid is not None
        assert client.created_at == client.updated_at
        mock_countries.get_demonym.assert_called_once_with("US")
        mock_repo.insert.assert_called_once()

    def test_normalises_input(self, service, mock_repo, mock_countries):
        client = service.create_client(
            _create_dto(
                first_name="  John ",
                email=" John.Doe@Example.COM ",
                phone=" +1 555 0100 ",
                country_code=" us ",
            )
        )

        assert client.first_name == "John"
        assert client.email == "john.doe@example.com"
        assert client.phone == "+1 555 0100"
        assert client.country_code == "US"
        mock_repo.exists_by_email.assert_called_once_with("john.doe@example.com")
        mock_repo.exists_by_phone.assert_called_once_with("+1 555 0100")
        mock_countries.get_demonym.assert_called_once_with("US")

    def test_stored_values_are_normalised_and_enriched(self, service):
        client = service.create_client(
            _create_dto(email="A@X.com", phone="+1-555-1", country_code="us")
        )

        assert client.email == "a@x.com"
        assert client.country_code == "US"
        assert client.demonym == "American"

    def test_optional_names_default_to_blank(self, service):
        client = service.create_client(_create_dto())

        assert client.second_name == ""
        assert client.second_surname == ""
        assert client.full_name == "John Doe"

    def test_duplicate_email_raises(self, service, mock_repo, mock_countries):
        mock_repo.exists_by_email.return_value = True

        with pytest.raises(DuplicateEmail, match="john@example.com"):
            service.create_client(_create_dto())

        mock_countries.get_demonym.assert_not_called()
        mock_repo.insert.assert_not_called()

    def test_duplicate_phone_raises(self, service, mock_repo, mock_countries):
        mock_repo.exists_by_phone.return_value = True

        with pytest.raises(DuplicatePhone, match="555 0100"):
            service.create_client(_create_dto())

        mock_countries.get_demonym.assert_not_called()
        mock_repo.insert.assert_not_called()

    def test_email_checked_before_phone(self, service, mock_repo):
        mock_repo.exists_by_email.return_value = True
        mock_repo.exists_by_phone.return_value = True

        with pytest.raises(DuplicateEmail):
            service.create_client(_create_dto())

    def test_invalid_country_nothing_persisted(self, service, mock_repo, mock_countries):
        mock_countries.get_demonym.side_effect = InvalidCountryCode("XX")

        with pytest.raises(InvalidCountryCode):
            service.create_client(_create_dto(country_code="XX"))

        mock_repo.insert.assert_not_called()

    def test_country_service_down_nothing_persisted(self, service, mock_repo, mock_countries):
        mock_countries.get_demonym.side_effect = CountryServiceUnavailable("US", "timeout")

        with pytest.raises(CountryServiceUnavailable):
            service.create_client(_create_dto())

        mock_repo.insert.assert_not_called()

    @pytest.mark.parametrize(
        "field, expected",
        [("email", DuplicateEmail), ("phone", DuplicatePhone), (None, ClientConflict)],
    )
    def test_store_conflict_translated(self, service, mock_repo, field, expected):
        mock_repo.insert.side_effect = ConstraintViolation(field, "UNIQUE constraint failed")

        with pytest.raises(expected):
            service.create_client(_create_dto())

    def test_duplicate_email_reports_normalised_value(self, service, mock_repo):
        mock_repo.exists_by_email.return_value = True

        with pytest.raises(DuplicateEmail) as exc_info:
            service.create_client(_create_dto(email=" John@Example.COM "))

        assert exc_info.value.email == "john@example.com"
        assert "'john@example.com'" in str(exc_info.value)

    def test_store_conflict_reports_normalised_phone(self, service, mock_repo):
        mock_repo.insert.side_effect = ConstraintViolation("phone")

        with pytest.raises(DuplicatePhone) as exc_info:
            service.create_client(_create_dto(phone="  +1 555 0100  "))

        assert exc_info.value.phone == "+1 555 0100"


# ===========================================================================
# update_client
# ===========================================================================


class TestUpdateClient:
    def test_success(self, service, mock_repo, mock_countries):
        existing = _make_client()
        before = existing.updated_at
        mock_repo.get_by_id.return_value = existing
        mock_countries.get_demonym.return_value = "Mexican"

        client = service.update_client(
            str(existing.uuid),
            _update_dto(
                email="new@example.com",
                address="Av. Reforma 100, CDMX",
                phone="+52 55 1234 5678",
                country_code="mx",
            ),
        )

        assert client.email == "new@example.com"
        assert client.address == "Av. Reforma 100, CDMX"
        assert client.phone == "+52 55 1234 5678"
        assert client.country_code == "MX"
        assert client.demonym == "Mexican"
        assert client.updated_at > before
        mock_countries.get_demonym.assert_called_once_with("MX")
        mock_repo.save.assert_called_once_with(existing, update_fields=UPDATABLE_FIELDS)

    def test_names_and_created_at_unchanged(self, service, mock_repo):
        existing = _make_client(second_name="Michael")
        created = existing.created_at
        mock_repo.get_by_id.return_value = existing

        client = service.update_client(str(existing.uuid), _update_dto(email="other@example.com"))

        assert client.first_name == "John"
        assert client.second_name == "Michael"
        assert client.created_at == created

    def test_same_country_skips_lookup(self, service, mock_repo, mock_countries):
        existing = _make_client(demonym="Stored label")
        mock_repo.get_by_id.return_value = existing

        client = service.update_client(str(existing.uuid), _update_dto(country_code=" us "))

        assert client.demonym == "Stored label"
        mock_countries.get_demonym.assert_not_called()

    def test_unchanged_contact_skips_duplicate_checks(self, service, mock_repo):
        existing = _make_client()
        mock_repo.get_by_id.return_value = existing

        service.update_client(str(existing.uuid), _update_dto(email="JOHN@example.com"))

        mock_repo.exists_by_email_excluding.assert_not_called()
        mock_repo.exists_by_phone_excluding.assert_not_called()

    def test_email_collision_raises(self, service, mock_repo):
        existing = _make_client()
        mock_repo.get_by_id.return_value = existing
        mock_repo.exists_by_email_excluding.return_value = True

        with pytest.raises(DuplicateEmail):
            service.update_client(str(existing.uuid), _update_dto(email="taken@example.com"))

        mock_repo.exists_by_email_excluding.assert_called_once_with(
            "taken@example.com", str(existing.uuid)
        )
        mock_repo.save.assert_not_called()

    def test_phone_collision_raises(self, service, mock_repo):
        existing = _make_client()
        mock_repo.get_by_id.return_value = existing
        mock_repo.exists_by_phone_excluding.return_value = True

        with pytest.raises(DuplicatePhone):
            service.update_client(str(existing.uuid), _update_dto(phone="+1 555 0199"))

        mock_repo.save.assert_not_called()

    def test_failed_lookup_leaves_client_untouched(self, service, mock_repo, mock_countries):
        existing = _make_client()
        before = existing.updated_at
        mock_repo.get_by_id.return_value = existing
        mock_countries.get_demonym.side_effect = CountryServiceUnavailable("MX", "timeout")

        with pytest.raises(CountryServiceUnavailable):
            service.update_client(
                str(existing.uuid),
                _update_dto(email="new@example.com", country_code="MX"),
            )

        assert existing.email == "john@example.com"
        assert existing.country_code == "US"
        assert existing.demonym == "American"
        assert existing.updated_at == before
        mock_repo.save.assert_not_called()

    def test_invalid_country_raises(self, service, mock_repo, mock_countries):
        existing = _make_client()
        mock_repo.get_by_id.return_value = existing
        mock_countries.get_demonym.side_effect = InvalidCountryCode("ZZ")

        with pytest.raises(InvalidCountryCode):
            service.update_client(str(existing.uuid), _update_dto(country_code="ZZ"))

        assert existing.country_code == "US"
        mock_repo.save.assert_not_called()

    def test_not_found_raises(self, service, mock_repo, mock_countries):
        mock_repo.get_by_id.return_value = None

        with pytest.raises(ClientNotFound):
            service.update_client("non-existent-id", _update_dto())

        mock_countries.get_demonym.assert_not_called()

    def test_store_conflict_translated(self, service, mock_repo):
        existing = _make_client()
        mock_repo.get_by_id.return_value = existing
        mock_repo.save.side_effect = ConstraintViolation("phone")

        with pytest.raises(DuplicatePhone):
            service.update_client(str(existing.uuid), _update_dto(phone="+1 555 0199"))

    def test_deleted_before_save_raises_not_found(self, service, mock_repo):
        existing = _make_client()
        mock_repo.get_by_id.return_value = existing
        mock_repo.save.side_effect = lambda c, update_fields=None: None

        with pytest.raises(ClientNotFound):
            service.update_client(str(existing.uuid), _update_dto(email="new@example.com"))


# ===========================================================================
# get_client
# ===========================================================================


class TestGetClient:
    def test_success(self, service, mock_repo):
        existing = _make_client()
        mock_repo.get_by_id.return_value = existing

        client = service.get_client(str(existing.uuid))

        assert client.uuid == existing.uuid

    def test_not_found_raises(self, service, mock_repo):
        mock_repo.get_by_id.return_value = None

        with pytest.raises(ClientNotFound, match="non-existent-id"):
            service.get_client("non-existent-id")


# ===========================================================================
# delete_client
# ===========================================================================


class TestDeleteClient:
    def test_success(self, service, mock_repo):
        existing = _make_client()
        mock_repo.get_by_id.return_value = existing
        mock_repo.delete.return_value = True

        service.delete_client(str(existing.uuid))

        mock_repo.delete.assert_called_once_with(str(existing.uuid))

    def test_not_found_raises(self, service, mock_repo):
        mock_repo.get_by_id.return_value = None

        with pytest.raises(ClientNotFound):
            service.delete_client("non-existent-id")

        mock_repo.delete.assert_not_called()

    def test_lost_race_raises_not_found(self, service, mock_repo):
        mock_repo.get_by_id.return_value = _make_client()
        mock_repo.delete.return_value = False

        with pytest.raises(ClientNotFound):
            service.delete_client("some-id")


# ===========================================================================
# Queries
# ===========================================================================


class TestQueries:
    def test_list_clients(self, service, mock_repo):
        clients = [_make_client(), _make_client(email="b@example.com")]
        mock_repo.list.return_value = clients

        assert service.list_clients() == clients

    def test_list_by_country_normalises_code(self, service, mock_repo):
        mock_repo.list_by_country.return_value = []

        service.list_clients_by_country(" mx ")

        mock_repo.list_by_country.assert_called_once_with("MX")

    def test_count_clients(self, service, mock_repo):
        mock_repo.count_active.return_value = 3

        assert service.count_clients() == 3

    def test_count_by_country_normalises_code(self, service, mock_repo):
        mock_repo.count_active_by_country.return_value = 2

        assert service.count_clients_by_country("us") == 2
        mock_repo.count_active_by_country.assert_called_once_with("US")


# ===========================================================================
# Writes racing a soft delete (real repository)
# ===========================================================================


class TestRacesWithSoftDelete:
    """A client loaded while active is deleted before the service writes."""

    @pytest.fixture()
    def repo(self):
        return ClientDjangoRepository()

    @pytest.fixture()
    def db_service(self, repo, mock_countries):
        return ClientService(repository=repo, country_service=mock_countries)

    @pytest.fixture()
    def stored(self):
        client = _make_client(uuid=uuid.uuid4())
        client.save()
        return client

    def test_update_of_deleted_client_raises_not_found(self, db_service, repo, stored, monkeypatch):
        stale = repo.get_by_id(str(stored.uuid))
        Client.objects.filter(pk=stored.pk).update(active=False)
        monkeypatch.setattr(repo, "get_by_id", lambda id: stale)

        with pytest.raises(ClientNotFound):
            db_service.update_client(str(stored.uuid), _update_dto(email="new@example.com"))

        row = Client.objects.get(pk=stored.pk)
        assert row.active is False
        assert row.email == "john@example.com"

    def test_second_delete_of_stale_client_raises_not_found(
        self, db_service, repo, stored, monkeypatch
    ):
        stale = repo.get_by_id(str(stored.uuid))
        db_service.delete_client(str(stored.uuid))
        monkeypatch.setattr(repo, "get_by_id", lambda id: stale)

        with pytest.raises(ClientNotFound):
            db_service.delete_client(str(stored.uuid))

        assert Client.objects.filter(pk=stored.pk, active=False).count() == 1
