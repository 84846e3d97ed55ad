"""Client API views.

Exposes the ``ClientService`` via HTTP using a DRF ViewSet.  Input is
validated by the serializers, converted to DTOs and handed to the
service; domain exceptions propagate to ``api_exception_handler``,
which renders them in the standard envelope.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.reverse import reverse
from rest_framework.viewsets import ViewSet

from modules.clients.dtos import ClientOutputDTO, CreateClientDTO, UpdateClientDTO
from modules.clients.repositories.django_repository import ClientDjangoRepository
from modules.clients.serializers import (
    COUNTRY_CODE_VALIDATOR,
    CreateClientSerializer,
    UpdateClientSerializer,
)
from modules.clients.services import ClientService
from modules.core.responses import ApiResponse
from modules.countries.client import RestCountriesClient
from modules.countries.services import CountryService


def _dump(client) -> dict:
    return ClientOutputDTO.from_entity(client).model_dump(mode="json")


def _check_country_code(value: str | None, field: str = "country_code") -> str:
    """Reject anything that is not exactly two letters (any case)."""
    if value is None or not COUNTRY_CODE_VALIDATOR.regex.match(value):
        raise ValidationError({field: [COUNTRY_CODE_VALIDATOR.message]})
    return value


class ClientViewSet(ViewSet):
    """ViewSet for Client operations.

    Uses ``ClientService`` with ``ClientDjangoRepository`` and a
    RestCountries-backed ``CountryService`` (DIP).  All ORM access goes
    through the service/repository layer.
    """

    lookup_value_regex = "[^/.]+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ClientService(
            repository=ClientDjangoRepository(),
            country_service=CountryService(RestCountriesClient()),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @extend_schema(summary="List active clients, newest first")
    def list(self, request: Request) -> Response:
        """GET /api/v1/clients/"""
        clients = [_dump(c) for c in self._service.list_clients()]
        return Response(ApiResponse.ok(clients, "Clients retrieved successfully").to_data())

    @extend_schema(summary="Get a client by id")
    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/clients/{pk}/"""
        client = self._service.get_client(pk)
        return Response(ApiResponse.ok(_dump(client), "Client retrieved successfully").to_data())

    @extend_schema(summary="List active clients of a country")
    @action(detail=False, methods=["get"], url_path=r"country/(?P<country_code>[^/.]+)")
    def by_country(self, request: Request, country_code: str | None = None) -> Response:
        """GET /api/v1/clients/country/{code}/"""
        code = _check_country_code(country_code)
        clients = [_dump(c) for c in self._service.list_clients_by_country(code)]
        return Response(ApiResponse.ok(clients, "Clients retrieved successfully").to_data())

    @extend_schema(
        summary="Count active clients",
        parameters=[
            OpenApiParameter(
                "country", str, description="Optional ISO 3166-1 alpha-2 filter"
            )
        ],
    )
    @action(detail=False, methods=["get"], url_path="count")
    def count(self, request: Request) -> Response:
        """GET /api/v1/clients/count/[?country=XX]"""
        country = request.query_params.get("country")
        if country is None:
            total = self._service.count_clients()
        else:
            total = self._service.count_clients_by_country(
                _check_country_code(country, field="country")
            )
        return Response(
            ApiResponse.ok(total, "Client count retrieved successfully").to_data()
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @extend_schema(summary="Create a client", request=CreateClientSerializer)
    def create(self, request: Request) -> Response:
        """POST /api/v1/clients/"""
        serializer = CreateClientSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        client = self._service.create_client(CreateClientDTO(**serializer.validated_data))

        location = reverse("client-detail", kwargs={"pk": str(client.uuid)}, request=request)
        return Response(
            ApiResponse.created(_dump(client), "Client created successfully").to_data(),
            status=status.HTTP_201_CREATED,
            headers={"Location": location},
        )

    @extend_schema(
        summary="Update a client's email, address, phone and country",
        request=UpdateClientSerializer,
    )
    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/clients/{pk}/"""
        serializer = UpdateClientSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        client = self._service.update_client(pk, UpdateClientDTO(**serializer.validated_data))
        return Response(ApiResponse.ok(_dump(client), "Client updated successfully").to_data())

    @extend_schema(summary="Soft-delete a client")
    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/clients/{pk}/"""
        self._service.delete_client(pk)
        return Response(ApiResponse.no_content("Client deleted successfully").to_data())
