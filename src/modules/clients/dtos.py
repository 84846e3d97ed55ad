"""Client DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateClientDTO``: input for client creation.
- ``UpdateClientDTO``: input for client update (mutable fields only).
- ``ClientOutputDTO``: output representation, including ``full_name``.

Normalisation (trim, lower-case email, upper-case country) is the
service's job; DTOs only guarantee shape and basic format.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

if TYPE_CHECKING:
    from modules.clients.models import Client


def _strip(value):
    return value.strip() if isinstance(value, str) else value


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateClientDTO(BaseModel):
    """Immutable DTO for client creation requests."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    second_name: Optional[str] = None
    first_surname: str
    second_surname: Optional[str] = None
    email: EmailStr
    address: str
    phone: str
    country_code: str

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        """``EmailStr`` rejects surrounding whitespace; trim it first."""
        return _strip(v)


class UpdateClientDTO(BaseModel):
    """Immutable DTO for client update requests.

    Names are fixed at creation; only contact and country data change.
    All four fields are required.
    """

    model_config = ConfigDict(frozen=True)

    email: EmailStr
    address: str
    phone: str
    country_code: str

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return _strip(v)


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


class ClientOutputDTO(BaseModel):
    """Immutable DTO for client API responses.

    ``id`` is the public UUID, never the storage primary key.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    first_name: str
    second_name: Optional[str]
    first_surname: str
    second_surname: Optional[str]
    full_name: str
    email: str
    address: str
    phone: str
    country_code: str
    demonym: Optional[str]
    active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, client: Client) -> ClientOutputDTO:
        """Build an output DTO from a Client model instance."""
        return cls(
            id=client.uuid,
            first_name=client.first_name,
            second_name=client.second_name or None,
            first_surname=client.first_surname,
            second_surname=client.second_surname or None,
            full_name=client.full_name,
            email=client.email,
            address=client.address,
            phone=client.phone,
            country_code=client.country_code,
            demonym=client.demonym or None,
            active=client.active,
            created_at=client.created_at,
            updated_at=client.updated_at,
        )
