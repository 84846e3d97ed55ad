"""Client domain exceptions.

Raised by the Service Layer when business rules are violated.
``api_exception_handler`` translates them into HTTP responses using
their ``status_code``.
"""

from __future__ import annotations

from typing import Optional

from rest_framework import status

from modules.core.exceptions import ApplicationError


class ClientNotFound(ApplicationError):
    """The requested client does not exist or has been soft-deleted."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, client_id: str) -> None:
        self.client_id = client_id
        super().__init__(f"Client not found with id: {client_id}")


class DuplicateEmail(ApplicationError):
    """Another active client already uses this email."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"A client with email '{email}' already exists")


class DuplicatePhone(ApplicationError):
    """Another active client already uses this phone number."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, phone: str) -> None:
        self.phone = phone
        super().__init__(f"A client with phone number '{phone}' already exists")


class ClientConflict(ApplicationError):
    """A uniqueness conflict whose cause could not be determined."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "A record with the provided data already exists") -> None:
        super().__init__(message)


class ConstraintViolation(Exception):
    """Raised by the repository when the database rejects a write.

    ``field`` names the unique key that fired (``"email"``, ``"phone"``)
    or is ``None`` when it cannot be told from the database error.
    Never reaches the API layer: the service translates it.
    """

    def __init__(self, field: Optional[str], detail: str = "") -> None:
        self.field = field
        self.detail = detail
        super().__init__(detail or f"Unique constraint violated on {field or 'unknown field'}")
