"""Client repository interface.

Extends ``IRepository[Client]`` with the look-ups required by the
active-scoped uniqueness rules and the per-country queries.  Every
method only sees *active* clients.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.clients.models import Client


class IClientRepository(IRepository["Client"]):
    """Repository contract for the Client aggregate.

    ``insert`` and ``save`` raise ``ConstraintViolation`` when the store's
    unique constraints reject the write.  ``save`` and ``delete`` only touch
    rows that are still active at write time.
    """

    @abstractmethod
    def exists_by_email(self, email: str) -> bool:
        """Is ``email`` used by any active client?"""

    @abstractmethod
    def exists_by_phone(self, phone: str) -> bool:
        """Is ``phone`` used by any active client?"""

    @abstractmethod
    def exists_by_email_excluding(self, email: str, id: str) -> bool:
        """Is ``email`` used by an active client other than ``id``?"""

    @abstractmethod
    def exists_by_phone_excluding(self, phone: str, id: str) -> bool:
        """Is ``phone`` used by an active client other than ``id``?"""

    @abstractmethod
    def list_by_country(self, country_code: str) -> List[Client]:
        """Active clients of one country, newest first."""

    @abstractmethod
    def count_active(self) -> int:
        """Number of active clients."""

    @abstractmethod
    def count_active_by_country(self, country_code: str) -> int:
        """Number of active clients of one country."""
