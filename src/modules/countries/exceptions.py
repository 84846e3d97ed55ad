"""Country lookup exceptions.

Raised by ``CountryService`` so callers can tell a bad code (user error)
apart from an unreachable upstream (transient infrastructure failure).
"""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import ApplicationError


class InvalidCountryCode(ApplicationError):
    """The code is blank, malformed, or unknown to the country service."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, country_code: str) -> None:
        self.country_code = country_code
        super().__init__(
            f"Invalid country code: '{country_code}'. "
            "Must be a valid ISO 3166-1 alpha-2 code."
        )


class CountryServiceUnavailable(ApplicationError):
    """The country service could not give an answer (timeout, 5xx, bad payload).

    The upstream reason stays in ``reason`` / the logs; clients only get a
    generic retry message.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    public_message = "Unable to fetch country information. Please try again later."

    def __init__(self, country_code: str, reason: str = "") -> None:
        self.country_code = country_code
        self.reason = reason
        message = f"Error fetching country data for code '{country_code}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
