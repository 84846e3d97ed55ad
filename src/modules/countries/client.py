"""HTTP client for the RestCountries API (https://restcountries.com).

``RestCountriesClient.lookup`` performs ``GET {base_url}/alpha/{code}`` and
folds every possible outcome into a ``CountryLookup`` value:

- 2xx with at least one entry  -> ``CountryFound``
- 2xx with an empty list, 404  -> ``CountryNotFound``
- anything else (timeouts, connection errors, other statuses,
  undecodable or unexpected payloads) -> ``CountryServiceDown``

No retries and no caching: every call is one request.
"""

from __future__ import annotations

from typing import Optional

import httpx
import structlog
from django.conf import settings
from pydantic import ValidationError

from modules.countries.dtos import (
    COUNTRY_LIST,
    CountryFound,
    CountryLookup,
    CountryNotFound,
    CountryServiceDown,
)

logger = structlog.get_logger(__name__)


class RestCountriesClient:
    """Thin synchronous wrapper around the RestCountries ``/alpha`` endpoint.

    An ``httpx.Client`` may be injected (tests pass one built on
    ``httpx.MockTransport``); otherwise a short-lived client is opened per
    lookup so no connection pool outlives the request.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = (base_url or settings.COUNTRY_SERVICE_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.COUNTRY_SERVICE_TIMEOUT
        self._http_client = http_client

    def _url(self, code: str) -> str:
        return f"{self.base_url}/alpha/{code}"

    def _get(self, code: str) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.get(self._url(code), timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(self._url(code))

    def lookup(self, code: str) -> CountryLookup:
        """Fetch country data for an already-normalised code."""
        log = logger.bind(country_code=code)

        try:
            response = self._get(code)
        except httpx.TimeoutException as exc:
            log.error("country.lookup_timeout", error=str(exc))
            return CountryServiceDown(code=code, reason=f"timeout: {exc}")
        except httpx.HTTPError as exc:
            log.error("country.lookup_transport_error", error=str(exc))
            return CountryServiceDown(code=code, reason=str(exc))

        if response.status_code == httpx.codes.NOT_FOUND:
            log.warning("country.not_found")
            return CountryNotFound(code=code)

        if response.is_error:
            log.error("country.lookup_failed", status_code=response.status_code)
            return CountryServiceDown(
                code=code, reason=f"unexpected status {response.status_code}"
            )

        try:
            payload = response.json()
            if isinstance(payload, dict):
                payload = [payload]
            countries = COUNTRY_LIST.validate_python(payload)
        except (ValueError, ValidationError) as exc:
            log.error("country.malformed_response", error=str(exc))
            return CountryServiceDown(code=code, reason=f"malformed response: {exc}")

        if not countries:
            log.warning("country.empty_response")
            return CountryNotFound(code=code)

        return CountryFound(code=code, country=countries[0])
