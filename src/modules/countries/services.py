"""Country service.

Turns ``CountryLookup`` results into the answers the client lifecycle
needs: a display label (demonym) or a typed failure.
"""

from __future__ import annotations

import re
from typing import Optional

import structlog

from modules.countries.client import RestCountriesClient
from modules.countries.dtos import CountryFound, CountryNotFound
from modules.countries.exceptions import CountryServiceUnavailable, InvalidCountryCode

logger = structlog.get_logger(__name__)

COUNTRY_CODE_PATTERN = re.compile(r"^[A-Z]{2}$")


def normalize_country_code(code: Optional[str]) -> str:
    """Trim and upper-case a country code (``None`` becomes ``""``)."""
    return (code or "").strip().upper()


class CountryService:
    """Resolves ISO 3166-1 alpha-2 codes through ``RestCountriesClient``."""

    def __init__(self, client: Optional[RestCountriesClient] = None) -> None:
        self._client = client or RestCountriesClient()

    def get_demonym(self, country_code: Optional[str]) -> str:
        """Return the display label for ``country_code``.

        Precedence: English demonym, Spanish demonym, common country name.

        Raises:
            InvalidCountryCode: blank/malformed code, unknown code, or an
                entry with nothing usable as a label.
            CountryServiceUnavailable: the upstream could not answer.
        """
        code = normalize_country_code(country_code)
        if not COUNTRY_CODE_PATTERN.match(code):
            raise InvalidCountryCode(code)

        result = self._client.lookup(code)

        if isinstance(result, CountryNotFound):
            raise InvalidCountryCode(code)
        if not isinstance(result, CountryFound):
            raise CountryServiceUnavailable(code, result.reason)

        label = result.country.display_label()
        if label is None:
            logger.warning("country.no_label", country_code=code)
            raise InvalidCountryCode(code)

        logger.info("country.resolved", country_code=code, demonym=label)
        return label

    def is_valid(self, country_code: Optional[str]) -> bool:
        """Yes/no validity check that fails open.

        An unreachable country service counts as *valid* so outages do not
        block callers that only need a yes/no answer.
        """
        try:
            self.get_demonym(country_code)
        except InvalidCountryCode:
            return False
        except CountryServiceUnavailable as exc:
            logger.warning(
                "country.validation_skipped",
                country_code=exc.country_code,
                reason=exc.reason,
            )
            return True
        return True

    def get_country_name(self, country_code: Optional[str]) -> Optional[str]:
        """Best-effort common name for ``country_code``; ``None`` on any failure."""
        code = normalize_country_code(country_code)
        if not COUNTRY_CODE_PATTERN.match(code):
            return None
        result = self._client.lookup(code)
        if isinstance(result, CountryFound):
            return result.country.common_name
        return None
