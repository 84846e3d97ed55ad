import pytest

from rest_framework.test import APIClient

from modules.countries.client import RestCountriesClient
from modules.countries.dtos import (
    CountryData,
    CountryFound,
    CountryNotFound,
    CountryServiceDown,
)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Country service fakes
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_country():
    """Factory for RestCountries entries: ``make_country(eng="American")``."""

    def _make(eng=None, spa=None, common=None, cca2=None) -> CountryData:
        demonyms = {}
        if eng is not None:
            demonyms["eng"] = {"f": eng, "m": eng}
        if spa is not None:
            demonyms["spa"] = {"f": spa, "m": spa}
        payload = {"cca2": cca2}
        if demonyms:
            payload["demonyms"] = demonyms
        if common is not None:
            payload["name"] = {"common": common, "official": common}
        return CountryData.model_validate(payload)

    return _make


class ScriptedLookup:
    """Stands in for ``RestCountriesClient.lookup``.

    Unknown codes answer ``CountryNotFound``; ``calls`` records every code
    that was looked up.
    """

    def __init__(self, make_country) -> None:
        self.calls = []
        self.results = {
            "US": CountryFound(code="US", country=make_country(eng="American", common="United States")),
            "MX": CountryFound(code="MX", country=make_country(eng="Mexican", common="Mexico")),
            "ES": CountryFound(code="ES", country=make_country(eng="Spanish", common="Spain")),
        }

    def __call__(self, code):
        self.calls.append(code)
        return self.results.get(code, CountryNotFound(code=code))

    def make_unavailable(self, code: str, reason: str = "timeout") -> None:
        self.results[code] = CountryServiceDown(code=code, reason=reason)


@pytest.fixture()
def country_lookup(monkeypatch, make_country):
    """Route every RestCountries lookup through a ``ScriptedLookup``."""
    scripted = ScriptedLookup(make_country)
    monkeypatch.setattr(RestCountriesClient, "lookup", lambda self, code: scripted(code))
    return scripted
