"""Country DTOs.

- ``CountryData``: the slice of the RestCountries ``/alpha/{code}`` payload
  we rely on.  Unknown keys are ignored.
- ``CountryFound`` / ``CountryNotFound`` / ``CountryServiceDown``: the tagged
  result of a remote lookup.  The HTTP client never raises; it returns one
  of these and ``CountryService`` decides what each means.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter

# ---------------------------------------------------------------------------
# Upstream payload
# ---------------------------------------------------------------------------


class DemonymForms(BaseModel):
    model_config = ConfigDict(frozen=True)

    f: Optional[str] = None
    m: Optional[str] = None


class Demonyms(BaseModel):
    model_config = ConfigDict(frozen=True)

    eng: Optional[DemonymForms] = None
    spa: Optional[DemonymForms] = None


class CountryName(BaseModel):
    model_config = ConfigDict(frozen=True)

    common: Optional[str] = None
    official: Optional[str] = None


class CountryData(BaseModel):
    """One country entry as returned by RestCountries."""

    model_config = ConfigDict(frozen=True)

    name: Optional[CountryName] = None
    demonyms: Optional[Demonyms] = None
    cca2: Optional[str] = None
    cca3: Optional[str] = None

    @property
    def common_name(self) -> Optional[str]:
        if self.name is None:
            return None
        return _present(self.name.common)

    def display_label(self) -> Optional[str]:
        """English demonym, then Spanish demonym, then common name."""
        if self.demonyms is not None:
            for forms in (self.demonyms.eng, self.demonyms.spa):
                if forms is not None and _present(forms.m):
                    return forms.m.strip()
        common = self.common_name
        return common.strip() if common else None


COUNTRY_LIST = TypeAdapter(List[CountryData])


def _present(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


# ---------------------------------------------------------------------------
# Lookup result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CountryFound:
    code: str
    country: CountryData


@dataclass(frozen=True)
class CountryNotFound:
    code: str


@dataclass(frozen=True)
class CountryServiceDown:
    code: str
    reason: str


CountryLookup = Union[CountryFound, CountryNotFound, CountryServiceDown]
