# country_source.py
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import requests

from quiz_settings import (
    COUNTRIES_API_FIELDS,
    COUNTRIES_API_URL,
    REQUEST_TIMEOUT_SECONDS,
    TRANSLATION_LANGUAGE,
    USER_AGENT,
)

logger = logging.getLogger(__name__)


# ---------- Errors ----------
class QuizError(Exception):
    """Base class for every error the quiz reports to its caller."""


class DataFetchError(QuizError):
    """Country data could not be supplied (network, HTTP status or payload)."""


# ---------- Country record ----------
@dataclass(frozen=True)
class Country:
    code: str
    common_name: str
    flag_image_url: str
    is_un_member: bool = False
    localized_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.localized_name or self.common_name

    @classmethod
    def from_api(cls, item: Dict, language: Optional[str] = None) -> Optional["Country"]:
        """Build a Country from one REST Countries record.

        Returns None when the record lacks a cca3 code or a common name.
        """
        code = (item.get("cca3") or "").strip().upper()
        name = ((item.get("name") or {}).get("common") or "").strip()
        if not code or not name:
            return None

        flags = item.get("flags") or {}
        flag_url = (flags.get("svg") or "").strip() or (flags.get("png") or "").strip()

        localized = None
        if language:
            translation = (item.get("translations") or {}).get(language) or {}
            localized = (translation.get("common") or "").strip() or None

        return cls(
            code=code,
            common_name=name,
            flag_image_url=flag_url,
            is_un_member=bool(item.get("unMember", False)),
            localized_name=localized,
        )


def parse_countries(data: Iterable[Dict], language: Optional[str] = None) -> List[Country]:
    """Parse raw API records, skipping unusable ones and duplicate codes."""
    countries: List[Country] = []
    seen = set()
    for item in data:
        if not isinstance(item, dict):
            logger.debug("Skipping non-object country record: %r", item)
            continue
        country = Country.from_api(item, language=language)
        if country is None:
            logger.debug("Skipping country record without code or name: %r", item.get("name"))
            continue
        if country.code in seen:
            logger.debug("Skipping duplicate country code %s", country.code)
            continue
        seen.add(country.code)
        countries.append(country)
    return countries


# ---------- Data sources ----------
class RestCountriesSource:
    """Fetch all countries from the REST Countries API."""

    def __init__(
        self,
        url: str = COUNTRIES_API_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        language: Optional[str] = TRANSLATION_LANGUAGE,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.language = language
        self.session = session

    def fetch_all(self) -> List[Country]:
        http = self.session or requests
        logger.info("Fetching countries from %s", self.url)
        try:
            resp = http.get(
                self.url,
                params={"fields": COUNTRIES_API_FIELDS},
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            logger.error("Country request failed: %s", e)
            raise DataFetchError(f"Could not fetch country data: {e}") from e
        except ValueError as e:
            # requests raises a ValueError subclass for undecodable JSON
            logger.error("Country payload is not valid JSON: %s", e)
            raise DataFetchError("Country data was not valid JSON") from e

        if not isinstance(data, list):
            logger.error("Unexpected country payload type: %s", type(data).__name__)
            raise DataFetchError("Country data had an unexpected shape")

        countries = parse_countries(data, language=self.language)
        if not countries:
            raise DataFetchError("Country data contained no usable countries")
        logger.info("Fetched %d countries", len(countries))
        return countries


class StaticCountrySource:
    """Serve a fixed in-memory list of countries."""

    def __init__(self, countries: Iterable[Country]):
        self._countries = list(countries)

    def fetch_all(self) -> List[Country]:
        if not self._countries:
            raise DataFetchError("No countries available")
        return list(self._countries)
