"""
Shared sample data for the flag quiz tests.
"""
from typing import Dict, List

from country_source import Country


class RecordingPresenter:
    """Presenter that keeps every call for assertions."""

    def __init__(self):
        self.calls = []
        self.questions = []
        self.options = []
        self.outcomes = []
        self.results = []
        self.errors = []

    def render_question(self, question, mode, number, total):
        self.calls.append("render_question")
        self.questions.append((question, mode, number, total))

    def render_options(self, options, mode):
        self.calls.append("render_options")
        self.options.append(tuple(options))

    def mark_option_result(self, outcome):
        self.calls.append("mark_option_result")
        self.outcomes.append(outcome)

    def show_final_result(self, result):
        self.calls.append("show_final_result")
        self.results.append(result)

    def show_error(self, message):
        self.calls.append("show_error")
        self.errors.append(message)


class CountryFixtures:
    """Centralized sample countries and API payloads."""

    @staticmethod
    def country(code: str, name: str = None, un_member: bool = True, localized: str = None) -> Country:
        return Country(
            code=code,
            common_name=name or code.title(),
            flag_image_url=f"https://flagcdn.com/{code.lower()}.svg",
            is_un_member=un_member,
            localized_name=localized,
        )

    @staticmethod
    def sample_countries() -> List[Country]:
        """Twelve countries: eight UN members (five on the easy list) and four non-members."""
        c = CountryFixtures.country
        return [
            c("JPN", "Japan"),
            c("FRA", "France"),
            c("BRA", "Brazil"),
            c("EGY", "Egypt"),
            c("NZL", "New Zealand"),
            c("KEN", "Kenya"),
            c("PER", "Peru"),
            c("MNG", "Mongolia"),
            c("GRL", "Greenland", un_member=False),
            c("PRI", "Puerto Rico", un_member=False),
            c("FRO", "Faroe Islands", un_member=False),
            c("XKX", "Kosovo", un_member=False),
        ]

    @staticmethod
    def api_record(code: str, name: str, un_member: bool = True, jpn: str = None) -> Dict:
        record = {
            "flags": {
                "png": f"https://flagcdn.com/w320/{code[:2].lower()}.png",
                "svg": f"https://flagcdn.com/{code[:2].lower()}.svg",
                "alt": f"The flag of {name}",
            },
            "name": {"common": name, "official": f"Official {name}", "nativeName": {}},
            "cca3": code,
            "independent": un_member,
            "unMember": un_member,
            "translations": {},
        }
        if jpn:
            record["translations"]["jpn"] = {"official": jpn, "common": jpn}
        return record

    @staticmethod
    def api_payload() -> List[Dict]:
        r = CountryFixtures.api_record
        return [
            r("JPN", "Japan", jpn="日本"),
            r("FRA", "France", jpn="フランス"),
            r("GRL", "Greenland", un_member=False),
            r("BRA", "Brazil"),
        ]
