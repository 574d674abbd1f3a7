"""
Country catalogue for phone sign-up and country of residence selection.
"""

from dataclasses import dataclass

from .exceptions import UnknownCountryError

DEFAULT_MIN_PHONE_DIGITS = 7


@dataclass(frozen=True)
class Country:
    """A country with ISO code, display name, dial code and phone length policy."""

    code: str  # ISO 3166-1 alpha-2, e.g. "US"
    name: str
    dial_code: str
    min_phone_digits: int = DEFAULT_MIN_PHONE_DIGITS

    @property
    def flag_url(self) -> str:
        return f"https://flagcdn.com/w80/{self.code.lower()}.png"


UNITED_STATES = Country("US", "United States", "+1", 10)
CANADA = Country("CA", "Canada", "+1", 10)
MEXICO = Country("MX", "Mexico", "+52", 10)
COLOMBIA = Country("CO", "Colombia", "+57", 10)
SPAIN = Country("ES", "Spain", "+34", 9)
UNITED_KINGDOM = Country("GB", "United Kingdom", "+44", 10)
GERMANY = Country("DE", "Germany", "+49")
FRANCE = Country("FR", "France", "+33", 9)
BRAZIL = Country("BR", "Brazil", "+55", 10)
ARGENTINA = Country("AR", "Argentina", "+54", 10)
SINGAPORE = Country("SG", "Singapore", "+65", 8)
JAPAN = Country("JP", "Japan", "+81", 10)
INDIA = Country("IN", "India", "+91", 10)

# All supported countries, sorted by name.
COUNTRIES: tuple[Country, ...] = tuple(
    sorted(
        (
            UNITED_STATES,
            CANADA,
            MEXICO,
            COLOMBIA,
            ARGENTINA,
            BRAZIL,
            SPAIN,
            FRANCE,
            GERMANY,
            UNITED_KINGDOM,
            SINGAPORE,
            JAPAN,
            INDIA,
        ),
        key=lambda country: country.name,
    )
)

_BY_CODE = {country.code: country for country in COUNTRIES}


def find_country(code: str) -> Country:
    """
    Look up a country by ISO code (case-insensitive).

    Raises:
        UnknownCountryError: If the code is not in the catalogue
    """
    try:
        return _BY_CODE[code.strip().upper()]
    except KeyError:
        raise UnknownCountryError(code) from None
