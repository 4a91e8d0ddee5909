"""Country details derived from a geolocation record's country code."""

import pytest

from tracker.core.country_details import (
    CONTINENT_BY_COUNTRY,
    EU_COUNTRIES,
    country_flag,
    with_country_details,
)
from tracker.schemas.event import GeoRecord


def test_flag_is_built_from_regional_indicators():
    flag = country_flag("FR")
    assert flag.emoji == "🇫🇷"
    assert flag.unicode == "U+1F1EB U+1F1F7"


def test_eu_has_twenty_seven_members():
    assert len(EU_COUNTRIES) == 27
    assert "GB" not in EU_COUNTRIES


def test_every_eu_member_is_in_europe():
    assert all(CONTINENT_BY_COUNTRY[code] == "EU" for code in EU_COUNTRIES)


def test_lowercase_code_is_normalised():
    record = with_country_details(GeoRecord(country="br"))

    assert record.country_name == "Brazil"
    assert record.continent.name == "South America"
    assert record.is_eu is False
    assert record.country == "br"


def test_common_name_preferred_when_available():
    assert with_country_details(GeoRecord(country="KR")).country_name == "South Korea"


@pytest.mark.parametrize("country", [None, "", "USA", "1A"])
def test_unusable_code_leaves_record_untouched(country):
    record = GeoRecord(country=country)
    assert with_country_details(record) is record


def test_unknown_two_letter_code_gets_flag_only():
    record = with_country_details(GeoRecord(country="ZZ"))

    assert record.country_name is None
    assert record.continent is None
    assert record.country_flag is not None


def test_original_record_is_not_mutated():
    record = GeoRecord(country="JP", city="Tokyo")

    decorated = with_country_details(record)

    assert decorated.continent.code == "AS"
    assert decorated.city == "Tokyo"
    assert record.continent is None
