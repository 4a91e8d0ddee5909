"""Country Details - derived fields added to every geolocation record.

Invariants:
    - Derived purely from the ISO-3166 alpha-2 ``country`` code; no IO
    - Unknown or missing codes leave the record untouched
    - Field names follow the ipinfo SDK decoration: country_name, isEU,
      country_flag {emoji, unicode}, country_flag_url, continent {code, name}
"""

import pycountry

from tracker.schemas.event import Continent, CountryFlag, GeoRecord

COUNTRY_FLAG_URL = "https://cdn.ipinfo.io/static/images/countries-flags/{code}.svg"

EU_COUNTRIES = frozenset(
    "AT BE BG CY CZ DE DK EE ES FI FR GR HR HU IE IT LT LU LV MT NL PL PT RO "
    "SE SI SK".split()
)

CONTINENT_NAMES = {
    "AF": "Africa",
    "AN": "Antarctica",
    "AS": "Asia",
    "EU": "Europe",
    "NA": "North America",
    "OC": "Oceania",
    "SA": "South America",
}

_CONTINENT_MEMBERS = {
    "AF": "AO BF BI BJ BW CD CF CG CI CM CV DJ DZ EG EH ER ET GA GH GM GN GQ GW "
          "KE KM LR LS LY MA MG ML MR MU MW MZ NA NE NG RE RW SC SD SH SL SN SO "
          "SS ST SZ TD TG TN TZ UG YT ZA ZM ZW",
    "AN": "AQ BV GS HM TF",
    "AS": "AE AF AM AZ BD BH BN BT CC CN CX GE HK ID IL IN IO IQ IR JO JP KG KH "
          "KP KR KW KZ LA LB LK MM MN MO MV MY NP OM PH PK PS QA SA SG SY TH TJ "
          "TL TM TR TW UZ VN YE",
    "EU": "AD AL AT AX BA BE BG BY CH CY CZ DE DK EE ES FI FO FR GB GG GI GR HR "
          "HU IE IM IS IT JE LI LT LU LV MC MD ME MK MT NL NO PL PT RO RS RU SE "
          "SI SJ SK SM UA VA XK",
    "NA": "AG AI AW BB BL BM BQ BS BZ CA CR CU CW DM DO GD GL GP GT HN HT JM KN "
          "KY LC MF MQ MS MX NI PA PM PR SV SX TC TT US VC VG VI",
    "OC": "AS AU CK FJ FM GU KI MH MP NC NF NR NU NZ PF PG PN PW SB TK TO TV UM "
          "VU WF WS",
    "SA": "AR BO BR CL CO EC FK GF GY PE PY SR UY VE",
}

CONTINENT_BY_COUNTRY = {
    country: continent
    for continent, members in _CONTINENT_MEMBERS.items()
    for country in members.split()
}

_REGIONAL_INDICATOR_A = 0x1F1E6


def country_name(code: str) -> str | None:
    country = pycountry.countries.get(alpha_2=code)
    if country is None:
        return None
    return getattr(country, "common_name", None) or country.name


def country_flag(code: str) -> CountryFlag:
    points = [_REGIONAL_INDICATOR_A + ord(letter) - ord("A") for letter in code]
    return CountryFlag(
        emoji="".join(chr(p) for p in points),
        unicode=" ".join(f"U+{p:X}" for p in points),
    )


def with_country_details(record: GeoRecord) -> GeoRecord:
    """Return a copy of ``record`` carrying the derived country fields."""
    code = (record.country or "").strip().upper()
    if len(code) != 2 or not code.isascii() or not code.isalpha():
        return record

    update = {
        "country_name": country_name(code),
        "is_eu": code in EU_COUNTRIES,
        "country_flag": country_flag(code),
        "country_flag_url": COUNTRY_FLAG_URL.format(code=code),
    }
    continent = CONTINENT_BY_COUNTRY.get(code)
    if continent:
        update["continent"] = Continent(code=continent, name=CONTINENT_NAMES[continent])
    return record.model_copy(update=update)
