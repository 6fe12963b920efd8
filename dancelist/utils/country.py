import logging
from functools import lru_cache

import pycountry

logger = logging.getLogger(__name__)

# Names used in event files that pycountry doesn't resolve on its own.
COUNTRY_ALIASES: dict[str, str] = {
    "UK": "GBR",
    "ENGLAND": "GBR",
    "SCOTLAND": "GBR",
    "WALES": "GBR",
    "NORTHERN IRELAND": "GBR",
    "NETHERLANDS": "NLD",
    "THE NETHERLANDS": "NLD",
    "USA": "USA",
    "US": "USA",
}


@lru_cache(maxsize=128)
def get_iso_country_code(name: str) -> str | None:
    """
    Resolve a country name to its 3-letter ISO code (Alpha-3).

    Args:
        name: The country name string as written in event files
            (e.g. "Belgium", "UK", "Netherlands").

    Returns:
        ISO 3-letter code (e.g. "BEL", "GBR", "NLD") or None if not found.
    """
    if not name:
        return None

    key = name.strip().upper()
    if key in COUNTRY_ALIASES:
        return COUNTRY_ALIASES[key]

    country = pycountry.countries.get(name=name.strip())
    if country is None and len(key) in (2, 3):
        country = (
            pycountry.countries.get(alpha_2=key)
            if len(key) == 2
            else pycountry.countries.get(alpha_3=key)
        )
    if country is not None:
        return str(country.alpha_3)

    try:
        search_result = pycountry.countries.search_fuzzy(name)
        if search_result:
            # mypy: pycountry types are dynamic
            return str(getattr(search_result[0], "alpha_3", None))
    except LookupError:
        logger.debug(f"No ISO country code for '{name}'")

    return None
