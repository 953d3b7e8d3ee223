"""Address to coordinates lookup against a Nominatim compatible endpoint."""

from decimal import Decimal
from typing import Optional, Tuple

import httpx
from flask import current_app

from portal.formatting import full_address


def geocode_address(
    address: Optional[str],
    city: Optional[str],
    state: Optional[str],
    zip_code: Optional[str] = None,
) -> Optional[Tuple[Decimal, Decimal]]:
    """
    Returns (latitude, longitude) for the first match, or None.

    Only attempted when address, city and state are all present. Failures
    are logged and reported as None; the caller keeps the coordinates it has.
    """
    if not (address and city and state):
        return None

    query = full_address(address, city, state, zip_code, "USA")

    try:
        response = httpx.get(
            current_app.config["GEOCODER_URL"],
            params={"format": "json", "q": query, "limit": 1},
            headers={"User-Agent": current_app.config["GEOCODER_USER_AGENT"]},
            timeout=current_app.config["OUTBOUND_TIMEOUT_SECONDS"],
        )
        response.raise_for_status()
        results = response.json()
    except (httpx.HTTPError, ValueError) as e:
        current_app.logger.warning(f"Geocoding failed for '{query}': {e}")
        return None

    if not results:
        current_app.logger.info(f"Geocoder returned no match for '{query}'")
        return None

    try:
        first = results[0]
        return (
            Decimal(str(first["lat"])).quantize(Decimal("0.000001")),
            Decimal(str(first["lon"])).quantize(Decimal("0.000001")),
        )
    except (KeyError, IndexError, TypeError, ArithmeticError) as e:
        current_app.logger.warning(f"Unexpected geocoder response for '{query}': {e}")
        return None
