import logging
import re
from typing import NamedTuple, Optional

import requests

from gymbook.core.config import settings
from gymbook.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

COORDINATES_PATTERN = re.compile(r"@(-?\d+\.\d+),(-?\d+\.\d+)")


class Coordinates(NamedTuple):
    latitude: float
    longitude: float


def extract_coordinates(url: str) -> Optional[Coordinates]:
    """Pull `@lat,long` out of an expanded Google Maps URL."""
    match = COORDINATES_PATTERN.search(url or "")
    if not match:
        return None
    return Coordinates(float(match.group(1)), float(match.group(2)))


class Geocoder:
    """Resolves a (possibly shortened) map link to coordinates."""

    def resolve(self, map_link: str) -> Coordinates:
        try:
            response = requests.head(
                map_link,
                allow_redirects=True,
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
            expanded = response.url
        except requests.RequestException as e:
            logger.warning("Could not expand map link %s: %s", map_link, e)
            raise ValidationError("Could not resolve the Google Maps link", field="google_maps_link")

        coordinates = extract_coordinates(expanded)
        if coordinates is None:
            raise ValidationError(
                "Latitude and longitude not found in the Google Maps link",
                field="google_maps_link",
            )
        return coordinates
