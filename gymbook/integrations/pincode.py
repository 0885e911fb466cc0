import logging
from typing import NamedTuple, Optional

import requests

from gymbook.core.config import settings

logger = logging.getLogger(__name__)


class PincodeDetails(NamedTuple):
    city: str
    state: str


class PincodeLookup:
    """City/state for an Indian pincode via the India Post API."""

    def lookup(self, pincode: str) -> Optional[PincodeDetails]:
        try:
            response = requests.get(
                f"{settings.PINCODE_API_URL}/{pincode}",
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Pincode lookup failed for %s: %s", pincode, e)
            return None

        # [{"Status": "Success", "PostOffice": [{"District": ..., "State": ...}]}]
        if not isinstance(payload, list) or not payload or payload[0].get("Status") != "Success":
            return None
        offices = payload[0].get("PostOffice") or []
        if not offices:
            return None
        office = offices[0]
        city = office.get("District") or office.get("Block")
        state = office.get("State")
        if not city or not state:
            return None
        return PincodeDetails(city=city, state=state)
