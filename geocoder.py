"""
Address and postal-code geocoding over the MapQuest HTTP API.
"""

import logging
from typing import List, Optional

import httpx
from pydantic import BaseModel

import config
from errors import Internal, NotFound

logger = logging.getLogger(__name__)


class Location(BaseModel):
    latitude: float
    longitude: float
    formattedAddress: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


def _location_from_mapquest(loc: dict) -> Location:
    lat_lng = loc.get("latLng") or loc.get("displayLatLng") or {}
    parts = [
        loc.get("street"),
        loc.get("adminArea5"),
        " ".join(p for p in (loc.get("adminArea3"), loc.get("postalCode")) if p),
        loc.get("adminArea1"),
    ]
    return Location(
        latitude=lat_lng["lat"],
        longitude=lat_lng["lng"],
        formattedAddress=", ".join(p for p in parts if p),
        street=loc.get("street") or None,
        city=loc.get("adminArea5") or None,
        state=loc.get("adminArea3") or None,
        zipcode=loc.get("postalCode") or None,
        country=loc.get("adminArea1") or None,
    )


class Geocoder:
    def __init__(self, api_key: Optional[str] = None, url: Optional[str] = None, client: Optional[httpx.Client] = None):
        self.api_key = api_key if api_key is not None else config.GEOCODER_API_KEY
        self.url = url or config.GEOCODER_URL
        self.client = client or httpx.Client()

    def geocode(self, query: str) -> List[Location]:
        try:
            response = self.client.get(self.url, params={"key": self.api_key, "location": query})
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Geocoding %r failed: %s", query, e)
            raise Internal("Geocoding service unavailable")

        locations = []
        for result in body.get("results", []):
            for loc in result.get("locations", []):
                if loc.get("latLng") or loc.get("displayLatLng"):
                    locations.append(_location_from_mapquest(loc))
        if not locations:
            raise NotFound(f"No location found for {query}")
        return locations


_geocoder: Optional[Geocoder] = None


def get_geocoder() -> Geocoder:
    global _geocoder
    if _geocoder is None:
        _geocoder = Geocoder()
    return _geocoder
