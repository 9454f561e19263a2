import httpx
import pytest

from errors import Internal, NotFound
from geocoder import Geocoder

MAPQUEST_BODY = {
    "results": [{
        "providedLocation": {"location": "02118"},
        "locations": [{
            "street": "",
            "adminArea5": "Boston",
            "adminArea3": "MA",
            "adminArea1": "US",
            "postalCode": "02118",
            "latLng": {"lat": 42.34, "lng": -71.07},
        }],
    }],
}


def geocoder_returning(status, body, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=body)
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return Geocoder(api_key="k", url="https://geo.test/address", client=client)


def test_geocode_parses_mapquest_locations():
    seen = []
    [loc] = geocoder_returning(200, MAPQUEST_BODY, seen).geocode("02118")
    assert (loc.latitude, loc.longitude) == (42.34, -71.07)
    assert loc.city == "Boston"
    assert loc.zipcode == "02118"
    assert loc.street is None
    assert loc.formattedAddress == "Boston, MA 02118, US"
    assert seen[0].url.params["location"] == "02118"
    assert seen[0].url.params["key"] == "k"


def test_geocode_without_match():
    with pytest.raises(NotFound):
        geocoder_returning(200, {"results": [{"locations": []}]}).geocode("00000")


def test_geocode_service_failure():
    with pytest.raises(Internal):
        geocoder_returning(503, {}).geocode("02118")
