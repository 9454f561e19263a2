import pytest
from pymongo import ASCENDING, DESCENDING

from errors import ValidationFailed
from bson import ObjectId

from query import build_filter, build_projection, build_sort, cast_value, field_type
from schemas import Bootcamp, Course


def test_cast_value():
    assert cast_value("10") == 10
    assert cast_value("10.5") == 10.5
    assert cast_value("true") is True
    assert cast_value("false") is False
    assert cast_value("Boston") == "Boston"


def test_build_filter_operators():
    q = build_filter({
        "averageCost[lte]": "10000",
        "averageCost[gt]": "100",
        "careers[in]": "Business,UI/UX",
        "housing": "true",
        "select": "name",
        "page": "2",
    })
    assert q == {
        "averageCost": {"$lte": 10000, "$gt": 100},
        "careers": {"$in": ["Business", "UI/UX"]},
        "housing": True,
    }


def test_build_filter_rejects_operator_injection():
    with pytest.raises(ValidationFailed):
        build_filter({"$where": "sleep(1000)"})
    with pytest.raises(ValidationFailed):
        build_filter({"name[regex]": ".*"})


def test_build_sort_and_projection():
    assert build_sort(None) == [("createdAt", DESCENDING)]
    assert build_sort("-averageCost,name") == [("averageCost", DESCENDING), ("name", ASCENDING)]
    assert build_projection("name,description") == {"name": 1, "description": 1}
    assert build_projection(None) is None


def test_bad_page_is_rejected(client):
    res = client.get("/api/v1/bootcamps", params={"page": "0"})
    assert res.status_code == 400
    res = client.get("/api/v1/bootcamps", params={"limit": "ten"})
    assert res.status_code == 400


def test_filter_values_follow_schema_field_types():
    owner = ObjectId()
    q = build_filter({
        "location.zipcode": "02215",
        "averageCost[lte]": "10000",
        "housing": "true",
        "user": str(owner),
        "careers[in]": "Business,Other",
    }, Bootcamp)
    assert q == {
        "location.zipcode": "02215",
        "averageCost": {"$lte": 10000},
        "housing": True,
        "user": owner,
        "careers": {"$in": ["Business", "Other"]},
    }
    q = build_filter({"weeks": "8", "tuition[gte]": "5000", "scholarshipAvailable": "false"}, Course)
    assert q == {"weeks": "8", "tuition": {"$gte": 5000}, "scholarshipAvailable": False}
    assert build_filter({"weeks[in]": "8,12"}, Course) == {"weeks": {"$in": ["8", "12"]}}


def test_field_type_resolves_nested_and_unknown_paths():
    assert field_type(Bootcamp, "location.zipcode") is str
    assert field_type(Bootcamp, "averageCost") is float
    assert field_type(Bootcamp, "createdAt") is None
    assert field_type(Bootcamp, "location.nope") is None
    assert field_type(None, "weeks") is None
