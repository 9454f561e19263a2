"""
Radius search against a real MongoDB server.

mongomock does not evaluate ``$geoWithin``/``$centerSphere``, so the suite in
test_bootcamps.py only checks the query the route builds. These tests run
the query for real when TEST_MONGO_URI points at a disposable server, e.g.

    TEST_MONGO_URI=mongodb://localhost:27017 pytest tests/test_radius_mongodb.py
"""

import os
import uuid

import pytest
from bson import ObjectId
from pymongo import MongoClient

from conftest import API
from database import ensure_indexes

MONGO_URI = os.getenv("TEST_MONGO_URI")

pytestmark = pytest.mark.skipif(not MONGO_URI, reason="TEST_MONGO_URI not set")


@pytest.fixture
def db():
    client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=2000)
    name = f"devcamper_test_{uuid.uuid4().hex[:8]}"
    database = client[name]
    ensure_indexes(database)
    yield database
    client.drop_database(name)
    client.close()


def add_bootcamp(db, name, lng, lat):
    db["bootcamp"].insert_one({
        "_id": ObjectId(),
        "name": name,
        "location": {"type": "Point", "coordinates": [lng, lat]},
    })


def test_radius_search_excludes_points_outside_the_cap(client, db, make_user):
    add_bootcamp(db, "Cambridge", -71.1097, 42.3736)
    add_bootcamp(db, "Worcester", -71.8023, 42.2626)
    add_bootcamp(db, "Providence", -71.4128, 41.8240)
    _, headers = make_user("user")

    res = client.get(f"{API}/bootcamps/radius/02215/10", headers=headers)
    assert res.status_code == 200
    assert [b["name"] for b in res.json()["data"]] == ["Cambridge"]

    res = client.get(f"{API}/bootcamps/radius/02215/50", headers=headers)
    assert sorted(b["name"] for b in res.json()["data"]) == ["Cambridge", "Providence", "Worcester"]
