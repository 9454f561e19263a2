import smtplib

import mongomock
import pytest
from fastapi.testclient import TestClient

import main
from database import create_document, get_db
from geocoder import Location, get_geocoder
from mailer import get_mailer
from schemas import User
from security import create_access_token, hash_password

API = "/api/v1"

BOSTON = Location(
    latitude=42.350729,
    longitude=-71.105082,
    formattedAddress="233 Bay State Rd, Boston, MA 02215, US",
    street="233 Bay State Rd",
    city="Boston",
    state="MA",
    zipcode="02215",
    country="US",
)


class FakeGeocoder:
    def __init__(self, location=BOSTON):
        self.location = location
        self.queries = []

    def geocode(self, query):
        self.queries.append(query)
        return [self.location]


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, text):
        if self.fail:
            raise smtplib.SMTPException("connection refused")
        self.sent.append({"to": to, "subject": subject, "text": text})


@pytest.fixture
def db():
    database = mongomock.MongoClient().devcamper_test
    database["user"].create_index("email", unique=True)
    database["bootcamp"].create_index("name", unique=True)
    database["review"].create_index([("bootcamp", 1), ("user", 1)], unique=True)
    return database


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(db, geocoder, mailer):
    main.app.dependency_overrides[get_db] = lambda: db
    main.app.dependency_overrides[get_geocoder] = lambda: geocoder
    main.app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="user", password="123456", email=None):
        counter["n"] += 1
        user = User(
            name=f"{role.title()} {counter['n']}",
            email=email or f"{role}{counter['n']}@example.com",
            password=hash_password(password),
            role=role,
        )
        doc = create_document(db, "user", user)
        headers = {"Authorization": f"Bearer {create_access_token(str(doc['_id']))}"}
        return doc, headers

    return _make


def bootcamp_payload(**overrides):
    payload = {
        "name": "Devworks Bootcamp",
        "description": "Full stack web development with a focus on the MERN stack",
        "website": "https://devworks.com",
        "phone": "(111) 111-1111",
        "email": "enroll@devworks.com",
        "address": "233 Bay State Rd Boston MA 02215",
        "careers": ["Web Development", "UI/UX", "Business"],
        "housing": True,
        "jobAssistance": True,
    }
    payload.update(overrides)
    return payload


def course_payload(**overrides):
    payload = {
        "title": "Front End Web Development",
        "description": "HTML, CSS and JavaScript fundamentals",
        "weeks": "8",
        "tuition": 8000,
        "minimumSkill": "beginner",
        "scholarshipAvailable": True,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def publisher(make_user):
    return make_user("publisher")


@pytest.fixture
def bootcamp(client, publisher):
    _, headers = publisher
    res = client.post(f"{API}/bootcamps", json=bootcamp_payload(), headers=headers)
    assert res.status_code == 201, res.text
    return res.json()["data"]
