from bson import ObjectId

from conftest import API

REVIEW = {"title": "Great bootcamp", "text": "Got a job two weeks after finishing", "rating": 9}


def average_rating(db, bootcamp_id):
    return db["bootcamp"].find_one({"_id": ObjectId(bootcamp_id)}).get("averageRating")


def test_user_reviews_bootcamp_once(client, db, make_user, bootcamp):
    _, headers = make_user("user")
    url = f"{API}/bootcamps/{bootcamp['id']}/reviews"
    res = client.post(url, json=REVIEW, headers=headers)
    assert res.status_code == 201
    assert res.json()["data"]["bootcamp"] == bootcamp["id"]

    res = client.post(url, json={**REVIEW, "rating": 2}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"] == "You have already reviewed this bootcamp"
    assert db["review"].count_documents({}) == 1


def test_publisher_cannot_review(client, publisher, bootcamp):
    _, headers = publisher
    res = client.post(f"{API}/bootcamps/{bootcamp['id']}/reviews", json=REVIEW, headers=headers)
    assert res.status_code == 403


def test_rating_is_bounded(client, make_user, bootcamp):
    _, headers = make_user("user")
    url = f"{API}/bootcamps/{bootcamp['id']}/reviews"
    assert client.post(url, json={**REVIEW, "rating": 11}, headers=headers).status_code == 400
    assert client.post(url, json={**REVIEW, "rating": 0}, headers=headers).status_code == 400


def test_average_rating_tracks_reviews(client, db, make_user, bootcamp):
    url = f"{API}/bootcamps/{bootcamp['id']}/reviews"
    _, first = make_user("user")
    _, second = make_user("user")
    r1 = client.post(url, json={**REVIEW, "rating": 8}, headers=first).json()["data"]
    client.post(url, json={**REVIEW, "rating": 5}, headers=second)
    assert average_rating(db, bootcamp["id"]) == 6.5

    client.put(f"{API}/reviews/{r1['id']}", json={"rating": 10}, headers=first)
    assert average_rating(db, bootcamp["id"]) == 7.5

    client.delete(f"{API}/reviews/{r1['id']}", headers=first)
    assert average_rating(db, bootcamp["id"]) == 5


def test_only_author_or_admin_changes_review(client, make_user, bootcamp):
    _, author = make_user("user")
    review = client.post(f"{API}/bootcamps/{bootcamp['id']}/reviews", json=REVIEW, headers=author).json()["data"]

    _, other = make_user("user")
    assert client.put(f"{API}/reviews/{review['id']}", json={"title": "x"}, headers=other).status_code == 403
    assert client.delete(f"{API}/reviews/{review['id']}", headers=other).status_code == 403

    _, admin = make_user("admin")
    assert client.delete(f"{API}/reviews/{review['id']}", headers=admin).status_code == 200


def test_list_and_get_reviews(client, make_user, bootcamp):
    _, headers = make_user("user")
    review = client.post(f"{API}/bootcamps/{bootcamp['id']}/reviews", json=REVIEW, headers=headers).json()["data"]

    body = client.get(f"{API}/bootcamps/{bootcamp['id']}/reviews").json()
    assert body["count"] == 1

    body = client.get(f"{API}/reviews").json()
    assert body["data"][0]["bootcamp"]["name"] == bootcamp["name"]

    res = client.get(f"{API}/reviews/{review['id']}")
    assert res.status_code == 200
    assert res.json()["data"]["title"] == REVIEW["title"]

    assert client.get(f"{API}/reviews/{ObjectId()}").status_code == 404
