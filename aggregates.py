"""
Derived bootcamp fields kept in step with courses and reviews.

Average cost and rating are best-effort: a failed write is logged and the
request that triggered it still succeeds. Cascading deletes are not.
"""

import logging
import math
from typing import Optional

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import PyMongoError

from events import BootcampDeleted, CourseChanged, ReviewChanged, subscribe

logger = logging.getLogger(__name__)


def _mean(db: Database, collection: str, bootcamp_id: ObjectId, field: str) -> Optional[float]:
    rows = list(db[collection].aggregate([
        {"$match": {"bootcamp": bootcamp_id}},
        {"$group": {"_id": "$bootcamp", "avg": {"$avg": f"${field}"}}},
    ]))
    if not rows or rows[0].get("avg") is None:
        return None
    return rows[0]["avg"]


def round_cost(mean: float) -> int:
    return int(math.ceil(mean / 10) * 10)


def _write(db: Database, bootcamp_id: ObjectId, field: str, value: Optional[float]) -> None:
    if value is None:
        update = {"$unset": {field: ""}}
    else:
        update = {"$set": {field: value}}
    res = db["bootcamp"].update_one({"_id": bootcamp_id}, update)
    if res.matched_count == 0:
        logger.warning("Bootcamp %s no longer exists, %s not updated", bootcamp_id, field)


def update_average_cost(db: Database, bootcamp_id: ObjectId) -> None:
    try:
        mean = _mean(db, "course", bootcamp_id, "tuition")
        _write(db, bootcamp_id, "averageCost", None if mean is None else round_cost(mean))
    except PyMongoError:
        logger.exception("Could not update average cost of bootcamp %s", bootcamp_id)


def update_average_rating(db: Database, bootcamp_id: ObjectId) -> None:
    try:
        mean = _mean(db, "review", bootcamp_id, "rating")
        _write(db, bootcamp_id, "averageRating", None if mean is None else round(mean, 1))
    except PyMongoError:
        logger.exception("Could not update average rating of bootcamp %s", bootcamp_id)


@subscribe(CourseChanged)
def on_course_changed(db: Database, event: CourseChanged) -> None:
    update_average_cost(db, event.bootcamp_id)


@subscribe(ReviewChanged)
def on_review_changed(db: Database, event: ReviewChanged) -> None:
    update_average_rating(db, event.bootcamp_id)


@subscribe(BootcampDeleted)
def on_bootcamp_deleted(db: Database, event: BootcampDeleted) -> None:
    courses = db["course"].delete_many({"bootcamp": event.bootcamp_id})
    reviews = db["review"].delete_many({"bootcamp": event.bootcamp_id})
    logger.info(
        "Removed %d courses and %d reviews of bootcamp %s",
        courses.deleted_count, reviews.deleted_count, event.bootcamp_id,
    )
