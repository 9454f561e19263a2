"""
Domain events published by route handlers once a mutation has been written.

Handlers subscribe per event type; ``publish`` calls them in subscription
order, synchronously, with the same database handle the request used.
"""

from collections import defaultdict
from typing import Callable, Dict, List, NamedTuple, Type

from bson import ObjectId
from pymongo.database import Database


class CourseChanged(NamedTuple):
    bootcamp_id: ObjectId


class ReviewChanged(NamedTuple):
    bootcamp_id: ObjectId


class BootcampDeleted(NamedTuple):
    bootcamp_id: ObjectId


Handler = Callable[[Database, NamedTuple], None]

_handlers: Dict[Type, List[Handler]] = defaultdict(list)


def subscribe(event_type: Type):
    def register(fn: Handler) -> Handler:
        _handlers[event_type].append(fn)
        return fn
    return register


def publish(db: Database, event: NamedTuple) -> None:
    for handler in _handlers[type(event)]:
        handler(db, event)
