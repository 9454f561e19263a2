import re
from typing import Any, Dict

from bson import ObjectId
from bson.errors import InvalidId

from errors import NotFound

HIDDEN_FIELDS = {"password", "resetPasswordToken", "resetPasswordExpire"}


def to_obj_id(id_str: Any) -> ObjectId:
    if isinstance(id_str, ObjectId):
        return id_str
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise NotFound(f"Resource not found with id of {id_str}")


def _plain(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return sanitize(value)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def sanitize(doc: Dict) -> Dict:
    """Make a stored document JSON friendly: ``_id`` becomes ``id`` and
    references become strings. Credentials never leave the server."""
    if not doc:
        return doc
    d = {}
    for key, value in doc.items():
        if key in HIDDEN_FIELDS:
            continue
        if key == "_id":
            d["id"] = str(value)
            continue
        d[key] = _plain(value)
    return d


def same_id(a: Any, b: Any) -> bool:
    return a is not None and b is not None and str(a) == str(b)


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
