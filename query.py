"""
Advanced results for list endpoints.

Query string conventions:

    ?select=name,description       projection
    ?sort=-averageCost,name        sort keys, ``-`` for descending (default -createdAt)
    ?page=2&limit=10               pagination (defaults 1 and 25)
    ?averageCost[lte]=10000        comparison filters: gt, gte, lt, lte, in
    ?careers[in]=Business,UI/UX    ``in`` takes a comma separated list
    ?housing=true                  plain equality

Values are cast by the declared type of the field in the collection schema,
so ``?weeks=8`` stays a string while ``?averageCost[lte]=10000`` becomes a
number. Fields the schema does not name fall back to guessing from the value.
"""

import re
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple, Type, get_args, get_origin

from bson import ObjectId
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from errors import ValidationFailed
from helpers import sanitize

RESERVED = {"select", "sort", "page", "limit"}
OPERATORS = {"gt", "gte", "lt", "lte", "in"}
DEFAULT_LIMIT = 25

_FILTER_KEY = re.compile(r"^([A-Za-z_][\w.]*)(?:\[(\w+)\])?$")
_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def cast_value(value: str) -> Any:
    if value in ("true", "false"):
        return value == "true"
    if _NUMBER.match(value):
        return float(value) if "." in value else int(value)
    return value


def _unwrap(tp: Any) -> Any:
    # Optional[X] -> X, List[X] -> X; Literal stays as is
    while get_origin(tp) is not None and get_origin(tp) is not Literal:
        args = [a for a in get_args(tp) if a is not type(None)]
        if not args:
            break
        tp = args[0]
    return tp


def field_type(model: Optional[Type[BaseModel]], path: str) -> Any:
    """Declared type of a dotted field path, or None when the model does not name it."""
    tp: Any = model
    for part in path.split("."):
        if not (isinstance(tp, type) and issubclass(tp, BaseModel)) or part not in tp.model_fields:
            return None
        tp = _unwrap(tp.model_fields[part].annotation)
    return tp


def cast_for(tp: Any, value: str) -> Any:
    if tp is None:
        return cast_value(value)
    if tp is bool:
        return value == "true" if value in ("true", "false") else value
    if tp in (int, float):
        return cast_value(value) if _NUMBER.match(value) else value
    if tp is ObjectId:
        return ObjectId(value) if ObjectId.is_valid(value) else value
    return value


def build_filter(params: Dict[str, str], model: Optional[Type[BaseModel]] = None) -> Dict[str, Any]:
    q: Dict[str, Any] = {}
    for key, raw in params.items():
        if key in RESERVED:
            continue
        m = _FILTER_KEY.match(key)
        if not m:
            raise ValidationFailed(f"Invalid query parameter {key}")
        field, op = m.groups()
        tp = field_type(model, field)
        if op is None:
            q[field] = cast_for(tp, raw)
            continue
        if op not in OPERATORS:
            raise ValidationFailed(f"Unsupported operator {op}")
        value = [cast_for(tp, v) for v in raw.split(",")] if op == "in" else cast_for(tp, raw)
        cond = q.setdefault(field, {})
        if not isinstance(cond, dict):
            raise ValidationFailed(f"Conflicting filters on {field}")
        cond[f"${op}"] = value
    return q


def build_projection(select: Optional[str]) -> Optional[Dict[str, int]]:
    if not select:
        return None
    fields = [f.strip() for f in select.split(",") if f.strip()]
    return {f: 1 for f in fields} or None


def build_sort(sort: Optional[str]) -> List[Tuple[str, int]]:
    if not sort:
        return [("createdAt", DESCENDING)]
    keys = []
    for f in sort.split(","):
        f = f.strip()
        if not f:
            continue
        keys.append((f[1:], DESCENDING) if f.startswith("-") else (f, ASCENDING))
    return keys or [("createdAt", DESCENDING)]


def _positive_int(params: Dict[str, str], name: str, default: int) -> int:
    raw = params.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationFailed(f"{name} must be an integer")
    if value < 1:
        raise ValidationFailed(f"{name} must be at least 1")
    return value


def advanced_results(
    db: Database,
    collection: str,
    params: Dict[str, str],
    base_filter: Optional[Dict[str, Any]] = None,
    populate: Optional[Callable[[Database, List[Dict]], None]] = None,
    model: Optional[Type[BaseModel]] = None,
) -> Dict[str, Any]:
    q = build_filter(params, model)
    if base_filter:
        q.update(base_filter)
    page = _positive_int(params, "page", 1)
    limit = _positive_int(params, "limit", DEFAULT_LIMIT)
    start = (page - 1) * limit
    end = page * limit

    coll = db[collection]
    total = coll.count_documents(q)
    cursor = coll.find(q, build_projection(params.get("select")))
    cursor = cursor.sort(build_sort(params.get("sort"))).skip(start).limit(limit)
    docs = list(cursor)
    if populate:
        populate(db, docs)

    pagination: Dict[str, Any] = {}
    if end < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if start > 0:
        pagination["prev"] = {"page": page - 1, "limit": limit}

    data = [sanitize(d) for d in docs]
    return {"success": True, "count": len(data), "pagination": pagination, "data": data}
