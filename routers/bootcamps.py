import logging
import os
from pathlib import Path as FsPath
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Path, Request, UploadFile
from pydantic import BaseModel, EmailStr, Field
from pymongo import ReturnDocument
from pymongo.database import Database

import config
from database import create_document, get_db
from errors import BadUpload, Duplicate, Internal, NotFound
from events import BootcampDeleted, publish
from geocoder import Geocoder, Location, get_geocoder
from helpers import sanitize, slugify, to_obj_id
from query import advanced_results
from schemas import URL_PATTERN, Bootcamp as BootcampSchema, Career, GeoPoint
from security import authorize, ensure_owner, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bootcamps", tags=["bootcamps"])

# Earth radius in miles
EARTH_RADIUS_MI = 3963


class BootcampCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)
    address: str = Field(..., min_length=1)
    careers: List[Career] = Field(..., min_length=1)
    website: Optional[str] = Field(None, pattern=URL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    housing: bool = False
    jobAssistance: bool = False
    jobGuarantee: bool = False
    acceptGi: bool = False


class BootcampUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    address: Optional[str] = Field(None, min_length=1)
    careers: Optional[List[Career]] = Field(None, min_length=1)
    website: Optional[str] = Field(None, pattern=URL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    housing: Optional[bool] = None
    jobAssistance: Optional[bool] = None
    jobGuarantee: Optional[bool] = None
    acceptGi: Optional[bool] = None


def to_geo_point(loc: Location) -> GeoPoint:
    return GeoPoint(
        coordinates=[loc.longitude, loc.latitude],
        formattedAddress=loc.formattedAddress,
        street=loc.street,
        city=loc.city,
        state=loc.state,
        zipcode=loc.zipcode,
        country=loc.country,
    )


def radius_filter(longitude: float, latitude: float, distance_miles: float) -> Dict:
    radius = distance_miles / EARTH_RADIUS_MI
    return {"location": {"$geoWithin": {"$centerSphere": [[longitude, latitude], radius]}}}


def populate_courses(db: Database, docs: List[Dict]) -> None:
    ids = [d["_id"] for d in docs if "_id" in d]
    if not ids:
        return
    by_bootcamp: Dict = {}
    for course in db["course"].find({"bootcamp": {"$in": ids}}):
        by_bootcamp.setdefault(course["bootcamp"], []).append(course)
    for d in docs:
        d["courses"] = by_bootcamp.get(d.get("_id"), [])


def populate_bootcamp(db: Database, docs: List[Dict]) -> None:
    ids = list({d["bootcamp"] for d in docs if d.get("bootcamp")})
    if not ids:
        return
    bootcamps = {
        b["_id"]: b
        for b in db["bootcamp"].find({"_id": {"$in": ids}}, {"name": 1, "description": 1})
    }
    for d in docs:
        if d.get("bootcamp") in bootcamps:
            d["bootcamp"] = bootcamps[d["bootcamp"]]


def find_bootcamp(db: Database, bootcamp_id: str) -> Dict:
    bootcamp = db["bootcamp"].find_one({"_id": to_obj_id(bootcamp_id)})
    if not bootcamp:
        raise NotFound(f"Bootcamp not found with id of {bootcamp_id}")
    return bootcamp


def owned_bootcamp(action: str):
    """Load the bootcamp in the path and require its owner or an admin."""
    def dep(
        bootcamp_id: str,
        db: Database = Depends(get_db),
        current_user=Depends(authorize("publisher", "admin")),
    ) -> Dict:
        bootcamp = find_bootcamp(db, bootcamp_id)
        ensure_owner(bootcamp, current_user, action)
        return bootcamp
    return dep


@router.get("")
def list_bootcamps(request: Request, db: Database = Depends(get_db)):
    return advanced_results(
        db, "bootcamp", dict(request.query_params), populate=populate_courses, model=BootcampSchema
    )


@router.get("/radius/{zipcode}/{distance}")
def bootcamps_in_radius(
    zipcode: str,
    distance: float = Path(..., gt=0),
    db: Database = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
    current_user=Depends(get_current_user),
):
    loc = geocoder.geocode(zipcode)[0]
    bootcamps = [sanitize(b) for b in db["bootcamp"].find(radius_filter(loc.longitude, loc.latitude, distance))]
    return {"success": True, "count": len(bootcamps), "data": bootcamps}


@router.get("/{bootcamp_id}")
def get_bootcamp(bootcamp_id: str, db: Database = Depends(get_db)):
    return {"success": True, "data": sanitize(find_bootcamp(db, bootcamp_id))}


@router.post("", status_code=201)
def create_bootcamp(
    payload: BootcampCreateRequest,
    db: Database = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
    current_user=Depends(authorize("publisher", "admin")),
):
    published = db["bootcamp"].find_one({"user": current_user["_id"]})
    if published and current_user.get("role") != "admin":
        raise Duplicate(f"The user with ID {current_user['_id']} has already published a bootcamp")

    fields = payload.model_dump(exclude={"address"})
    location = to_geo_point(geocoder.geocode(payload.address)[0])
    bootcamp = BootcampSchema(**fields, slug=slugify(payload.name), location=location, user=current_user["_id"])
    doc = create_document(db, "bootcamp", bootcamp)
    logger.info("Bootcamp %s created by %s", doc["_id"], current_user["_id"])
    return {"success": True, "data": sanitize(doc)}


@router.put("/{bootcamp_id}")
def update_bootcamp(
    bootcamp_id: str,
    payload: BootcampUpdateRequest,
    db: Database = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
    bootcamp: Dict = Depends(owned_bootcamp("update this bootcamp")),
):
    update = payload.model_dump(exclude_unset=True)
    address = update.pop("address", None)
    if address:
        update["location"] = to_geo_point(geocoder.geocode(address)[0]).model_dump()
    if update.get("name"):
        update["slug"] = slugify(update["name"])
    if not update:
        return {"success": True, "data": sanitize(bootcamp)}

    # re-run the full schema over the merged document
    BootcampSchema.model_validate({**bootcamp, **update})
    doc = db["bootcamp"].find_one_and_update(
        {"_id": bootcamp["_id"]}, {"$set": update}, return_document=ReturnDocument.AFTER
    )
    if not doc:
        raise NotFound(f"Bootcamp not found with id of {bootcamp_id}")
    return {"success": True, "data": sanitize(doc)}


@router.delete("/{bootcamp_id}")
def delete_bootcamp(
    db: Database = Depends(get_db),
    bootcamp: Dict = Depends(owned_bootcamp("delete this bootcamp")),
):
    db["bootcamp"].delete_one({"_id": bootcamp["_id"]})
    publish(db, BootcampDeleted(bootcamp["_id"]))
    return {"success": True, "data": {}}


@router.put("/{bootcamp_id}/photo")
def upload_bootcamp_photo(
    files: Optional[List[UploadFile]] = File(None, alias="file"),
    db: Database = Depends(get_db),
    bootcamp: Dict = Depends(owned_bootcamp("update this bootcamp")),
):
    files = [f for f in files or [] if f.filename]
    if not files:
        raise BadUpload("Please upload a file")
    if len(files) > 1:
        raise BadUpload("Please upload a single file")
    file = files[0]
    if not (file.content_type or "").startswith("image/"):
        raise BadUpload("Please upload an image file")

    max_size = config.MAX_FILE_UPLOAD
    content = file.file.read(max_size + 1)
    if len(content) > max_size:
        raise BadUpload(f"Please upload an image less than {max_size} bytes")

    ext = os.path.splitext(file.filename)[1]
    filename = f"photo_{bootcamp['_id']}{ext}"
    upload_dir = FsPath(config.FILE_UPLOAD_PATH)
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / filename).write_bytes(content)
    except OSError as e:
        logger.error("Writing %s failed: %s", filename, e)
        raise Internal("Problem with file upload")

    db["bootcamp"].update_one({"_id": bootcamp["_id"]}, {"$set": {"photo": filename}})
    return {"success": True, "data": filename}
