from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from pymongo import ReturnDocument
from pymongo.database import Database

from database import create_document, get_db
from errors import NotFound
from events import CourseChanged, publish
from helpers import sanitize, to_obj_id
from query import advanced_results
from routers.bootcamps import owned_bootcamp, populate_bootcamp
from schemas import Course as CourseSchema, Skill
from security import authorize, ensure_owner

router = APIRouter(prefix="/courses", tags=["courses"])
bootcamp_router = APIRouter(prefix="/bootcamps/{bootcamp_id}/courses", tags=["courses"])


class CourseCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    weeks: str = Field(..., min_length=1)
    tuition: float = Field(..., ge=0)
    minimumSkill: Skill
    scholarshipAvailable: bool = False


class CourseUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    weeks: Optional[str] = Field(None, min_length=1)
    tuition: Optional[float] = Field(None, ge=0)
    minimumSkill: Optional[Skill] = None
    scholarshipAvailable: Optional[bool] = None


def find_course(db: Database, course_id: str) -> Dict:
    course = db["course"].find_one({"_id": to_obj_id(course_id)})
    if not course:
        raise NotFound(f"No course with the id of {course_id}")
    return course


def owned_course(action: str):
    def dep(
        course_id: str,
        db: Database = Depends(get_db),
        current_user=Depends(authorize("publisher", "admin")),
    ) -> Dict:
        course = find_course(db, course_id)
        ensure_owner(course, current_user, action)
        return course
    return dep


@router.get("")
def list_courses(request: Request, db: Database = Depends(get_db)):
    return advanced_results(
        db, "course", dict(request.query_params), populate=populate_bootcamp, model=CourseSchema
    )


@bootcamp_router.get("")
def list_bootcamp_courses(bootcamp_id: str, db: Database = Depends(get_db)):
    courses = [sanitize(c) for c in db["course"].find({"bootcamp": to_obj_id(bootcamp_id)})]
    return {"success": True, "count": len(courses), "data": courses}


@router.get("/{course_id}")
def get_course(course_id: str, db: Database = Depends(get_db)):
    course = find_course(db, course_id)
    populate_bootcamp(db, [course])
    return {"success": True, "data": sanitize(course)}


@bootcamp_router.post("", status_code=201)
def create_course(
    payload: CourseCreateRequest,
    db: Database = Depends(get_db),
    current_user=Depends(authorize("publisher", "admin")),
    bootcamp: Dict = Depends(owned_bootcamp("add a course to this bootcamp")),
):
    course = CourseSchema(**payload.model_dump(), bootcamp=bootcamp["_id"], user=current_user["_id"])
    doc = create_document(db, "course", course)
    publish(db, CourseChanged(bootcamp["_id"]))
    return {"success": True, "data": sanitize(doc)}


@router.put("/{course_id}")
def update_course(
    payload: CourseUpdateRequest,
    db: Database = Depends(get_db),
    course: Dict = Depends(owned_course("update this course")),
):
    update = payload.model_dump(exclude_unset=True)
    if not update:
        return {"success": True, "data": sanitize(course)}
    CourseSchema.model_validate({**course, **update})
    doc = db["course"].find_one_and_update(
        {"_id": course["_id"]}, {"$set": update}, return_document=ReturnDocument.AFTER
    )
    if not doc:
        raise NotFound(f"No course with the id of {course['_id']}")
    publish(db, CourseChanged(doc["bootcamp"]))
    return {"success": True, "data": sanitize(doc)}


@router.delete("/{course_id}")
def delete_course(
    db: Database = Depends(get_db),
    course: Dict = Depends(owned_course("delete this course")),
):
    db["course"].delete_one({"_id": course["_id"]})
    publish(db, CourseChanged(course["bootcamp"]))
    return {"success": True, "data": {}}
