from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document, get_db
from errors import Duplicate, NotFound
from events import ReviewChanged, publish
from helpers import sanitize, to_obj_id
from query import advanced_results
from routers.bootcamps import populate_bootcamp
from schemas import Review as ReviewSchema
from security import authorize, ensure_owner

router = APIRouter(prefix="/reviews", tags=["reviews"])
bootcamp_router = APIRouter(prefix="/bootcamps/{bootcamp_id}/reviews", tags=["reviews"])


class ReviewCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    text: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=10)


class ReviewUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    text: Optional[str] = Field(None, min_length=1)
    rating: Optional[int] = Field(None, ge=1, le=10)


def find_review(db: Database, review_id: str) -> Dict:
    review = db["review"].find_one({"_id": to_obj_id(review_id)})
    if not review:
        raise NotFound(f"No review found with the id of {review_id}")
    return review


def owned_review(action: str):
    def dep(
        review_id: str,
        db: Database = Depends(get_db),
        current_user=Depends(authorize("user", "admin")),
    ) -> Dict:
        review = find_review(db, review_id)
        ensure_owner(review, current_user, action)
        return review
    return dep


@router.get("")
def list_reviews(request: Request, db: Database = Depends(get_db)):
    return advanced_results(
        db, "review", dict(request.query_params), populate=populate_bootcamp, model=ReviewSchema
    )


@bootcamp_router.get("")
def list_bootcamp_reviews(bootcamp_id: str, db: Database = Depends(get_db)):
    reviews = [sanitize(r) for r in db["review"].find({"bootcamp": to_obj_id(bootcamp_id)})]
    return {"success": True, "count": len(reviews), "data": reviews}


@router.get("/{review_id}")
def get_review(review_id: str, db: Database = Depends(get_db)):
    review = find_review(db, review_id)
    populate_bootcamp(db, [review])
    return {"success": True, "data": sanitize(review)}


@bootcamp_router.post("", status_code=201)
def create_review(
    bootcamp_id: str,
    payload: ReviewCreateRequest,
    db: Database = Depends(get_db),
    current_user=Depends(authorize("user", "admin")),
):
    bootcamp = db["bootcamp"].find_one({"_id": to_obj_id(bootcamp_id)})
    if not bootcamp:
        raise NotFound(f"No bootcamp with the id of {bootcamp_id}")

    review = ReviewSchema(**payload.model_dump(), bootcamp=bootcamp["_id"], user=current_user["_id"])
    try:
        doc = create_document(db, "review", review)
    except DuplicateKeyError:
        raise Duplicate("You have already reviewed this bootcamp")
    publish(db, ReviewChanged(bootcamp["_id"]))
    return {"success": True, "data": sanitize(doc)}


@router.put("/{review_id}")
def update_review(
    payload: ReviewUpdateRequest,
    db: Database = Depends(get_db),
    review: Dict = Depends(owned_review("update this review")),
):
    update = payload.model_dump(exclude_unset=True)
    if not update:
        return {"success": True, "data": sanitize(review)}
    ReviewSchema.model_validate({**review, **update})
    doc = db["review"].find_one_and_update(
        {"_id": review["_id"]}, {"$set": update}, return_document=ReturnDocument.AFTER
    )
    if not doc:
        raise NotFound(f"No review found with the id of {review['_id']}")
    publish(db, ReviewChanged(doc["bootcamp"]))
    return {"success": True, "data": sanitize(doc)}


@router.delete("/{review_id}")
def delete_review(
    db: Database = Depends(get_db),
    review: Dict = Depends(owned_review("delete this review")),
):
    db["review"].delete_one({"_id": review["_id"]})
    publish(db, ReviewChanged(review["bootcamp"]))
    return {"success": True, "data": {}}
