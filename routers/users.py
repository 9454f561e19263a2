from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, EmailStr, Field
from pymongo import ReturnDocument
from pymongo.database import Database

from database import create_document, get_db
from errors import NotFound
from helpers import sanitize, to_obj_id
from query import advanced_results
from schemas import Role, User as UserSchema
from security import authorize, hash_password

# Admin only
router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(authorize("admin"))])


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = "user"


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[Role] = None


@router.get("")
def list_users(request: Request, db: Database = Depends(get_db)):
    return advanced_results(db, "user", dict(request.query_params), model=UserSchema)


@router.get("/{user_id}")
def get_user(user_id: str, db: Database = Depends(get_db)):
    user = db["user"].find_one({"_id": to_obj_id(user_id)})
    if not user:
        raise NotFound(f"No user with the id of {user_id}")
    return {"success": True, "data": sanitize(user)}


@router.post("", status_code=201)
def create_user(payload: CreateUserRequest, db: Database = Depends(get_db)):
    user = UserSchema(
        name=payload.name,
        email=payload.email,
        password=hash_password(payload.password),
        role=payload.role,
    )
    return {"success": True, "data": sanitize(create_document(db, "user", user))}


@router.put("/{user_id}")
def update_user(user_id: str, payload: UpdateUserRequest, db: Database = Depends(get_db)):
    update = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "password" in update:
        update["password"] = hash_password(update["password"])
    oid = to_obj_id(user_id)
    if update:
        user = db["user"].find_one_and_update({"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER)
    else:
        user = db["user"].find_one({"_id": oid})
    if not user:
        raise NotFound(f"No user with the id of {user_id}")
    return {"success": True, "data": sanitize(user)}


@router.delete("/{user_id}")
def delete_user(user_id: str, db: Database = Depends(get_db)):
    res = db["user"].delete_one({"_id": to_obj_id(user_id)})
    if res.deleted_count == 0:
        raise NotFound(f"No user with the id of {user_id}")
    return {"success": True, "data": {}}
