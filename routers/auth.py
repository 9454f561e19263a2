import logging
import smtplib
from datetime import datetime, timezone
from typing import Dict, Literal, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field
from pymongo import ReturnDocument
from pymongo.database import Database

import config
from database import create_document, get_db
from errors import Duplicate, Internal, NotFound, Unauthorized, ValidationFailed
from helpers import sanitize
from mailer import Mailer, get_mailer
from schemas import User as UserSchema
from security import (
    create_access_token,
    get_current_user,
    hash_password,
    hash_reset_token,
    new_reset_token,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Literal["user", "publisher"] = "user"


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UpdateDetailsRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None


class UpdatePasswordRequest(BaseModel):
    currentPassword: str
    newPassword: str = Field(..., min_length=6)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str = Field(..., min_length=6)


def token_response(user: Dict, status_code: int = 200) -> JSONResponse:
    """Issue a JWT in the body and as an httpOnly ``token`` cookie."""
    token = create_access_token(str(user["_id"]))
    response = JSONResponse(status_code=status_code, content={"success": True, "token": token})
    response.set_cookie(
        "token",
        token,
        max_age=config.JWT_COOKIE_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=config.is_production(),
    )
    return response


@router.post("/register")
def register(payload: RegisterRequest, db: Database = Depends(get_db)):
    if db["user"].find_one({"email": payload.email}):
        raise Duplicate("Email already registered")
    user = UserSchema(
        name=payload.name,
        email=payload.email,
        password=hash_password(payload.password),
        role=payload.role,
    )
    doc = create_document(db, "user", user)
    logger.info("Registered %s as %s", doc["_id"], doc["role"])
    return token_response(doc)


@router.post("/login")
def login(payload: LoginRequest, db: Database = Depends(get_db)):
    if not payload.email or not payload.password:
        raise ValidationFailed("Please provide an email and password")
    user = db["user"].find_one({"email": payload.email})
    if not user or not verify_password(payload.password, user.get("password", "")):
        raise Unauthorized("Invalid credentials")
    return token_response(user)


@router.get("/logout")
def logout(current_user=Depends(get_current_user)):
    response = JSONResponse(content={"success": True, "data": {}})
    response.set_cookie("token", "none", max_age=10, httponly=True)
    return response


@router.get("/me")
def me(current_user=Depends(get_current_user)):
    return {"success": True, "data": sanitize(current_user)}


@router.put("/updatedetails")
def update_details(
    payload: UpdateDetailsRequest,
    db: Database = Depends(get_db),
    current_user=Depends(get_current_user),
):
    update = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not update:
        return {"success": True, "data": sanitize(current_user)}
    user = db["user"].find_one_and_update(
        {"_id": current_user["_id"]}, {"$set": update}, return_document=ReturnDocument.AFTER
    )
    return {"success": True, "data": sanitize(user)}


@router.put("/updatepassword")
def update_password(
    payload: UpdatePasswordRequest,
    db: Database = Depends(get_db),
    current_user=Depends(get_current_user),
):
    if not verify_password(payload.currentPassword, current_user.get("password", "")):
        raise Unauthorized("Password is incorrect")
    db["user"].update_one(
        {"_id": current_user["_id"]}, {"$set": {"password": hash_password(payload.newPassword)}}
    )
    return token_response(current_user)


@router.post("/forgotpassword")
def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    db: Database = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    user = db["user"].find_one({"email": payload.email})
    if not user:
        raise NotFound("There is no user with that email")

    token, digest, expire = new_reset_token()
    db["user"].update_one(
        {"_id": user["_id"]}, {"$set": {"resetPasswordToken": digest, "resetPasswordExpire": expire}}
    )

    reset_url = str(request.url_for("reset_password", resettoken=token))
    message = (
        "You are receiving this email because you (or someone else) has requested "
        f"the reset of a password. Please make a PUT request to:\n\n{reset_url}"
    )
    try:
        mailer.send(user["email"], "Password reset token", message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Reset mail to %s failed: %s", user["email"], e)
        db["user"].update_one(
            {"_id": user["_id"]}, {"$unset": {"resetPasswordToken": "", "resetPasswordExpire": ""}}
        )
        raise Internal("Email could not be sent")

    return {"success": True, "data": "Email sent"}


@router.put("/resetpassword/{resettoken}", name="reset_password")
def reset_password(resettoken: str, payload: ResetPasswordRequest, db: Database = Depends(get_db)):
    user = db["user"].find_one({"resetPasswordToken": hash_reset_token(resettoken)})
    expire = user.get("resetPasswordExpire") if user else None
    if expire is not None and expire.tzinfo is None:
        # stored dates come back naive unless the client is tz aware
        expire = expire.replace(tzinfo=timezone.utc)
    if not expire or expire <= datetime.now(timezone.utc):
        raise ValidationFailed("Invalid token")

    db["user"].update_one(
        {"_id": user["_id"]},
        {
            "$set": {"password": hash_password(payload.password)},
            "$unset": {"resetPasswordToken": "", "resetPasswordExpire": ""},
        },
    )
    return token_response(user)
