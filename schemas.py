"""
Database Schemas for the Bootcamp Directory

MongoDB collections are defined below using Pydantic models. Each class name is
converted to lowercase for the collection name (Bootcamp -> "bootcamp").

We will use these collections:
- bootcamp: training-program listings, one per publisher
- course: courses offered by a bootcamp
- review: user reviews of a bootcamp
- user: accounts (user, publisher, admin)

References between collections are stored as ObjectId values.
"""

from datetime import datetime
from typing import List, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["user", "publisher", "admin"]
Skill = Literal["beginner", "intermediate", "advanced"]
Career = Literal["Web Development", "Mobile Development", "UI/UX", "Data Science", "Business", "Other"]

URL_PATTERN = r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"


class StoredModel(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, str_strip_whitespace=True)


class GeoPoint(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2, description="[longitude, latitude]")
    formattedAddress: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


class Bootcamp(StoredModel):
    name: str = Field(..., min_length=1, max_length=50)
    slug: str
    description: str = Field(..., min_length=1, max_length=500)
    website: Optional[str] = Field(None, pattern=URL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    location: GeoPoint
    careers: List[Career] = Field(..., min_length=1)
    averageRating: Optional[float] = Field(None, ge=1, le=10)
    averageCost: Optional[float] = None
    photo: str = "no-photo.jpg"
    housing: bool = False
    jobAssistance: bool = False
    jobGuarantee: bool = False
    acceptGi: bool = False
    user: ObjectId = Field(..., description="Owning user _id")


class Course(StoredModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    weeks: str
    tuition: float = Field(..., ge=0)
    minimumSkill: Skill
    scholarshipAvailable: bool = False
    bootcamp: ObjectId
    user: ObjectId


class Review(StoredModel):
    title: str = Field(..., min_length=1, max_length=100)
    text: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=10)
    bootcamp: ObjectId
    user: ObjectId


class User(StoredModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., description="Hashed password, never returned")
    role: Role = "user"
    resetPasswordToken: Optional[str] = None
    resetPasswordExpire: Optional[datetime] = None
