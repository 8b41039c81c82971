"""
Database Schemas for the After School Classes API

Each document model maps to a MongoDB collection: Lesson -> "lessons",
Order -> "orders". Request models describe the JSON bodies the routes accept.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, StrictStr


class Lesson(BaseModel):
    """
    Lessons collection schema
    Collection name: "lessons"
    """
    subject: str = Field(..., description="Subject taught, e.g. Math")
    location: str = Field(..., description="Town or venue")
    price: int = Field(..., ge=0, description="Price in whole currency units")
    spaces: int = Field(..., ge=0, description="Remaining booking capacity")
    image: str = Field(..., description="Image filename served under /images")


class Order(BaseModel):
    """
    Orders collection schema
    Collection name: "orders"
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Customer full name")
    phone: str = Field(..., description="Customer phone number, digits only")
    lesson_ids: List[ObjectId] = Field(..., alias="lessonIds")
    lesson_subjects: List[Any] = Field(..., alias="lessonSubjects")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdAt"
    )


class OrderIn(BaseModel):
    name: StrictStr
    phone: StrictStr
    lessonIds: List[StrictStr]


class LessonUpdate(BaseModel):
    # Values are stored as sent; only the set of keys is constrained.
    model_config = ConfigDict(extra="ignore")

    subject: Optional[Any] = None
    location: Optional[Any] = None
    price: Optional[Any] = None
    spaces: Optional[Any] = None


class BookedLesson(BaseModel):
    subject: Any
    location: Any
    price: Any


class OrderCreated(BaseModel):
    message: str
    orderId: str
    lessons: List[BookedLesson]


SAMPLE_LESSONS: List[Lesson] = [
    Lesson(subject=subject, location=location, price=price, spaces=5,
           image=f"{subject.lower()}.jpg")
    for subject, location, price in [
        ("Math", "London", 50),
        ("English", "Manchester", 45),
        ("Science", "Birmingham", 55),
        ("Art", "Leeds", 40),
        ("Music", "Liverpool", 60),
        ("Drama", "Bristol", 35),
        ("Programming", "Glasgow", 70),
        ("Sports", "Cardiff", 30),
        ("Dance", "Edinburgh", 45),
        ("Cooking", "Newcastle", 65),
    ]
]
