"""
MongoDB data access for lessons and orders.

A single Database object owns the MongoClient for the lifetime of the app.
It is created at startup, handed to routes through a dependency, and closed
at shutdown.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Union

from bson import ObjectId
from pydantic import BaseModel
from pymongo import MongoClient, ReturnDocument
from pymongo.database import Database as MongoDatabase

from config import Settings

logger = logging.getLogger(__name__)

LESSONS = "lessons"
ORDERS = "orders"


class Database:
    def __init__(self, client: MongoClient, name: str):
        self.client = client
        self.name = name
        self._db: Optional[MongoDatabase] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(MongoClient(settings.mongodb_uri), settings.database_name)

    def connect(self) -> "Database":
        self._db = self.client[self.name]
        logger.info("Connected to MongoDB database %s", self.name)
        return self

    def close(self) -> None:
        self.client.close()
        self._db = None
        logger.info("Database connection closed")

    @property
    def db(self) -> MongoDatabase:
        if self._db is None:
            raise RuntimeError("Database is not connected")
        return self._db

    def ping(self) -> bool:
        self.client.admin.command("ping")
        return True

    # Lessons

    def seed_lessons(self, lessons: Iterable[Union[BaseModel, Dict[str, Any]]]) -> int:
        """Insert the given lessons only when the collection is empty."""
        existing = self.db[LESSONS].count_documents({})
        if existing:
            logger.info("Lessons collection already has %d lessons", existing)
            return 0
        docs = [_as_document(lesson) for lesson in lessons]
        if not docs:
            return 0
        self.db[LESSONS].insert_many(docs)
        logger.info("Sample lessons data inserted (%d lessons)", len(docs))
        return len(docs)

    def list_lessons(self) -> List[Dict[str, Any]]:
        return list(self.db[LESSONS].find({}))

    def get_lessons(self, lesson_ids: Iterable[ObjectId]) -> Dict[ObjectId, Dict[str, Any]]:
        ids = list(lesson_ids)
        return {doc["_id"]: doc for doc in self.db[LESSONS].find({"_id": {"$in": ids}})}

    def update_lesson(self, lesson_id: ObjectId, fields: Dict[str, Any]) -> int:
        res = self.db[LESSONS].update_one({"_id": lesson_id}, {"$set": fields})
        return res.matched_count

    def search_lessons(self, text: str, number: Optional[int]) -> List[Dict[str, Any]]:
        """
        Union of a case-insensitive substring match on subject/location and
        an exact match on price/spaces, deduplicated by _id.
        """
        pattern = {"$regex": re.escape(text), "$options": "i"}
        results = list(self.db[LESSONS].find(
            {"$or": [{"subject": pattern}, {"location": pattern}]}
        ))
        if number is not None:
            results.extend(self.db[LESSONS].find(
                {"$or": [{"price": number}, {"spaces": number}]}
            ))

        seen = set()
        unique = []
        for doc in results:
            if doc["_id"] in seen:
                continue
            seen.add(doc["_id"])
            unique.append(doc)
        return unique

    def reserve_space(self, lesson_id: ObjectId) -> Optional[Dict[str, Any]]:
        # Check and decrement in one conditional update; None if no space left
        return self.db[LESSONS].find_one_and_update(
            {"_id": lesson_id, "spaces": {"$gte": 1}},
            {"$inc": {"spaces": -1}},
            return_document=ReturnDocument.AFTER,
        )

    def release_space(self, lesson_id: ObjectId) -> None:
        self.db[LESSONS].update_one({"_id": lesson_id}, {"$inc": {"spaces": 1}})

    # Orders

    def insert_order(self, order: Union[BaseModel, Dict[str, Any]]) -> str:
        result = self.db[ORDERS].insert_one(_as_document(order))
        return str(result.inserted_id)


def _as_document(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    return dict(data)


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Copy a document with its ObjectId _id exposed as a string id."""
    out = dict(doc)
    out["id"] = str(out.pop("_id"))
    return out
