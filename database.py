"""
MongoDB access helpers.

`db` is None when DATABASE_URL / DATABASE_NAME are not configured; routes
check for that and answer 500 instead of crashing at import time.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import MongoClient

import config

logger = logging.getLogger(__name__)


class DatabaseNotConfigured(RuntimeError):
    """DATABASE_URL / DATABASE_NAME are missing."""


db = None

if config.DATABASE_URL and config.DATABASE_NAME:
    client = MongoClient(config.DATABASE_URL, tz_aware=True)
    db = client[config.DATABASE_NAME]
else:
    logger.warning("DATABASE_URL or DATABASE_NAME not set, database disabled")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document, stamping created_at/updated_at. Returns its id as a string."""
    if db is None:
        raise DatabaseNotConfigured("Database not configured")
    if isinstance(data, BaseModel):
        data = data.model_dump()
    doc = dict(data)
    now = _now()
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None, newest_first: bool = False) -> List[dict]:
    if db is None:
        raise DatabaseNotConfigured("Database not configured")
    cursor = db[collection_name].find(filter_dict or {})
    if newest_first:
        cursor = cursor.sort("created_at", -1)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def update_document(collection_name: str, filter_dict: Dict[str, Any], changes: Dict[str, Any],
                    inc: Optional[Dict[str, Any]] = None) -> int:
    """$set the given fields (plus updated_at) on the first matching document."""
    if db is None:
        raise DatabaseNotConfigured("Database not configured")
    update: Dict[str, Any] = {"$set": {**changes, "updated_at": _now()}}
    if inc:
        update["$inc"] = inc
    result = db[collection_name].update_one(filter_dict, update)
    return result.modified_count
