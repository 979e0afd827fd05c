"""
Database helpers

Opens a MongoDB connection from DATABASE_URL / DATABASE_NAME. When either is
missing `db` stays None and endpoints that need storage report it.
"""
import os
from datetime import datetime, timezone
from typing import Optional, Union

from pymongo import MongoClient
from pydantic import BaseModel

database_url = os.getenv("DATABASE_URL")
database_name = os.getenv("DATABASE_NAME")

_client = None
db = None

if database_url and database_name:
    _client = MongoClient(database_url)
    db = _client[database_name]


def get_db():
    """FastAPI dependency returning the active database handle."""
    return db


def create_document(collection_name: str, data: Union[BaseModel, dict], database=None) -> str:
    """Insert a document with created/updated timestamps and return its id."""
    target = database if database is not None else db
    if target is None:
        raise Exception("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")

    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = data.copy()

    now = datetime.now(timezone.utc)
    data_dict["created_at"] = now
    data_dict["updated_at"] = now

    result = target[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None, database=None):
    target = database if database is not None else db
    if target is None:
        raise Exception("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")

    cursor = target[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
