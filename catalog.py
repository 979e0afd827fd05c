"""Catalog products managed from the admin dashboard."""
import logging
from datetime import datetime, timezone
from typing import List

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pymongo.errors import PyMongoError

from database import create_document, get_documents
from errors import NotFound, TransientIOError, ValidationError
from schemas import CatalogProduct

logger = logging.getLogger(__name__)

CATALOG_COLLECTION = "catalogproduct"
EDITABLE_FIELDS = {"name", "price", "description", "image_url"}


def to_api(doc):
    """Stored document -> response body: string id, camelCase keys."""
    if doc is None:
        return doc
    d = dict(doc)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return {to_camel(k): v for k, v in d.items()}


def _object_id(product_id: str) -> ObjectId:
    if not ObjectId.is_valid(product_id):
        raise NotFound(f"Product not found: {product_id}")
    return ObjectId(product_id)


def _check_db(database):
    if database is None:
        raise TransientIOError("Database not configured")


def list_products(database) -> List[dict]:
    _check_db(database)
    try:
        return [to_api(d) for d in get_documents(CATALOG_COLLECTION, database=database)]
    except PyMongoError as e:
        raise TransientIOError(f"Failed to load products: {e}") from e


def _find(database, product_id: str) -> dict:
    _check_db(database)
    try:
        doc = database[CATALOG_COLLECTION].find_one({"_id": _object_id(product_id)})
    except PyMongoError as e:
        raise TransientIOError(f"Failed to load product: {e}") from e
    if not doc:
        raise NotFound(f"Product not found: {product_id}")
    return doc


def get_product(database, product_id: str) -> dict:
    return to_api(_find(database, product_id))


def add_product(database, product: CatalogProduct) -> str:
    _check_db(database)
    try:
        product_id = create_document(CATALOG_COLLECTION, product, database=database)
    except PyMongoError as e:
        raise TransientIOError(f"Failed to add product: {e}") from e
    logger.info("Catalog product added: %s (%s)", product.name, product_id)
    return product_id


def update_product(database, product_id: str, changes: dict) -> dict:
    """Apply a partial update; unknown fields are rejected."""
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError("Unknown product fields", {k: "Not editable" for k in sorted(unknown)})
    current = _find(database, product_id)
    try:
        merged = CatalogProduct(**{**{k: current[k] for k in EDITABLE_FIELDS if k in current}, **changes})
    except PydanticValidationError as e:
        raise ValidationError("Invalid product", {str(err["loc"][0]): err["msg"] for err in e.errors()}) from e
    try:
        database[CATALOG_COLLECTION].update_one(
            {"_id": _object_id(product_id)},
            {"$set": {**merged.model_dump(), "updated_at": datetime.now(timezone.utc)}},
        )
    except PyMongoError as e:
        raise TransientIOError(f"Failed to update product: {e}") from e
    logger.info("Catalog product updated: %s", product_id)
    return to_api({**current, **merged.model_dump()})


def delete_product(database, product_id: str):
    _check_db(database)
    try:
        result = database[CATALOG_COLLECTION].delete_one({"_id": _object_id(product_id)})
    except PyMongoError as e:
        raise TransientIOError(f"Failed to delete product: {e}") from e
    if result.deleted_count == 0:
        raise NotFound(f"Product not found: {product_id}")
    logger.info("Catalog product deleted: %s", product_id)
